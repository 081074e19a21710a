"""
WebSocket delivery: one bounded outbox and one writer task per session
"""
import asyncio
import logging
from typing import Dict, Optional

from aiohttp import web

from .notify import Notifier

logger = logging.getLogger("castroom")


class Hub(Notifier):
    """Notifier that queues messages for per-connection writer tasks"""

    def __init__(self, outbox_size: int = 256):
        super().__init__()
        self.outbox_size = outbox_size
        self._outboxes: Dict[str, asyncio.Queue] = {}
        self._sockets: Dict[str, web.WebSocketResponse] = {}

    def attach(self, session_id: str, ws: web.WebSocketResponse) -> asyncio.Task:
        """Start delivering to ws, returns the writer task"""
        outbox: asyncio.Queue = asyncio.Queue(maxsize=self.outbox_size)
        self._outboxes[session_id] = outbox
        self._sockets[session_id] = ws
        return asyncio.ensure_future(self._writer(session_id, ws, outbox))

    def detach(self, session_id: str) -> None:
        self._outboxes.pop(session_id, None)
        self._sockets.pop(session_id, None)

    def deliver(self, session_id: str, message: dict) -> None:
        outbox: Optional[asyncio.Queue] = self._outboxes.get(session_id)
        if outbox is None:
            logger.debug(f"No outbox for {session_id}, dropping {message.get('type')}")
            return
        try:
            outbox.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(f"Outbox full for {session_id}, dropping {message.get('type')}")

    async def _writer(self, session_id: str, ws: web.WebSocketResponse, outbox: asyncio.Queue) -> None:
        while True:
            message = await outbox.get()
            if ws.closed:
                break
            try:
                await ws.send_json(message)
            except (ConnectionError, RuntimeError) as e:
                # socket went away mid-send; the read loop will run disconnect cleanup
                logger.debug(f"Failed to send to {session_id}: {e}")
                break

    async def close_all(self, code: int, message: bytes = b"") -> None:
        for ws in list(self._sockets.values()):
            await ws.close(code=code, message=message)

    def clear(self) -> None:
        super().clear()
        self._outboxes.clear()
        self._sockets.clear()
