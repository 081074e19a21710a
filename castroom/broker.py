"""
Wires the stores and components together and maps inbound events to them
"""
import logging
from typing import Callable, Dict

from .disconnect import DisconnectionCoordinator
from .notify import Notifier
from .relay import SignalingRelay
from .rooms import RoomManager
from .state import PeerLinks, RoomStore, SessionRegistry

logger = logging.getLogger("castroom")


class BadMessage(ValueError):
    """Inbound event that cannot be routed"""


def _require_id(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise BadMessage(f"missing {key}")
    return value


class Broker:
    """
    Owns one store of each kind and the components that mutate them.

    Every method here is synchronous; the event loop runs one at a time,
    which is what keeps room and link updates atomic.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self.sessions = SessionRegistry()
        self.rooms = RoomStore()
        self.links = PeerLinks()

        self.room_manager = RoomManager(self.sessions, self.rooms, notifier)
        self.relay = SignalingRelay(self.sessions, self.links, notifier)
        self.coordinator = DisconnectionCoordinator(self.sessions, self.rooms, self.links, notifier)

        self._handlers: Dict[str, Callable[[str, dict], None]] = {
            "start-broadcasting": self._on_start_broadcasting,
            "join-as-viewer": self._on_join_as_viewer,
            "leave-room": self._on_leave_room,
            "request-stream": self._on_request_stream,
            "offer": self._on_offer,
            "answer": self._on_answer,
            "ice-candidate": self._on_ice_candidate,
        }

    def connect(self, session_id: str) -> None:
        self.sessions.register(session_id)
        logger.info(f"📡 Session connected: {session_id} (total: {len(self.sessions)})")

    def disconnect(self, session_id: str) -> None:
        self.coordinator.on_session_ended(session_id)

    def dispatch(self, session_id: str, data: dict) -> None:
        """Route one inbound event, raises BadMessage if it is malformed"""
        kind = data.get("type")
        if not isinstance(kind, str):
            raise BadMessage(f"unknown type: {kind}")
        handler = self._handlers.get(kind)
        if handler is None:
            raise BadMessage(f"unknown type: {kind}")
        handler(session_id, data)

    def reset(self) -> None:
        self.sessions.clear()
        self.rooms.clear()
        self.links.clear()
        self.notifier.clear()

    # ============================================================
    # EVENT HANDLERS
    # ============================================================

    def _on_start_broadcasting(self, session_id: str, data: dict) -> None:
        self.room_manager.start_broadcasting(session_id, _require_id(data, "roomId"))

    def _on_join_as_viewer(self, session_id: str, data: dict) -> None:
        self.room_manager.join_as_viewer(session_id, _require_id(data, "roomId"))

    def _on_leave_room(self, session_id: str, data: dict) -> None:
        self.room_manager.leave_room(session_id, _require_id(data, "roomId"))

    def _on_request_stream(self, session_id: str, data: dict) -> None:
        self.room_manager.request_stream(session_id, _require_id(data, "targetId"))

    def _on_offer(self, session_id: str, data: dict) -> None:
        target = _require_id(data, "targetId")
        self.relay.relay_offer(session_id, data.get("roomId"), target, data.get("payload"))

    def _on_answer(self, session_id: str, data: dict) -> None:
        target = _require_id(data, "targetId")
        self.relay.relay_answer(session_id, data.get("roomId"), target, data.get("payload"))

    def _on_ice_candidate(self, session_id: str, data: dict) -> None:
        self.relay.relay_ice_candidate(session_id, _require_id(data, "targetId"), data.get("payload"))
