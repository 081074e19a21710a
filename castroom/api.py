"""
HTTP and WebSocket handlers for castroom
Signaling over WebSocket + health check + read-only room listing
"""
import hashlib
import json
import logging
from datetime import datetime, timezone

from aiohttp import WSCloseCode, web

from .broker import BadMessage, Broker
from .hub import Hub
from .utils import generate_session_id

logger = logging.getLogger("castroom")

BROKER = web.AppKey("broker", Broker)
HUB = web.AppKey("hub", Hub)
HEARTBEAT = web.AppKey("heartbeat", float)

# ============================================================
# WEBSOCKET SIGNALING
# ============================================================


def new_session_id(broker: Broker) -> str:
    session_id = generate_session_id()
    while broker.sessions.is_connected(session_id):
        session_id = generate_session_id()
    return session_id


async def ws_signaling(request: web.Request) -> web.WebSocketResponse:
    """One WebSocket per session; every text frame is a JSON event"""
    broker = request.app[BROKER]
    hub = request.app[HUB]

    # a heartbeat of 0 turns pings off
    ws = web.WebSocketResponse(heartbeat=request.app[HEARTBEAT] or None)
    await ws.prepare(request)

    session_id = new_session_id(broker)
    writer = hub.attach(session_id, ws)
    broker.connect(session_id)
    hub.send(session_id, "session", sessionId=session_id)

    try:
        async for msg in ws:
            if msg.type == web.WSMsgType.TEXT:
                if msg.data == "ping":
                    hub.deliver(session_id, {"type": "pong"})
                    continue
                handle_frame(broker, session_id, msg.data)
            elif msg.type == web.WSMsgType.BINARY:
                hub.send(session_id, "error", error="expected a JSON object")
            elif msg.type == web.WSMsgType.ERROR:
                logger.warning(f"WebSocket error for {session_id}: {ws.exception()}")
    finally:
        broker.disconnect(session_id)
        hub.detach(session_id)
        writer.cancel()

    return ws


def handle_frame(broker: Broker, session_id: str, raw: str) -> None:
    """Decode one frame and hand it to the broker, replying with an error event if it is bad"""
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise BadMessage("expected a JSON object")
        broker.dispatch(session_id, data)
    except json.JSONDecodeError:
        broker.notifier.send(session_id, "error", error="invalid json")
    except BadMessage as e:
        logger.debug(f"Rejected event from {session_id}: {e}")
        broker.notifier.send(session_id, "error", error=str(e))


# ============================================================
# HEALTH
# ============================================================


async def api_health(request: web.Request) -> web.Response:
    broker = request.app[BROKER]
    return web.json_response({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "sessions": len(broker.sessions),
    })


# ============================================================
# ROOM LISTING
# ============================================================


def get_rooms_data(broker: Broker) -> list:
    manager = broker.room_manager
    return [
        {"id": room_id, **manager.room_stats(room_id)}
        for room_id in manager.active_rooms()
    ]


async def api_rooms(request: web.Request) -> web.Response:
    """List active rooms with ETag caching"""
    items = get_rooms_data(request.app[BROKER])

    content = json.dumps(items, sort_keys=True)
    etag = hashlib.md5(content.encode()).hexdigest()

    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    response = web.json_response({"ok": True, "rooms": items})
    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = "max-age=5"
    return response


async def api_room(request: web.Request) -> web.Response:
    room_id = request.match_info["room_id"]
    stats = request.app[BROKER].room_manager.room_stats(room_id)
    if stats is None:
        return web.json_response(
            {"ok": False, "error": "unknown room"},
            status=404
        )
    return web.json_response({"ok": True, "id": room_id, **stats})


# ============================================================
# LIFECYCLE
# ============================================================


async def on_shutdown(app: web.Application) -> None:
    logger.info("Closing open sessions")
    await app[HUB].close_all(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")


async def on_cleanup(app: web.Application) -> None:
    app[BROKER].reset()
