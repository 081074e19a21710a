#!/usr/bin/env python3
"""
castroom - Entry Point
WebSocket signaling + health check + room listing
"""
import logging
import socket
from typing import Optional

from aiohttp import web

from castroom import config
from castroom.api import (
    BROKER, HEARTBEAT, HUB,
    api_health, api_room, api_rooms, on_cleanup, on_shutdown, ws_signaling
)
from castroom.broker import Broker
from castroom.hub import Hub

logger = logging.getLogger("castroom")


def create_app(outbox_size: Optional[int] = None, heartbeat: Optional[float] = None) -> web.Application:
    """Create and configure the aiohttp application"""
    app = web.Application()

    hub = Hub(outbox_size=config.OUTBOX_SIZE if outbox_size is None else outbox_size)
    app[HUB] = hub
    app[BROKER] = Broker(hub)
    app[HEARTBEAT] = config.HEARTBEAT if heartbeat is None else heartbeat

    app.router.add_get("/health", api_health)
    app.router.add_get("/rooms", api_rooms)
    app.router.add_get("/rooms/{room_id}", api_room)

    # WebSocket signaling
    app.router.add_get("/ws", ws_signaling)

    app.on_shutdown.append(on_shutdown)
    app.on_cleanup.append(on_cleanup)
    return app


def get_local_ip():
    """Get local network IP address"""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except OSError:
        return "localhost"


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    app = create_app()

    logger.info(f"🚀 Server is running on {config.HOST}:{config.PORT} ({config.ENVIRONMENT})")
    logger.info(f"💡 Signaling at: ws://{get_local_ip()}:{config.PORT}/ws")

    web.run_app(app, host=config.HOST, port=config.PORT, print=None)


if __name__ == "__main__":
    main()
