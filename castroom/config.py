"""
Environment configuration
"""
import os

PORT = int(os.environ.get("PORT", 3001))
HOST = os.environ.get("HOST", "0.0.0.0")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info").upper()
ENVIRONMENT = os.environ.get("ENVIRONMENT", "production")

# Per-session outbound queue bound; overflow drops messages for that session only
OUTBOX_SIZE = int(os.environ.get("CASTROOM_OUTBOX_SIZE", 256))

# WebSocket ping interval in seconds
HEARTBEAT = float(os.environ.get("CASTROOM_HEARTBEAT", 25))
