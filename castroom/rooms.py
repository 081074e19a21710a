"""
Room membership and role bookkeeping
"""
import logging
from typing import Dict, List, Optional, Set

from .notify import Notifier
from .state import Room, RoomStore, SessionRegistry

logger = logging.getLogger("castroom")

BROADCASTER = "broadcaster"
VIEWER = "viewer"


class RoomManager:
    def __init__(self, sessions: SessionRegistry, rooms: RoomStore, notifier: Notifier):
        self.sessions = sessions
        self.rooms = rooms
        self.notifier = notifier

    def start_broadcasting(self, session_id: str, room_id: str) -> None:
        self._join(session_id, room_id, BROADCASTER)

    def join_as_viewer(self, session_id: str, room_id: str) -> None:
        self._join(session_id, room_id, VIEWER)

    def _join(self, session_id: str, room_id: str, role: str) -> None:
        if not self.sessions.is_connected(session_id):
            logger.debug("Ignoring %s join from unknown session %s", role, session_id)
            return

        room, created = self.rooms.ensure(room_id)
        if created:
            logger.info("🎪 Room created: %s", room_id)

        # a session holds one role per room; joining in the other role switches it
        if role == BROADCASTER:
            room.viewers.discard(session_id)
            room.broadcasters.add(session_id)
        else:
            room.broadcasters.discard(session_id)
            room.viewers.add(session_id)

        self.notifier.join_group(room_id, session_id)
        self.notifier.send_group(room_id, f"{role}-joined", exclude=session_id, sessionId=session_id)
        self.notifier.send(session_id, "room-state", roomId=room_id, **room.snapshot())

        logger.info("✅ %s joined %s as %s", session_id, room_id, role)

    def leave_room(self, session_id: str, room_id: str) -> None:
        room = self.rooms.get(room_id)
        if room is None or not room.has_member(session_id):
            logger.debug("%s left room %s it was not in", session_id, room_id)
            return

        room.broadcasters.discard(session_id)
        room.viewers.discard(session_id)

        self.notifier.send_group(room_id, "peer-disconnected", exclude=session_id, sessionId=session_id)
        self.notifier.leave_group(room_id, session_id)
        self.notifier.send(session_id, "room-left", roomId=room_id)

        if self.rooms.discard_if_empty(room_id):
            logger.info("🛑 Room closed: %s", room_id)
        logger.info("👋 %s left %s", session_id, room_id)

    def request_stream(self, session_id: str, broadcaster_id: str) -> None:
        # best effort, the broadcaster may already be gone
        self.notifier.send(broadcaster_id, "stream-requested", sessionId=session_id)

    # ------------------------------------------------------------
    # read-only views
    # ------------------------------------------------------------

    def participants(self, room_id: str) -> Dict[str, Set[str]]:
        room = self.rooms.get(room_id) or Room()
        return {"broadcasters": set(room.broadcasters), "viewers": set(room.viewers)}

    def is_room_active(self, room_id: str) -> bool:
        room = self.rooms.get(room_id)
        return room is not None and not room.is_empty()

    def active_rooms(self) -> List[str]:
        return self.rooms.ids()

    def room_stats(self, room_id: str) -> Optional[dict]:
        room = self.rooms.get(room_id)
        if room is None:
            return None
        return room.stats()
