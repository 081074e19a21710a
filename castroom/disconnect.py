"""
Session termination cleanup across rooms and peer links
"""
import logging

from .notify import Notifier
from .state import PeerLinks, RoomStore, SessionRegistry

logger = logging.getLogger("castroom")


class DisconnectionCoordinator:
    def __init__(self, sessions: SessionRegistry, rooms: RoomStore, links: PeerLinks, notifier: Notifier):
        self.sessions = sessions
        self.rooms = rooms
        self.links = links
        self.notifier = notifier

    def on_session_ended(self, session_id: str) -> None:
        """
        Remove every trace of a session and tell whoever cares.

        Runs to completion without yielding to the event loop, so no other
        event can observe a half-cleaned state. A second call for the same
        session finds nothing left and emits nothing.
        """
        self.notifier.leave_all(session_id)
        self._cleanup_rooms(session_id)
        self._cleanup_links(session_id)

        if self.sessions.unregister(session_id):
            logger.info(f"📡 Session disconnected: {session_id} (remaining: {len(self.sessions)})")

    def _cleanup_rooms(self, session_id: str) -> None:
        for room_id, room in self.rooms.containing(session_id):
            if session_id in room.broadcasters:
                room.broadcasters.discard(session_id)
                self.notifier.send_group(room_id, "broadcaster-left", sessionId=session_id)

            if session_id in room.viewers:
                room.viewers.discard(session_id)
                self.notifier.send_group(room_id, "viewer-left", sessionId=session_id)

            if self.rooms.discard_if_empty(room_id):
                logger.info("🛑 Room closed: %s (last member disconnected)", room_id)

    def _cleanup_links(self, session_id: str) -> None:
        peers = self.links.drop(session_id)
        self.notifier.send_many(sorted(peers), "peer-disconnected", sessionId=session_id)
