"""
Handshake relay between two explicitly named sessions
"""
import logging
from typing import Any, Optional

from .notify import Notifier
from .state import PeerLinks, SessionRegistry

logger = logging.getLogger("castroom")


class SignalingRelay:
    """Forwards offer/answer/ICE payloads without looking inside them"""

    def __init__(self, sessions: SessionRegistry, links: PeerLinks, notifier: Notifier):
        self.sessions = sessions
        self.links = links
        self.notifier = notifier

    def relay_offer(self, from_session: str, room_id: Optional[str], to_session: str, payload: Any) -> bool:
        return self._forward("offer", from_session, to_session, payload)

    def relay_answer(self, from_session: str, room_id: Optional[str], to_session: str, payload: Any) -> bool:
        return self._forward("answer", from_session, to_session, payload)

    def relay_ice_candidate(self, from_session: str, to_session: str, payload: Any) -> bool:
        return self._forward("ice-candidate", from_session, to_session, payload)

    def _forward(self, kind: str, from_session: str, to_session: str, payload: Any) -> bool:
        # routing is by target id only; roomId plays no part
        if not (self.sessions.is_connected(from_session) and self.sessions.is_connected(to_session)):
            logger.debug("Dropping %s from %s to %s: peer not connected", kind, from_session, to_session)
            return False

        self.links.link(from_session, to_session)
        self.notifier.send(to_session, kind, payload=payload, **{"from": from_session})
        return True
