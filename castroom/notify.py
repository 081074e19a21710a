"""
Outbound notifications: per-room notification groups and delivery
"""
from typing import Dict, Iterable, Optional, Set


def event(kind: str, **fields) -> dict:
    """Build an outbound message"""
    return {"type": kind, **fields}


class Notifier:
    """
    Tracks which sessions listen to which room and fans messages out.

    Group membership is separate from room roles: a session joins the
    group when it takes a role and leaves it on leave-room or disconnect.
    Subclasses implement deliver(), which must never block.
    """

    def __init__(self):
        self._groups: Dict[str, Set[str]] = {}

    def deliver(self, session_id: str, message: dict) -> None:
        raise NotImplementedError

    def join_group(self, room_id: str, session_id: str) -> None:
        self._groups.setdefault(room_id, set()).add(session_id)

    def leave_group(self, room_id: str, session_id: str) -> None:
        members = self._groups.get(room_id)
        if members is None:
            return
        members.discard(session_id)
        if not members:
            del self._groups[room_id]

    def leave_all(self, session_id: str) -> None:
        for room_id in list(self._groups):
            self.leave_group(room_id, session_id)

    def group(self, room_id: str) -> Set[str]:
        return set(self._groups.get(room_id, ()))

    def send(self, session_id: str, kind: str, **fields) -> None:
        self.deliver(session_id, event(kind, **fields))

    def send_group(self, room_id: str, kind: str, exclude: Optional[str] = None, **fields) -> None:
        message = event(kind, **fields)
        for member in sorted(self.group(room_id)):
            if member != exclude:
                self.deliver(member, message)

    def send_many(self, session_ids: Iterable[str], kind: str, **fields) -> None:
        message = event(kind, **fields)
        for session_id in session_ids:
            self.deliver(session_id, message)

    def clear(self) -> None:
        self._groups.clear()
