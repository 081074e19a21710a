"""
In-memory state for sessions, rooms and peer links
Owned by a single Broker, never shared across processes
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple


class SessionRegistry:
    """Connected session ids"""

    def __init__(self):
        self._sessions: Set[str] = set()

    def register(self, session_id: str) -> None:
        self._sessions.add(session_id)

    def unregister(self, session_id: str) -> bool:
        """Forget a session, returns False if it was not registered"""
        if session_id not in self._sessions:
            return False
        self._sessions.discard(session_id)
        return True

    def is_connected(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()


@dataclass
class Room:
    broadcasters: Set[str] = field(default_factory=set)
    viewers: Set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not self.broadcasters and not self.viewers

    def has_member(self, session_id: str) -> bool:
        return session_id in self.broadcasters or session_id in self.viewers

    def snapshot(self) -> dict:
        return {
            "broadcasters": sorted(self.broadcasters),
            "viewers": sorted(self.viewers),
        }

    def stats(self) -> dict:
        return {
            "broadcasters": len(self.broadcasters),
            "viewers": len(self.viewers),
            "totalParticipants": len(self.broadcasters) + len(self.viewers),
        }


class RoomStore:
    """room_id -> Room, empty rooms are never kept"""

    def __init__(self):
        # dicts keep insertion order, so ids() lists rooms by creation
        self._rooms: Dict[str, Room] = {}

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def ensure(self, room_id: str) -> Tuple[Room, bool]:
        """Return the room, creating it if needed; second item is True on creation"""
        room = self._rooms.get(room_id)
        if room is not None:
            return room, False
        room = self._rooms[room_id] = Room()
        return room, True

    def discard_if_empty(self, room_id: str) -> bool:
        room = self._rooms.get(room_id)
        if room is None or not room.is_empty():
            return False
        del self._rooms[room_id]
        return True

    def containing(self, session_id: str) -> List[Tuple[str, Room]]:
        return [(rid, room) for rid, room in self._rooms.items() if room.has_member(session_id)]

    def ids(self) -> List[str]:
        return list(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __iter__(self) -> Iterator[Tuple[str, Room]]:
        return iter(list(self._rooms.items()))

    def __len__(self) -> int:
        return len(self._rooms)

    def clear(self) -> None:
        self._rooms.clear()


class PeerLinks:
    """
    Undirected handshake history between sessions.

    Each link is stored as two one-way adjacency entries so either side
    can enumerate its neighbors without a scan.
    """

    def __init__(self):
        self._adjacency: Dict[str, Set[str]] = {}

    def link(self, a: str, b: str) -> None:
        if a == b:
            return
        self._adjacency.setdefault(a, set()).add(b)
        self._adjacency.setdefault(b, set()).add(a)

    def neighbors(self, session_id: str) -> Set[str]:
        return set(self._adjacency.get(session_id, ()))

    def is_linked(self, a: str, b: str) -> bool:
        return b in self._adjacency.get(a, ())

    def drop(self, session_id: str) -> Set[str]:
        """Remove every link touching session_id, returns its former neighbors"""
        peers = self._adjacency.pop(session_id, set())
        # sweep all entries, not just known neighbors, in case a one-way entry slipped in
        for other, adjacent in list(self._adjacency.items()):
            adjacent.discard(session_id)
            if not adjacent:
                del self._adjacency[other]
        return peers

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._adjacency

    def __len__(self) -> int:
        return len(self._adjacency)

    def clear(self) -> None:
        self._adjacency.clear()
