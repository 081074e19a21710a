"""End to end walk through one broadcaster and one viewer, driven by raw events"""
import pytest

from castroom.broker import BadMessage

OFFER = {"type": "offer", "sdp": "v=0 ..."}


def test_broadcast_view_offer_disconnect_leave(broker, notifier):
    # broadcaster opens the room
    broker.dispatch("S1", {"type": "start-broadcasting", "roomId": "room1"})
    assert broker.room_manager.participants("room1") == {"broadcasters": {"S1"}, "viewers": set()}
    assert notifier.to("S1")[-1] == {"type": "room-state", "roomId": "room1", "broadcasters": ["S1"], "viewers": []}

    # viewer joins
    notifier.reset()
    broker.dispatch("S2", {"type": "join-as-viewer", "roomId": "room1"})
    assert broker.room_manager.participants("room1")["viewers"] == {"S2"}
    assert notifier.to("S1") == [{"type": "viewer-joined", "sessionId": "S2"}]
    assert notifier.to("S2") == [{"type": "room-state", "roomId": "room1", "broadcasters": ["S1"], "viewers": ["S2"]}]

    # viewer sends an offer to the broadcaster
    notifier.reset()
    broker.dispatch("S2", {"type": "offer", "payload": OFFER, "roomId": "room1", "targetId": "S1"})
    assert notifier.to("S1") == [{"type": "offer", "payload": OFFER, "from": "S2"}]
    assert broker.links.is_linked("S1", "S2")

    # broadcaster drops
    notifier.reset()
    broker.disconnect("S1")
    assert notifier.to("S2") == [
        {"type": "broadcaster-left", "sessionId": "S1"},
        {"type": "peer-disconnected", "sessionId": "S1"},
    ]
    assert broker.room_manager.participants("room1") == {"broadcasters": set(), "viewers": {"S2"}}
    assert "room1" in broker.rooms

    # viewer leaves the now broadcaster-less room
    broker.dispatch("S2", {"type": "leave-room", "roomId": "room1"})
    assert "room1" not in broker.rooms


def test_dispatch_routes_every_event(broker, notifier):
    broker.dispatch("S1", {"type": "start-broadcasting", "roomId": "r"})
    broker.dispatch("S2", {"type": "request-stream", "targetId": "S1"})
    broker.dispatch("S1", {"type": "answer", "payload": "a", "targetId": "S2"})
    broker.dispatch("S2", {"type": "ice-candidate", "payload": "c", "targetId": "S1"})

    assert ("S1", {"type": "stream-requested", "sessionId": "S2"}) in notifier.sent
    assert ("S2", {"type": "answer", "payload": "a", "from": "S1"}) in notifier.sent
    assert ("S1", {"type": "ice-candidate", "payload": "c", "from": "S2"}) in notifier.sent


@pytest.mark.parametrize("data", [
    {"type": "teleport", "roomId": "r"},
    {"type": ["offer"], "roomId": "r"},
    {"type": {}},
    {"roomId": "r"},
    {"type": "start-broadcasting"},
    {"type": "join-as-viewer", "roomId": ""},
    {"type": "leave-room", "roomId": 42},
    {"type": "offer", "payload": "o", "roomId": "r"},
    {"type": "ice-candidate", "payload": "c"},
    {"type": "request-stream"},
])
def test_malformed_events_are_rejected(broker, notifier, data):
    with pytest.raises(BadMessage):
        broker.dispatch("S1", data)
    assert notifier.sent == []
    assert len(broker.rooms) == 0


def test_reset_clears_everything(broker, notifier):
    broker.dispatch("S1", {"type": "start-broadcasting", "roomId": "r"})
    broker.dispatch("S2", {"type": "offer", "payload": "o", "targetId": "S1"})

    broker.reset()

    assert len(broker.rooms) == 0
    assert len(broker.links) == 0
    assert len(broker.sessions) == 0
    assert notifier.group("r") == set()
