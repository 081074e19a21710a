import pytest

from castroom.broker import Broker
from castroom.notify import Notifier


class RecordingNotifier(Notifier):
    def __init__(self):
        super().__init__()
        self.sent = []

    def deliver(self, session_id, message):
        self.sent.append((session_id, message))

    def to(self, session_id):
        return [m for sid, m in self.sent if sid == session_id]

    def of_type(self, kind):
        return [(sid, m) for sid, m in self.sent if m["type"] == kind]

    def reset(self):
        self.sent.clear()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def broker(notifier):
    b = Broker(notifier)
    for sid in ("S1", "S2", "S3"):
        b.connect(sid)
    return b
