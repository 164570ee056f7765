import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from handlers import create_interface  # noqa: E402
from protocol import IncomingCall  # noqa: E402
from registry import ObjectRegistry, default_device  # noqa: E402


class FakeTransport:
    """Hands out pre-loaded batches of calls and records replies."""

    def __init__(self, batches=None):
        self.batches = list(batches or [])
        self.replies = []
        self.waits = []

    async def receive(self, timeout):
        self.waits.append(timeout)
        if self.batches:
            return self.batches.pop(0)
        return []

    async def reply(self, call, outcome):
        self.replies.append((call, outcome))


@pytest.fixture
def registry():
    return ObjectRegistry([default_device()])


@pytest.fixture
def interface():
    return create_interface()


@pytest.fixture
def make_call():
    def _make(member, args=(), path='/', interface='org.kde.krunner1', **kwargs):
        return IncomingCall(path=path, interface=interface, member=member, args=list(args), **kwargs)
    return _make


@pytest.fixture
def launches(monkeypatch):
    import handlers
    import subprocess

    calls = []

    def fake_run(argv, **kwargs):
        calls.append(argv)
        return subprocess.CompletedProcess(argv, 0)

    monkeypatch.setattr(handlers.subprocess, 'run', fake_run)
    return calls
