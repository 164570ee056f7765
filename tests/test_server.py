import pytest

import server
from protocol import TransportIOError, TransportSetupError


class BrokenTransport:
    def __init__(self):
        self.closed = False

    async def receive(self, timeout):
        raise TransportIOError('Connection to the bus was lost')

    async def reply(self, call, outcome):
        pass

    def close(self):
        self.closed = True


def test_exits_when_setup_fails(monkeypatch):
    async def refuse(bus_name):
        raise TransportSetupError(f"Name {bus_name} is not available (EXISTS)")

    monkeypatch.setattr(server.BusTransport, 'connect', refuse)
    with pytest.raises(SystemExit) as exc_info:
        server.main()
    assert exc_info.value.code == 1


def test_exits_when_connection_is_lost(monkeypatch):
    transport = BrokenTransport()

    async def connect(bus_name):
        assert bus_name == server.BUS_NAME
        return transport

    monkeypatch.setattr(server.BusTransport, 'connect', connect)
    with pytest.raises(SystemExit) as exc_info:
        server.main()
    assert exc_info.value.code == 1
    assert transport.closed
