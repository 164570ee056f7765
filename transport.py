# transport.py

import asyncio
import logging
from typing import List, Optional

from dbus_fast import BusType, DBusFastError, Message, MessageType, NameFlag, RequestNameReply
from dbus_fast.aio import MessageBus

from protocol import IncomingCall, Outcome, Protocol, TransportIOError, TransportSetupError


class BusTransport:
    """
    Queues incoming method calls from the bus and sends replies back.
    Calls on the standard org.freedesktop.DBus interfaces, or to their members
    without an interface, are left to the library.
    """

    def __init__(self, bus: MessageBus):
        self._bus = bus
        self._queue: asyncio.Queue = asyncio.Queue()
        bus.add_message_handler(self._on_message)

    @classmethod
    async def connect(cls, bus_name: str, bus_type: BusType = BusType.SESSION) -> 'BusTransport':
        try:
            bus = await MessageBus(bus_type=bus_type).connect()
        except (OSError, DBusFastError) as e:
            raise TransportSetupError(f"Cannot connect to the {bus_type.name.lower()} bus: {e}") from e

        transport = cls(bus)
        try:
            reply = await bus.request_name(bus_name, NameFlag.DO_NOT_QUEUE)
        except (OSError, DBusFastError) as e:
            bus.disconnect()
            raise TransportSetupError(f"Cannot request name {bus_name}: {e}") from e

        if reply not in (RequestNameReply.PRIMARY_OWNER, RequestNameReply.ALREADY_OWNER):
            bus.disconnect()
            raise TransportSetupError(f"Name {bus_name} is not available ({reply.name})")

        logging.info(f"Registered {bus_name} as {bus.unique_name}")
        return transport

    def _on_message(self, msg: Message) -> Optional[bool]:
        if msg.message_type is not MessageType.METHOD_CALL:
            return None
        if msg.interface in Protocol.STANDARD_INTERFACES:
            return None
        if msg.interface is None and msg.member in Protocol.STANDARD_MEMBERS:
            return None
        self._queue.put_nowait(Protocol.read_call(msg))
        return True

    async def receive(self, timeout: float) -> List[IncomingCall]:
        """
        Wait up to `timeout` seconds for a call, then return every call
        that is immediately available. Returns [] on timeout.
        """
        if not self._bus.connected:
            raise TransportIOError("Connection to the bus was lost")
        try:
            first = await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return []
        calls = [first]
        while True:
            try:
                calls.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                break
        return calls

    async def reply(self, call: IncomingCall, outcome: Outcome) -> None:
        msg = Protocol.make_response(call, outcome)
        if msg is None:
            return
        try:
            await self._bus.send(msg)
        except (OSError, DBusFastError) as e:
            raise TransportIOError(f"Failed to send reply to {call.member}: {e}") from e

    def close(self) -> None:
        self._bus.disconnect()
