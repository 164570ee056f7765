#!/usr/bin/env python3
import asyncio
import logging
import signal
import sys
from typing import Optional

from dbus_fast import SignatureBodyMismatchError, SignatureTree

from handlers import HandlerContext, create_interface
from interface import Interface
from protocol import (
    ArgumentTypeError,
    DispatchError,
    HandlerError,
    IncomingCall,
    Outcome,
    Reply,
    TransportIOError,
    TransportSetupError,
    UnknownInterfaceError,
    UnknownMethodError,
    UnknownObjectError,
)
from registry import ObjectRegistry, default_device
from transport import BusTransport

logging.basicConfig(level=logging.INFO)

BUS_NAME = 'com.louischauvet.krunner_cnrtl'
POLL_TIMEOUT = 1.0


def dispatch(call: IncomingCall, registry: ObjectRegistry, interface: Interface) -> Outcome:
    """
    Route a call to its handler. Resolution order is object, interface,
    method, arguments; the first failing step decides the error returned.
    """
    try:
        return _invoke(call, registry, interface)
    except DispatchError as e:
        logging.warning(f"{call.interface}.{call.member} on {call.path}: {e.error_name}: {e}")
        return e


def _invoke(call: IncomingCall, registry: ObjectRegistry, interface: Interface) -> Reply:
    device = registry.get(call.path)
    if device is None:
        raise UnknownObjectError(f"No such object path '{call.path}'")

    # interface-less calls are resolved against the only interface we expose
    if call.interface is not None and call.interface != interface.name:
        raise UnknownInterfaceError(f"No such interface '{call.interface}' at object path '{call.path}'")

    operation = interface.get(call.member)
    if operation is None:
        raise UnknownMethodError(f"No such method '{call.member}' in interface '{interface.name}'")

    if call.signature is not None and call.signature != operation.in_signature:
        raise ArgumentTypeError(
            f"Method '{call.member}' expects signature '{operation.in_signature}', got '{call.signature}'")
    try:
        SignatureTree(operation.in_signature).verify(list(call.args))
    except SignatureBodyMismatchError as e:
        raise ArgumentTypeError(f"Invalid arguments for '{call.member}': {e}") from e

    logging.info(f"Handling {interface.name}.{call.member}")
    try:
        values = operation.handler(HandlerContext(device, list(call.args)))
        SignatureTree(operation.out_signature).verify(values)
    except Exception as e:
        raise HandlerError(f"{call.member} failed: {e}") from e
    return Reply(operation.out_signature, values)


async def serve(transport,
                registry: ObjectRegistry,
                interface: Interface,
                stop: Optional[asyncio.Event] = None,
                max_iterations: Optional[int] = None,
                timeout: float = POLL_TIMEOUT) -> None:
    """
    Wait up to `timeout` for calls, handle every call that arrived, repeat.
    Runs until `stop` is set or `max_iterations` waits have completed.
    """
    iterations = 0
    while stop is None or not stop.is_set():
        if max_iterations is not None and iterations >= max_iterations:
            break
        iterations += 1

        calls = await transport.receive(timeout)
        for call in calls:
            outcome = dispatch(call, registry, interface)
            if call.reply_expected:
                await transport.reply(call, outcome)


async def run() -> None:
    registry = ObjectRegistry([default_device()])
    interface = create_interface()

    transport = await BusTransport.connect(BUS_NAME)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    logging.info(f"Serving {interface.name} on {', '.join(registry.paths())}")
    try:
        await serve(transport, registry, interface, stop=stop)
    finally:
        transport.close()
        logging.info("Bus connection closed")


def main():
    try:
        asyncio.run(run())
    except (TransportSetupError, TransportIOError) as e:
        logging.error(f"{e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
