#!/usr/bin/env python3
import asyncio
from typing import Optional

from dbus_fast import BusType, Message, MessageType
from dbus_fast.aio import MessageBus

from handlers import INTERFACE_NAME
from registry import DEFAULT_PATH
from server import BUS_NAME

# ---------------------------------------------
#  Helper function to show available commands
# ---------------------------------------------

def print_help():
    print("""
Available commands:
  ACTIONS
  MATCH <query>
  RUN <match_id> [action_id]
  HELP
  EXIT
""")

# ---------------------------------------------
#  Build a method call for one command line
# ---------------------------------------------

def make_call(line: str) -> Optional[Message]:
    parts = line.strip().split(' ', 1)
    cmd = parts[0].upper()
    rest = parts[1] if len(parts) > 1 else ''

    if cmd == 'ACTIONS':
        return _method('Actions', '', [])

    if cmd == 'MATCH' and len(parts) == 2:
        return _method('Match', 's', [rest])

    if cmd == 'RUN' and rest.strip():
        run_args = rest.split()
        action_id = run_args[1] if len(run_args) > 1 else ''
        return _method('Run', 'ss', [run_args[0], action_id])

    return None


def _method(member: str, signature: str, body: list) -> Message:
    return Message(
        destination=BUS_NAME,
        path=DEFAULT_PATH,
        interface=INTERFACE_NAME,
        member=member,
        signature=signature,
        body=body,
    )


def format_reply(reply: Message) -> str:
    if reply.message_type is MessageType.ERROR:
        text = reply.body[0] if reply.body else ''
        return f"ERROR {reply.error_name}: {text}"
    if not reply.body:
        return "OK"
    lines = []
    for value in reply.body:
        if isinstance(value, list):
            lines.append(f"{len(value)} result(s)")
            lines.extend(f"  • {item}" for item in value)
        else:
            lines.append(f"  {value}")
    return '\n'.join(lines)

# ---------------------------------------------
#  Start client
# ---------------------------------------------

async def run():
    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    print(f"Connected to the session bus as {bus.unique_name}, talking to {BUS_NAME}.")
    print_help()

    try:
        while True:
            line = input('> ').strip()
            if not line:
                continue
            cmd = line.split(' ', 1)[0].upper()

            if cmd == 'EXIT':
                print("Exiting.")
                break
            if cmd == 'HELP':
                print_help()
                continue

            msg = make_call(line)
            if msg is None:
                print("Unknown command or wrong arguments.")
                print_help()
                continue

            reply = await bus.call(msg)
            print(format_reply(reply))
    finally:
        bus.disconnect()


def main():
    asyncio.run(run())


if __name__ == '__main__':
    main()
