# protocol.py

from typing import Any, List, NamedTuple, Optional, Union

from dbus_fast import ErrorType, Message, MessageFlag


class IncomingCall(NamedTuple):
    path: str
    interface: Optional[str]
    member: str
    args: List[Any]
    signature: Optional[str] = None
    # incoming bus message, replies are addressed from it
    token: Optional[Message] = None
    reply_expected: bool = True


class Reply(NamedTuple):
    signature: str
    values: List[Any]


class DispatchError(Exception):
    """Base class for errors that are sent back to the caller as a bus error."""

    error_name: str = ErrorType.FAILED.value


class UnknownObjectError(DispatchError):
    error_name = ErrorType.UNKNOWN_OBJECT.value


class UnknownInterfaceError(DispatchError):
    error_name = ErrorType.UNKNOWN_INTERFACE.value


class UnknownMethodError(DispatchError):
    error_name = ErrorType.UNKNOWN_METHOD.value


class ArgumentTypeError(DispatchError):
    error_name = ErrorType.INVALID_ARGS.value


class HandlerError(DispatchError):
    error_name = ErrorType.FAILED.value


class TransportSetupError(Exception):
    pass


class TransportIOError(Exception):
    pass


Outcome = Union[Reply, DispatchError]


class Protocol:
    # served by the bus library itself
    STANDARD_INTERFACES = frozenset({
        'org.freedesktop.DBus.Introspectable',
        'org.freedesktop.DBus.Peer',
        'org.freedesktop.DBus.Properties',
        'org.freedesktop.DBus.ObjectManager',
    })
    # members of Introspectable and Peer, which may be called without an interface
    STANDARD_MEMBERS = frozenset({'Introspect', 'Ping', 'GetMachineId'})

    @staticmethod
    def read_call(msg: Message) -> IncomingCall:
        return IncomingCall(
            path=msg.path,
            interface=msg.interface,
            member=msg.member,
            args=list(msg.body),
            signature=msg.signature,
            token=msg,
            reply_expected=not (msg.flags & MessageFlag.NO_REPLY_EXPECTED),
        )

    @staticmethod
    def make_response(call: IncomingCall, outcome: Outcome) -> Optional[Message]:
        """
        Turn a dispatch outcome into the message sent back to the caller.
        Returns None for one-way calls.
        """
        if not call.reply_expected:
            return None
        if isinstance(outcome, DispatchError):
            return Message.new_error(call.token, outcome.error_name, str(outcome))
        return Message.new_method_return(call.token, outcome.signature, outcome.values)
