# interface.py

from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from dbus_fast import SignatureTree, assert_interface_name_valid, assert_member_name_valid
from dbus_fast.errors import InvalidSignatureError

Handler = Callable[[Any], List[Any]]


class DuplicateOperationError(ValueError):
    pass


class Operation(NamedTuple):
    name: str
    input_types: Tuple[str, ...]
    output_types: Tuple[str, ...]
    handler: Handler

    @property
    def in_signature(self) -> str:
        return ''.join(self.input_types)

    @property
    def out_signature(self) -> str:
        return ''.join(self.output_types)


def _check_types(types: Iterable[str]) -> Tuple[str, ...]:
    """
    Each descriptor must be exactly one complete D-Bus type, e.g. 's' or 'a(sss)'.
    """
    checked = []
    for type_ in types:
        if len(SignatureTree(type_).types) != 1:
            raise InvalidSignatureError(f"'{type_}' is not a single complete type")
        checked.append(type_)
    return tuple(checked)


class Interface:
    def __init__(self, name: str, operations: Dict[str, Operation]):
        self._name = name
        self._operations = MappingProxyType(dict(operations))

    @property
    def name(self) -> str:
        return self._name

    @property
    def operations(self):
        return self._operations

    def get(self, name: str) -> Optional[Operation]:
        return self._operations.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._operations


class InterfaceBuilder:
    def __init__(self, name: str):
        assert_interface_name_valid(name)
        self._name = name
        self._operations: Dict[str, Operation] = {}

    def add_operation(self,
                      name: str,
                      input_types: Iterable[str],
                      output_types: Iterable[str],
                      handler: Handler) -> 'InterfaceBuilder':
        assert_member_name_valid(name)
        if name in self._operations:
            raise DuplicateOperationError(f"Operation {name} already defined on {self._name}")
        self._operations[name] = Operation(
            name=name,
            input_types=_check_types(input_types),
            output_types=_check_types(output_types),
            handler=handler,
        )
        return self

    def build(self) -> Interface:
        return Interface(self._name, self._operations)


def define_interface(name: str) -> InterfaceBuilder:
    return InterfaceBuilder(name)
