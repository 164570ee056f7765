# registry.py

from types import MappingProxyType
from typing import Dict, Iterable, List, NamedTuple, Optional

from dbus_fast import assert_object_path_valid

DEFAULT_PATH = '/'


class Device(NamedTuple):
    description: str
    path: str


def default_device() -> Device:
    return Device(description='A simple krunner test', path=DEFAULT_PATH)


class ObjectRegistry:
    def __init__(self, devices: Iterable[Device]):
        # object path → device
        devices_by_path: Dict[str, Device] = {}
        for device in devices:
            assert_object_path_valid(device.path)
            if device.path in devices_by_path:
                raise ValueError(f"Object path {device.path} registered twice")
            devices_by_path[device.path] = device
        self._devices = MappingProxyType(devices_by_path)

    def get(self, path: str) -> Optional[Device]:
        return self._devices.get(path)

    def paths(self) -> List[str]:
        return list(self._devices)

    def __contains__(self, path: object) -> bool:
        return path in self._devices

    def __len__(self) -> int:
        return len(self._devices)
