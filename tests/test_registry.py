import pytest
from dbus_fast import InvalidObjectPathError

from registry import DEFAULT_PATH, Device, ObjectRegistry, default_device


def test_default_device():
    device = default_device()
    assert device.path == DEFAULT_PATH == '/'
    assert device.description == 'A simple krunner test'


def test_lookup_by_path():
    first = Device('first', '/org/example/first')
    second = Device('second', '/org/example/second')
    registry = ObjectRegistry([first, second])

    assert registry.get('/org/example/first') is first
    assert registry.get('/org/example/second') is second
    assert registry.get('/org/example') is None
    assert '/org/example/first' in registry
    assert len(registry) == 2
    assert registry.paths() == ['/org/example/first', '/org/example/second']


def test_rejects_duplicate_paths():
    with pytest.raises(ValueError):
        ObjectRegistry([Device('a', '/dup'), Device('b', '/dup')])


@pytest.mark.parametrize('path', ['', 'relative', '/trailing/', '/double//slash', '/bad-char'])
def test_rejects_invalid_paths(path):
    with pytest.raises(InvalidObjectPathError):
        ObjectRegistry([Device('bad', path)])
