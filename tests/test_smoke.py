"""End-to-end check of the public package surface."""

import pytest

import py_permfs
from py_permfs import FileSystem, PermissionDeniedError, ReadCursor, User


def test_public_names_resolve() -> None:
    """Every name in __all__ should be importable from the package."""
    for name in py_permfs.__all__:
        assert hasattr(py_permfs, name), name


def test_quick_start() -> None:
    """The documented quick start should work and enforce ownership."""
    fs = FileSystem()
    fs.add_user(User(name="alice", permission="rwx", home="/home/alice"))
    fs.touch("/home/alice/notes.txt", "alice")
    fs.write("/home/alice/notes.txt", "alice", b"hello")

    buffer = bytearray(16)
    count = fs.read("/home/alice/notes.txt", "alice", buffer, ReadCursor())
    assert bytes(buffer[:count]) == b"hello"

    fs.add_user(User(name="bob", permission="rwx", home="/home/bob"))
    with pytest.raises(PermissionDeniedError):
        fs.read("/home/alice/notes.txt", "bob", buffer, ReadCursor())
