"""PyPermFS — an in-memory, permission-aware hierarchical file system.

Quick start::

    from py_permfs import FileSystem, ReadCursor, User

    fs = FileSystem()
    fs.add_user(User(name="alice", permission="rwx", home="/home/alice"))
    fs.touch("/home/alice/notes.txt", "alice")
    fs.write("/home/alice/notes.txt", "alice", b"hello")
"""

from py_permfs.config import ConfigError, FileSystemConfig, load_config
from py_permfs.errors import (
    FileSystemError,
    InvalidOperationError,
    NodeKindError,
    PathAlreadyExistsError,
    PathNotFoundError,
    PermissionDeniedError,
    UserError,
)
from py_permfs.fs import FileSystem, ReadCursor
from py_permfs.permissions import Capability
from py_permfs.users import ROOT_USER, User, UserRegistry

__all__ = [
    "ROOT_USER",
    "Capability",
    "ConfigError",
    "FileSystem",
    "FileSystemConfig",
    "FileSystemError",
    "InvalidOperationError",
    "NodeKindError",
    "PathAlreadyExistsError",
    "PathNotFoundError",
    "PermissionDeniedError",
    "ReadCursor",
    "User",
    "UserError",
    "UserRegistry",
    "load_config",
]
