"""Error kinds raised by filesystem operations.

Every user-facing failure derives from ``FileSystemError`` so callers
(the shell, the web UI) can catch the whole family with one clause and
render its message.  The kinds map onto the classic errno families:

- **PathNotFoundError** — ``ENOENT``: a path component does not exist.
- **PathAlreadyExistsError** — ``EEXIST``: a create targets a used name.
- **PermissionDeniedError** — ``EACCES`` / ``EPERM``: the acting user
  lacks a capability, is not registered, or a structural rule forbids
  the action (removing the root, non-recursive removal of a non-empty
  directory).
- **InvalidOperationError** — ``ENOTDIR`` / ``EISDIR``: the request
  makes no sense for the node kind, independent of permissions.
- **UserError** — user registry failures (duplicate or unknown names).

``NodeKindError`` is deliberately *not* a ``FileSystemError``: it flags
a broken internal invariant (a file asked to hold children) and should
never be reachable through the public operations.
"""


class FileSystemError(Exception):
    """Base class for every user-facing filesystem failure."""


class PathNotFoundError(FileSystemError):
    """Raise when path resolution fails at some segment."""


class PathAlreadyExistsError(FileSystemError):
    """Raise when a create-style operation targets an existing name."""


# We define our own PermissionDeniedError to avoid shadowing the built-in
# PermissionError, which is an OSError with errno semantics.
class PermissionDeniedError(FileSystemError):
    """Raise when the acting user may not perform an operation."""


class InvalidOperationError(FileSystemError):
    """Raise when a request is structurally nonsensical."""


class UserError(FileSystemError):
    """Raise when a user registry operation fails."""


class NodeKindError(TypeError):
    """Raise when a file node is asked to attach or detach children."""
