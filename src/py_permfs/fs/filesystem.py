"""Permission-aware in-memory file system — the operation layer.

Every public operation follows the same three steps:

1. **Resolve** the path(s) involved through the ``PathResolver``.
2. **Check** the acting user's capability on the resolved node(s).
3. **Mutate** the node arena and/or the file's block store.

Which capability each operation needs:

============  ==========================================================
Operation     Required capability
============  ==========================================================
mkdir         write on each directory that gains a *new* child
touch         write on the parent directory
write         write on the file
read          read on the file
rm            write on the target (and every descendant if recursive)
mv            write on the source node
cp            read on the source, write on the destination directory
ls            read on the listed directory
chmod         write on the node
============  ==========================================================

Operations are synchronous and single-threaded.  A failing operation
raises one of the ``py_permfs.errors`` kinds and never returns a
partial result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_permfs.config import FileSystemConfig
from py_permfs.errors import (
    InvalidOperationError,
    NodeKindError,
    PathAlreadyExistsError,
    PathNotFoundError,
    PermissionDeniedError,
    UserError,
)
from py_permfs.fs.nodes import NodeInfo, NodeKind, NodeTable
from py_permfs.fs.paths import (
    ROOT_PATH,
    SEPARATOR,
    PathResolver,
    child_path,
    is_root,
    normalize,
    split_path,
    split_segments,
)
from py_permfs.logging import Logger, LogLevel
from py_permfs.permissions import FULL_ACCESS, Capability, validate_capabilities
from py_permfs.users import ROOT_USER, User, UserRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from py_permfs.fs.blocks import BlockStore
    from py_permfs.fs.nodes import Node

_FS_SOURCE = "fs"
_USERS_SOURCE = "users"


class ReadCursor:
    """A byte position within a file, advanced by ``read``.

    The same cursor can be passed to successive reads to stream a file
    in buffer-sized pieces, like the offset of an open file description.
    """

    def __init__(self, value: int = 0) -> None:
        """Create a cursor at *value*."""
        self.value = value

    def clamp(self, maximum: int) -> None:
        """Keep the cursor within ``[0, maximum]``."""
        self.value = max(0, min(self.value, maximum))

    def advance(self, count: int) -> None:
        """Move the cursor forward by *count* bytes."""
        self.value += count

    def __repr__(self) -> str:
        """Return a readable representation."""
        return f"ReadCursor(value={self.value})"


@dataclass(frozen=True)
class ListingEntry:
    """One child in a directory listing."""

    path: str
    name: str
    kind: NodeKind
    capabilities: str
    owner: str
    size: int

    def render(self) -> str:
        """Format as ``drwx root 0 docs`` (``-`` instead of ``d`` for files)."""
        marker = "d" if self.kind is NodeKind.DIRECTORY else "-"
        return f"{marker}{self.capabilities} {self.owner} {self.size} {self.name}"


@dataclass(frozen=True)
class DirectoryListing:
    """The entries of one directory, headed by its absolute path."""

    path: str
    entries: tuple[ListingEntry, ...]

    def render(self) -> str:
        """Format as a ``path:`` header followed by indented entries."""
        lines = [f"{self.path}:"]
        lines.extend(f"  {entry.render()}" for entry in self.entries)
        return "\n".join(lines) + "\n"


class FileSystem:
    """A tree of directories and files guarded by per-user capabilities.

    The file system starts with only ``/``, owned by ``root`` with
    ``rwx``.  The user registry is injected so tests (and callers
    that share users across trees) can supply their own.
    """

    def __init__(
        self,
        *,
        config: FileSystemConfig | None = None,
        users: UserRegistry | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a file system containing only the root directory.

        Args:
            config: Construction settings (defaults to ``FileSystemConfig()``).
            users: Registry of users; a fresh one holding only root by default.
            logger: Audit log; a fresh one by default.

        """
        self._config = config if config is not None else FileSystemConfig()
        self._users = users if users is not None else UserRegistry()
        self._logger = (
            logger if logger is not None else Logger(capacity=self._config.log_capacity)
        )
        self._nodes = NodeTable(
            root_owner=ROOT_USER,
            root_capabilities=FULL_ACCESS,
            block_size=self._config.block_size,
        )
        self._resolver = PathResolver(self._nodes)

    # -- Accessors -----------------------------------------------------------

    @property
    def config(self) -> FileSystemConfig:
        """Return the construction settings."""
        return self._config

    @property
    def users(self) -> UserRegistry:
        """Return the user registry."""
        return self._users

    @property
    def logger(self) -> Logger:
        """Return the audit log."""
        return self._logger

    @property
    def node_count(self) -> int:
        """Return the number of live nodes, root included."""
        return len(self._nodes)

    def resolve(self, path: str) -> Node:
        """Return the node at *path* (no permission check).

        Raises:
            PathNotFoundError: If any component is missing.

        """
        return self._resolver.resolve(path)

    def exists(self, path: str) -> bool:
        """Check whether *path* resolves to a node."""
        return self._resolver.lookup(path) is not None

    def stat(self, path: str, user: str | None = None) -> NodeInfo:
        """Return a metadata snapshot of the node at *path*.

        With *user*, that user needs read on the containing directory
        (on ``/`` itself for the root), the same right that lets ``ls``
        show the entry.  Without it the lookup is unchecked, like
        ``resolve``.

        Raises:
            PathNotFoundError: If the path does not exist.
            PermissionDeniedError: If *user* may not list the container.

        """
        node = self._resolver.resolve(path)
        if user is not None:
            if node.parent is None:
                self._require(node, user, Capability.READ, ROOT_PATH)
            else:
                self._require(
                    self._nodes.get(node.parent), user, Capability.READ, split_path(path)[0]
                )
        return node.to_info()

    # -- Helpers -------------------------------------------------------------

    def _audit(self, message: str, *, user: str, source: str = _FS_SOURCE) -> None:
        self._logger.log(LogLevel.INFO, message, source=source, user=user)

    def _denied(self, message: str, *, user: str) -> PermissionDeniedError:
        """Log a refused request and return the error for the caller to raise."""
        self._logger.log(LogLevel.WARNING, message, source=_FS_SOURCE, user=user)
        return PermissionDeniedError(message)

    def _require(self, node: Node, user: str, capability: Capability, path: str) -> None:
        if not node.has_capability(user, capability):
            msg = f"Permission denied: {user} lacks {capability.name.lower()} on {path}"
            raise self._denied(msg, user=user)

    def _account(self, user: str) -> User:
        account = self._users.get(user)
        if account is None:
            msg = f"User not found: {user}"
            raise self._denied(msg, user=user)
        return account

    def _require_file(self, node: Node, path: str, verb: str) -> None:
        if not node.is_file:
            msg = f"Cannot {verb} a directory: {path}"
            raise InvalidOperationError(msg)

    @staticmethod
    def _blocks(node: Node) -> BlockStore:
        if node.blocks is None:
            msg = f"File has no block store: {node.name}"
            raise NodeKindError(msg)
        return node.blocks

    # -- Directories ---------------------------------------------------------

    def mkdir(self, path: str, user: str) -> None:
        """Create *path* and any missing ancestors (``mkdir -p``).

        Only directories that gain a new child are permission-checked;
        descending through existing directories needs no capability, so
        repeating a mkdir is a silent no-op.  New directories inherit
        the default capability string of their parent and are owned by
        *user*.

        Raises:
            PermissionDeniedError: If *user* lacks write on a directory
                that would gain a child, or is not registered.
            InvalidOperationError: If a component is an existing file.

        """
        current = self._nodes.root
        walked = ROOT_PATH
        for segment in split_segments(path):
            walked = child_path(walked, segment)
            existing = self._nodes.child(current, segment)
            if existing is None:
                self._require(current, user, Capability.WRITE, walked)
                account = self._account(user)
                created = self._nodes.new_directory(
                    segment,
                    owner=account.name,
                    capabilities=current.permissions.default,
                )
                self._nodes.attach(current, created)
                self._audit(f"mkdir {walked}", user=user)
                current = created
            elif existing.is_file:
                msg = f"Cannot create a directory inside a file: {walked}"
                raise InvalidOperationError(msg)
            else:
                current = existing

    def chmod(self, path: str, user: str, target_user: str, capabilities: str) -> None:
        """Set *target_user*'s capability override on the node at *path*.

        The override replaces any previous one for that user.  The
        target does not have to be registered yet.

        Raises:
            PathNotFoundError: If the path does not exist.
            PermissionDeniedError: If *user* lacks write on the node.
            InvalidOperationError: If *capabilities* is malformed.

        """
        validate_capabilities(capabilities)
        node = self._resolver.resolve(path)
        self._require(node, user, Capability.WRITE, path)
        node.permissions.set_override(target_user, capabilities)
        self._audit(f"chmod {path} {target_user}={capabilities}", user=user)

    def rm(self, path: str, user: str, *, recursive: bool = False) -> None:
        """Remove the file or directory at *path*.

        With *recursive*, every descendant must grant write to *user*.
        The whole subtree is checked before anything is unlinked, so a
        refusal leaves the tree exactly as it was.

        Raises:
            PermissionDeniedError: For the root, for a missing write
                capability anywhere in the removed subtree, or for a
                non-empty directory without *recursive*.
            PathNotFoundError: If the target does not exist.

        """
        if is_root(path):
            msg = "Cannot remove the root directory"
            raise self._denied(msg, user=user)

        parent, name = self._resolver.resolve_parent(path)
        target = self._nodes.child(parent, name)
        if target is None:
            msg = f"Path not found: {normalize(path)}"
            raise PathNotFoundError(msg)
        self._require(target, user, Capability.WRITE, path)

        if target.is_directory and target.children:
            if not recursive:
                msg = f"Directory not empty: {path} (use recursive removal)"
                raise self._denied(msg, user=user)
            for descendant in self._nodes.descendants(target):
                if not descendant.has_capability(user, Capability.WRITE):
                    blocked = self._nodes.path_of(descendant)
                    msg = f"Permission denied: {user} cannot remove {blocked}"
                    raise self._denied(msg, user=user)

        self._nodes.detach(parent, name)
        released = self._nodes.release(target)
        self._audit(f"rm {normalize(path)} ({released} nodes)", user=user)

    # -- Files ---------------------------------------------------------------

    def touch(self, path: str, user: str) -> None:
        """Create an empty file, creating missing parent directories first.

        The file is owned by *user* and gets *user*'s default
        capability string.

        Raises:
            InvalidOperationError: For ``/``, a trailing separator, or a
                parent that is a file.
            PermissionDeniedError: If *user* lacks write on the parent
                (or on any directory created along the way), or is not
                registered.
            PathAlreadyExistsError: If the name is already taken.

        """
        if is_root(path) or path.endswith(SEPARATOR):
            msg = f"Invalid file name: {path!r}"
            raise InvalidOperationError(msg)

        parent_path, name = split_path(path)
        self.mkdir(parent_path, user)
        parent = self._resolver.resolve(parent_path)

        self._require(parent, user, Capability.WRITE, parent_path)
        if parent.is_file:
            msg = f"Cannot create a file inside a file: {parent_path}"
            raise InvalidOperationError(msg)
        if name in parent.children:
            msg = f"Already exists: {normalize(path)}"
            raise PathAlreadyExistsError(msg)

        account = self._account(user)
        created = self._nodes.new_file(name, owner=account.name, capabilities=account.permission)
        self._nodes.attach(parent, created)
        self._audit(f"touch {normalize(path)}", user=user)

    def write(self, path: str, user: str, data: bytes, *, append: bool = False) -> int:
        """Write *data* to an existing file.

        Without *append* the previous content is discarded first.

        Returns:
            The number of bytes written.

        Raises:
            PathNotFoundError: If the file does not exist.
            InvalidOperationError: If the path is a directory.
            PermissionDeniedError: If *user* lacks write on the file.

        """
        node = self._resolver.resolve(path)
        self._require_file(node, path, "write to")
        self._require(node, user, Capability.WRITE, path)
        blocks = self._blocks(node)
        if not append:
            blocks.clear()
        written = blocks.append(data)
        mode = "append" if append else "write"
        self._audit(f"{mode} {normalize(path)} ({written} bytes)", user=user)
        return written

    def read(
        self,
        path: str,
        user: str,
        buffer: bytearray | memoryview,
        cursor: ReadCursor,
    ) -> int:
        """Read from a file at *cursor* into *buffer*.

        The cursor is first clamped to the file size; at end-of-file
        nothing is copied.  Otherwise the cursor advances by the number
        of bytes copied.

        Returns:
            The number of bytes copied into *buffer*.

        Raises:
            PathNotFoundError: If the file does not exist.
            InvalidOperationError: If the path is a directory.
            PermissionDeniedError: If *user* lacks read on the file.

        """
        node = self._resolver.resolve(path)
        self._require_file(node, path, "read from")
        self._require(node, user, Capability.READ, path)
        blocks = self._blocks(node)
        cursor.clamp(blocks.size)
        if cursor.value >= blocks.size:
            return 0
        copied = blocks.read_at(cursor.value, buffer)
        cursor.advance(copied)
        return copied

    # -- Moving and copying --------------------------------------------------

    def mv(self, old_path: str, new_path: str, user: str) -> None:
        """Move and/or rename a node.

        The destination's parent must exist; the destination name must
        not.  Existing nodes are never overwritten.

        Raises:
            PermissionDeniedError: If either path is the root, or *user*
                lacks write on the source.
            PathNotFoundError: If the source or the destination parent
                does not exist.
            InvalidOperationError: If the destination parent is a file,
                or a directory would be moved inside itself.
            PathAlreadyExistsError: If the destination name is taken.

        """
        if is_root(old_path) or is_root(new_path):
            msg = "Cannot move the root directory"
            raise self._denied(msg, user=user)

        old_parent, old_name = self._resolver.resolve_parent(old_path)
        node = self._nodes.child(old_parent, old_name)
        if node is None:
            msg = f"Path not found: {normalize(old_path)}"
            raise PathNotFoundError(msg)
        self._require(node, user, Capability.WRITE, old_path)

        new_parent, new_name = self._resolver.resolve_parent(new_path)
        if new_parent.is_file:
            msg = f"Destination parent is a file: {split_path(new_path)[0]}"
            raise InvalidOperationError(msg)
        if new_name in new_parent.children:
            msg = f"Already exists: {normalize(new_path)}"
            raise PathAlreadyExistsError(msg)
        if new_parent is node or self._nodes.is_ancestor(node, new_parent):
            msg = f"Cannot move {normalize(old_path)} inside itself"
            raise InvalidOperationError(msg)

        self._nodes.detach(old_parent, old_name)
        node.name = new_name
        self._nodes.attach(new_parent, node)
        self._audit(f"mv {normalize(old_path)} {normalize(new_path)}", user=user)

    def cp(self, src_path: str, dst_path: str, user: str, *, recursive: bool = False) -> None:
        """Copy a node *into* the existing directory *dst_path*.

        The copy keeps the source's name, owner, capabilities and
        overrides.  File content is duplicated block by block, so later
        writes to either side do not affect the other.

        Raises:
            PathNotFoundError: If either path does not exist.
            PermissionDeniedError: If *user* lacks read on the source or
                write on the destination, or the source is a directory
                and *recursive* is False.
            InvalidOperationError: If the destination is a file or the
                source is the root.
            PathAlreadyExistsError: If the destination already holds a
                node with the source's name.

        """
        source = self._resolver.resolve(src_path)
        destination = self._resolver.resolve(dst_path)
        self._require(source, user, Capability.READ, src_path)
        self._require(destination, user, Capability.WRITE, dst_path)

        if destination.is_file:
            msg = f"Copy destination must be a directory: {dst_path}"
            raise InvalidOperationError(msg)
        if source.is_directory:
            if not recursive:
                msg = f"Copying a directory requires recursive copy: {src_path}"
                raise self._denied(msg, user=user)
            if source is self._nodes.root:
                msg = "Cannot copy the root directory"
                raise InvalidOperationError(msg)
        if source.name in destination.children:
            msg = f"Already exists: {child_path(normalize(dst_path), source.name)}"
            raise PathAlreadyExistsError(msg)

        copy = self._nodes.clone(source)
        self._nodes.attach(destination, copy)
        self._audit(f"cp {normalize(src_path)} {normalize(dst_path)}", user=user)

    # -- Listing -------------------------------------------------------------

    def walk(self, path: str, user: str, *, recursive: bool = False) -> Iterator[DirectoryListing]:
        """Return a lazy depth-first producer of directory listings.

        The read check on *path* happens immediately; the tree is
        walked as the iterator is consumed.  Each directory's own
        listing comes before the listings of its subdirectories.

        Raises:
            PathNotFoundError: If the path does not exist.
            InvalidOperationError: If the path is a file.
            PermissionDeniedError: If *user* lacks read on the directory.

        """
        node = self._resolver.resolve(path)
        if node.is_file:
            msg = f"Not a directory: {path}"
            raise InvalidOperationError(msg)
        self._require(node, user, Capability.READ, path)
        return self._walk(node, normalize(path), recursive=recursive)

    def _walk(self, node: Node, path: str, *, recursive: bool) -> Iterator[DirectoryListing]:
        children = self._nodes.children(node)
        yield DirectoryListing(
            path=path,
            entries=tuple(
                ListingEntry(
                    path=child_path(path, child.name),
                    name=child.name,
                    kind=child.kind,
                    capabilities=child.permissions.default,
                    owner=child.owner,
                    size=child.size,
                )
                for child in children
            ),
        )
        if recursive:
            for child in children:
                if child.is_directory:
                    yield from self._walk(child, child_path(path, child.name), recursive=True)

    def ls(self, path: str, user: str, *, recursive: bool = False) -> str:
        """Return a textual listing of the directory at *path*.

        See ``walk`` for ordering and errors.
        """
        return "".join(listing.render() for listing in self.walk(path, user, recursive=recursive))

    # -- Users ---------------------------------------------------------------

    def add_user(self, user: User) -> None:
        """Register *user* and grant them their capabilities on their home.

        The home directory is created by the root user if it does not
        exist yet.  A duplicate name is rejected before anything changes.

        Raises:
            UserError: If the name is already registered.
            InvalidOperationError: If the capability string is malformed
                or the home path runs through a file.

        """
        if user.name in self._users:
            msg = f"User '{user.name}' already exists"
            raise UserError(msg)
        validate_capabilities(user.permission)

        home = self._resolver.lookup(user.home)
        if home is None:
            self.mkdir(user.home, self._users.root.name)
            home = self._resolver.resolve(user.home)
        home.permissions.set_override(user.name, user.permission)
        self._users.add(user)
        self._audit(
            f"adduser {user.name} home={normalize(user.home)}",
            user=user.name,
            source=_USERS_SOURCE,
        )

    def remove_user(self, name: str) -> User:
        """Unregister the user called *name*.

        Nodes they own and overrides naming them are left in place.

        Raises:
            UserError: If the user is unknown or is root.

        """
        removed = self._users.remove(name)
        self._audit(f"deluser {name}", user=name, source=_USERS_SOURCE)
        return removed
