"""Node arena — directories and files addressed by stable handles.

The tree is stored the way a Unix file system stores its inode table:
a flat ``dict[int, Node]`` keyed by handle.  Directories map child
names to child *handles*, and every non-root node records the handle
of the directory that owns it.  This gives us:

- **Moves are rebinding, not transplanting** — ``mv`` pops a name from
  one directory's map and inserts it into another's; the node and its
  whole subtree stay where they are in the arena.
- **Path reconstruction** — following ``parent`` handles back to the
  root rebuilds a node's absolute path.
- **Tree, not DAG** — ``attach`` refuses a node that already has a
  parent, so no node ever belongs to two directories.

``Node`` is a tagged variant: the shared header (name, permissions,
parent) is always present, and ``kind`` says whether the payload is a
child map (directory) or a block store (file).  Code that needs a
directory dispatches on ``kind`` rather than calling a method that
raises on the wrong variant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from itertools import count
from typing import TYPE_CHECKING

from py_permfs.errors import NodeKindError
from py_permfs.fs.blocks import BLOCK_SIZE, BlockStore
from py_permfs.permissions import Capability, Permissions

if TYPE_CHECKING:
    from collections.abc import Iterator

ROOT_NAME = "/"
ROOT_HANDLE = 0


class NodeKind(StrEnum):
    """The variant tag of a node."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class NodeInfo:
    """Read-only snapshot of a node's header (returned by stat)."""

    handle: int
    name: str
    kind: NodeKind
    owner: str
    capabilities: str
    size: int
    child_count: int = 0


@dataclass
class Node:
    """A directory or a file in the arena.

    For directories, ``children`` maps names to handles and ``blocks``
    is None.  For files, ``blocks`` holds the content and ``children``
    stays empty.
    """

    handle: int
    name: str
    kind: NodeKind
    permissions: Permissions
    parent: int | None = None
    children: dict[str, int] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]
    blocks: BlockStore | None = None

    @property
    def owner(self) -> str:
        """Return the username that owns this node."""
        return self.permissions.owner

    @property
    def is_directory(self) -> bool:
        """Return True for directory nodes."""
        return self.kind is NodeKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        """Return True for file nodes."""
        return self.kind is NodeKind.FILE

    @property
    def size(self) -> int:
        """Return the logical size of a file, or 0 for a directory."""
        return self.blocks.size if self.blocks is not None else 0

    def has_capability(self, username: str, capability: Capability) -> bool:
        """Return True if *username* may exercise *capability* here."""
        return self.permissions.allows(username, capability)

    def to_info(self) -> NodeInfo:
        """Create a read-only snapshot of this node."""
        return NodeInfo(
            handle=self.handle,
            name=self.name,
            kind=self.kind,
            owner=self.owner,
            capabilities=self.permissions.default,
            size=self.size,
            child_count=len(self.children),
        )


class NodeTable:
    """The arena holding every live node, rooted at ``/``."""

    def __init__(
        self,
        *,
        root_owner: str,
        root_capabilities: str,
        block_size: int = BLOCK_SIZE,
    ) -> None:
        """Create an arena containing only the root directory.

        Args:
            root_owner: Username that owns ``/``.
            root_capabilities: Default capability string of ``/``.
            block_size: Block capacity for files created in this arena.

        """
        self._handles = count(start=ROOT_HANDLE)
        self._nodes: dict[int, Node] = {}
        self._block_size = block_size
        root = self._allocate(
            ROOT_NAME,
            NodeKind.DIRECTORY,
            Permissions(owner=root_owner, default=root_capabilities),
        )
        self._root_handle = root.handle

    def _allocate(
        self,
        name: str,
        kind: NodeKind,
        permissions: Permissions,
        blocks: BlockStore | None = None,
    ) -> Node:
        if kind is NodeKind.FILE and blocks is None:
            blocks = BlockStore(block_size=self._block_size)
        node = Node(
            handle=next(self._handles),
            name=name,
            kind=kind,
            permissions=permissions,
            blocks=blocks,
        )
        self._nodes[node.handle] = node
        return node

    @property
    def root(self) -> Node:
        """Return the root directory."""
        return self._nodes[self._root_handle]

    def __len__(self) -> int:
        """Return the number of live nodes, root included."""
        return len(self._nodes)

    def __contains__(self, handle: object) -> bool:
        """Return True if *handle* addresses a live node."""
        return handle in self._nodes

    def get(self, handle: int) -> Node:
        """Return the node for *handle*.

        Raises:
            KeyError: If the handle has been released or never existed.

        """
        return self._nodes[handle]

    def new_directory(self, name: str, *, owner: str, capabilities: str) -> Node:
        """Allocate a detached, empty directory."""
        return self._allocate(name, NodeKind.DIRECTORY, Permissions(owner, capabilities))

    def new_file(self, name: str, *, owner: str, capabilities: str) -> Node:
        """Allocate a detached, empty file."""
        return self._allocate(name, NodeKind.FILE, Permissions(owner, capabilities))

    def child(self, parent: Node, name: str) -> Node | None:
        """Return the child called *name*, or None.

        A file has no children, so looking inside one finds nothing.
        """
        handle = parent.children.get(name)
        return None if handle is None else self._nodes[handle]

    def children(self, parent: Node) -> list[Node]:
        """Return a directory's children sorted by name."""
        return [self._nodes[parent.children[name]] for name in sorted(parent.children)]

    def attach(self, parent: Node, child: Node) -> None:
        """Link a detached *child* into *parent* under ``child.name``.

        Raises:
            NodeKindError: If *parent* is a file.
            ValueError: If *child* already has a parent or the name is taken.

        """
        if parent.is_file:
            msg = f"Files cannot contain children: {parent.name}"
            raise NodeKindError(msg)
        if child.parent is not None:
            msg = f"Node {child.name!r} is already linked"
            raise ValueError(msg)
        if child.name in parent.children:
            msg = f"Duplicate child name: {child.name}"
            raise ValueError(msg)
        parent.children[child.name] = child.handle
        child.parent = parent.handle

    def detach(self, parent: Node, name: str) -> Node:
        """Unlink the child called *name* and return it (still allocated).

        Raises:
            NodeKindError: If *parent* is a file.
            KeyError: If there is no such child.

        """
        if parent.is_file:
            msg = f"Files cannot contain children: {parent.name}"
            raise NodeKindError(msg)
        child = self._nodes[parent.children.pop(name)]
        child.parent = None
        return child

    def descendants(self, node: Node) -> Iterator[Node]:
        """Yield every node below *node* in pre-order (sorted siblings)."""
        for child in self.children(node):
            yield child
            yield from self.descendants(child)

    def is_ancestor(self, ancestor: Node, node: Node) -> bool:
        """Return True if *ancestor* lies on the parent chain of *node*."""
        handle = node.parent
        while handle is not None:
            if handle == ancestor.handle:
                return True
            handle = self._nodes[handle].parent
        return False

    def release(self, node: Node) -> int:
        """Free a detached node and its whole subtree from the arena.

        Returns:
            The number of nodes released.

        """
        doomed = [node, *self.descendants(node)]
        for victim in doomed:
            del self._nodes[victim.handle]
        return len(doomed)

    def clone(self, node: Node) -> Node:
        """Deep-copy *node* and its subtree into new, detached nodes.

        File content is copied block by block; name, owner, default
        capabilities and overrides are preserved.  The source children
        are listed before the copy is linked anywhere, so cloning a
        directory into itself terminates.
        """
        blocks = node.blocks.copy() if node.blocks is not None else None
        copy = self._allocate(node.name, node.kind, node.permissions.copy(), blocks)
        for child in self.children(node):
            self.attach(copy, self.clone(child))
        return copy

    def path_of(self, node: Node) -> str:
        """Rebuild the absolute path of an attached *node*."""
        names: list[str] = []
        current = node
        while current.parent is not None:
            names.append(current.name)
            current = self._nodes[current.parent]
        return "/" + "/".join(reversed(names))
