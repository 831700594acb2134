"""Path handling and resolution.

Paths are slash-delimited and always interpreted from the root; there
is no working directory.  The resolver is forgiving about separators:
``""``, ``"/"`` and ``"//"`` all mean the root, and ``"a//b/"`` is the
same as ``"/a/b"``.

Resolution walks component by component::

    /home/alice/notes.txt
      root ─► "home" ─► "alice" ─► "notes.txt"

and fails with ``PathNotFoundError`` at the first component that is
not a child of the current node.  Files have no children, so walking
*through* a file is simply "not found".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_permfs.errors import PathNotFoundError

if TYPE_CHECKING:
    from py_permfs.fs.nodes import Node, NodeTable

SEPARATOR = "/"
ROOT_PATH = "/"


def split_segments(path: str) -> list[str]:
    """Return the non-empty components of *path*."""
    return [part for part in path.split(SEPARATOR) if part]


def is_root(path: str) -> bool:
    """Return True if *path* names the root directory."""
    return not split_segments(path)


def join_path(segments: list[str]) -> str:
    """Build an absolute path from components (``[]`` is the root)."""
    return ROOT_PATH + SEPARATOR.join(segments)


def normalize(path: str) -> str:
    """Return the canonical absolute form of *path*."""
    return join_path(split_segments(path))


def child_path(parent: str, name: str) -> str:
    """Append *name* to the directory path *parent*."""
    if parent == ROOT_PATH:
        return ROOT_PATH + name
    return parent.rstrip(SEPARATOR) + SEPARATOR + name


def split_path(path: str) -> tuple[str, str]:
    """Split a path into (parent_path, child_name).

    Examples::

        "/foo/bar/baz.txt" → ("/foo/bar", "baz.txt")
        "/hello.txt"       → ("/", "hello.txt")
        "hello.txt"        → ("/", "hello.txt")
        "/"                → ("/", "")

    """
    segments = split_segments(path)
    if not segments:
        return (ROOT_PATH, "")
    return (join_path(segments[:-1]), segments[-1])


class PathResolver:
    """Walk paths through a ``NodeTable`` starting from the root."""

    def __init__(self, nodes: NodeTable) -> None:
        """Create a resolver over *nodes*."""
        self._nodes = nodes

    def lookup(self, path: str) -> Node | None:
        """Return the node at *path*, or None if any component is missing."""
        current = self._nodes.root
        for segment in split_segments(path):
            child = self._nodes.child(current, segment)
            if child is None:
                return None
            current = child
        return current

    def resolve(self, path: str) -> Node:
        """Return the node at *path*.

        Raises:
            PathNotFoundError: At the first missing component.

        """
        current = self._nodes.root
        walked: list[str] = []
        for segment in split_segments(path):
            walked.append(segment)
            child = self._nodes.child(current, segment)
            if child is None:
                msg = f"Path not found: {join_path(walked)}"
                raise PathNotFoundError(msg)
            current = child
        return current

    def resolve_parent(self, path: str) -> tuple[Node, str]:
        """Resolve the directory that would contain *path*.

        The final component itself does not need to exist.

        Returns:
            The parent node and the final component name.

        Raises:
            PathNotFoundError: If the parent path does not resolve.

        """
        parent_path, name = split_path(path)
        return self.resolve(parent_path), name

    def path_of(self, node: Node) -> str:
        """Return the absolute path of an attached *node*."""
        return self._nodes.path_of(node)
