"""Tests for path helpers and the path resolver.

Resolution walks from the root one component at a time and fails at
the first component that is missing.
"""

import pytest

from py_permfs.errors import PathNotFoundError
from py_permfs.fs.nodes import NodeTable
from py_permfs.fs.paths import (
    PathResolver,
    child_path,
    is_root,
    join_path,
    normalize,
    split_path,
    split_segments,
)


class TestPathHelpers:
    """Verify pure path manipulation."""

    def test_split_segments_ignores_empty(self) -> None:
        """Leading, trailing and repeated separators should be ignored."""
        assert split_segments("//a///b/") == ["a", "b"]
        assert split_segments("") == []

    @pytest.mark.parametrize("path", ["", "/", "//", "///"])
    def test_root_spellings(self, path: str) -> None:
        """Every separator-only path should mean the root."""
        assert is_root(path)

    def test_split_path(self) -> None:
        """A path should split into its parent and final name."""
        assert split_path("/foo/bar/baz.txt") == ("/foo/bar", "baz.txt")
        assert split_path("/hello.txt") == ("/", "hello.txt")
        assert split_path("hello.txt") == ("/", "hello.txt")
        assert split_path("/a/b/") == ("/a", "b")
        assert split_path("/") == ("/", "")

    def test_join_and_normalize(self) -> None:
        """Joining and normalizing should produce canonical paths."""
        assert join_path([]) == "/"
        assert join_path(["a", "b"]) == "/a/b"
        assert normalize("a//b/") == "/a/b"

    def test_child_path(self) -> None:
        """Child paths should not double the separator."""
        assert child_path("/", "a") == "/a"
        assert child_path("/a", "b") == "/a/b"
        assert child_path("/a/", "b") == "/a/b"


class TestResolver:
    """Verify walking the arena."""

    def _resolver(self) -> tuple[NodeTable, PathResolver]:
        """Build /a/b and /a/f.txt."""
        table = NodeTable(root_owner="root", root_capabilities="rwx")
        a = table.new_directory("a", owner="root", capabilities="rwx")
        b = table.new_directory("b", owner="root", capabilities="rwx")
        f = table.new_file("f.txt", owner="root", capabilities="rw-")
        table.attach(table.root, a)
        table.attach(a, b)
        table.attach(a, f)
        return table, PathResolver(table)

    @pytest.mark.parametrize("path", ["", "/"])
    def test_root(self, path: str) -> None:
        """Empty and slash should resolve to the root."""
        table, resolver = self._resolver()
        assert resolver.resolve(path) is table.root

    def test_resolve_is_repeatable(self) -> None:
        """Resolving the same path twice should return the same node."""
        _table, resolver = self._resolver()
        assert resolver.resolve("/a/b") is resolver.resolve("a//b/")

    def test_missing_component(self) -> None:
        """The error should name the first missing prefix."""
        _table, resolver = self._resolver()
        with pytest.raises(PathNotFoundError, match="/a/nope"):
            resolver.resolve("/a/nope/deeper")

    def test_cannot_walk_through_file(self) -> None:
        """A file has no children, so descending into it is not found."""
        _table, resolver = self._resolver()
        with pytest.raises(PathNotFoundError):
            resolver.resolve("/a/f.txt/x")
        assert resolver.lookup("/a/f.txt/x") is None

    def test_resolve_parent(self) -> None:
        """The parent should resolve even when the final name is absent."""
        table, resolver = self._resolver()
        parent, name = resolver.resolve_parent("/a/new")
        assert parent is table.child(table.root, "a")
        assert name == "new"

    def test_resolve_parent_missing(self) -> None:
        """A missing parent should raise."""
        _table, resolver = self._resolver()
        with pytest.raises(PathNotFoundError):
            resolver.resolve_parent("/missing/new")

    def test_path_of(self) -> None:
        """A resolved node should map back to its canonical path."""
        _table, resolver = self._resolver()
        assert resolver.path_of(resolver.resolve("a/b")) == "/a/b"
