"""Tests for the node arena.

Nodes live in a flat table keyed by handle.  Directories map names to
child handles and every attached node points back at its parent.
"""

import pytest

from py_permfs.errors import NodeKindError
from py_permfs.fs.nodes import ROOT_HANDLE, ROOT_NAME, NodeKind, NodeTable
from py_permfs.permissions import Capability


def _table() -> NodeTable:
    """Create an arena whose root is owned by root with full access."""
    return NodeTable(root_owner="root", root_capabilities="rwx")


class TestRoot:
    """Verify the initial arena."""

    def test_root_exists(self) -> None:
        """The arena should start with exactly the root directory."""
        table = _table()
        assert len(table) == 1
        assert table.root.handle == ROOT_HANDLE
        assert table.root.name == ROOT_NAME
        assert table.root.kind is NodeKind.DIRECTORY
        assert table.root.parent is None

    def test_root_permissions(self) -> None:
        """The root owner should hold the configured capabilities."""
        table = _table()
        assert table.root.owner == "root"
        assert table.root.has_capability("root", Capability.WRITE)
        assert not table.root.has_capability("alice", Capability.READ)


class TestAttachDetach:
    """Verify linking nodes into directories."""

    def test_attach_links_both_ways(self) -> None:
        """Attaching should add the name and record the parent handle."""
        table = _table()
        docs = table.new_directory("docs", owner="root", capabilities="rwx")
        table.attach(table.root, docs)
        assert table.child(table.root, "docs") is docs
        assert docs.parent == table.root.handle
        assert table.path_of(docs) == "/docs"

    def test_file_cannot_hold_children(self) -> None:
        """Attaching under a file is a programming error."""
        table = _table()
        note = table.new_file("note", owner="root", capabilities="rw-")
        table.attach(table.root, note)
        orphan = table.new_directory("x", owner="root", capabilities="rwx")
        with pytest.raises(NodeKindError, match="cannot contain children"):
            table.attach(note, orphan)
        with pytest.raises(NodeKindError):
            table.detach(note, "x")

    def test_node_cannot_have_two_parents(self) -> None:
        """Attaching an already linked node should fail."""
        table = _table()
        a = table.new_directory("a", owner="root", capabilities="rwx")
        b = table.new_directory("b", owner="root", capabilities="rwx")
        table.attach(table.root, a)
        table.attach(table.root, b)
        with pytest.raises(ValueError, match="already linked"):
            table.attach(b, a)

    def test_duplicate_names_rejected(self) -> None:
        """Two siblings may not share a name."""
        table = _table()
        table.attach(table.root, table.new_directory("a", owner="root", capabilities="rwx"))
        with pytest.raises(ValueError, match="Duplicate"):
            table.attach(table.root, table.new_file("a", owner="root", capabilities="rw-"))

    def test_detach_keeps_node_allocated(self) -> None:
        """Detaching should unlink but not free the node."""
        table = _table()
        a = table.new_directory("a", owner="root", capabilities="rwx")
        table.attach(table.root, a)
        detached = table.detach(table.root, "a")
        assert detached is a
        assert a.parent is None
        assert a.handle in table

    def test_child_of_file_is_none(self) -> None:
        """Looking inside a file should find nothing."""
        table = _table()
        note = table.new_file("note", owner="root", capabilities="rw-")
        assert table.child(note, "anything") is None


class TestTreeQueries:
    """Verify traversal helpers."""

    def _tree(self) -> NodeTable:
        """Build /a/b/c.txt and /a/z."""
        table = _table()
        a = table.new_directory("a", owner="root", capabilities="rwx")
        b = table.new_directory("b", owner="root", capabilities="rwx")
        z = table.new_directory("z", owner="root", capabilities="rwx")
        c = table.new_file("c.txt", owner="root", capabilities="rw-")
        table.attach(table.root, a)
        table.attach(a, z)
        table.attach(a, b)
        table.attach(b, c)
        return table

    def test_children_sorted(self) -> None:
        """Children should be returned in name order."""
        table = self._tree()
        a = table.child(table.root, "a")
        assert a is not None
        assert [n.name for n in table.children(a)] == ["b", "z"]

    def test_descendants_preorder(self) -> None:
        """Descendants should be yielded parent before children."""
        table = self._tree()
        assert [n.name for n in table.descendants(table.root)] == ["a", "b", "c.txt", "z"]

    def test_is_ancestor(self) -> None:
        """Ancestry should follow parent handles."""
        table = self._tree()
        a = table.child(table.root, "a")
        assert a is not None
        b = table.child(a, "b")
        assert b is not None
        assert table.is_ancestor(a, b)
        assert table.is_ancestor(table.root, b)
        assert not table.is_ancestor(b, a)

    def test_release_frees_subtree(self) -> None:
        """Releasing a detached directory should free all its nodes."""
        table = self._tree()
        a = table.detach(table.root, "a")
        assert table.release(a) == 4
        assert len(table) == 1

    def test_clone_is_deep(self) -> None:
        """A clone should copy structure and file content independently."""
        table = self._tree()
        a = table.child(table.root, "a")
        assert a is not None
        b = table.child(a, "b")
        assert b is not None
        c = table.child(b, "c.txt")
        assert c is not None
        assert c.blocks is not None
        c.blocks.append(b"payload")

        copy = table.clone(a)
        assert copy.parent is None
        assert copy.handle != a.handle
        copied_b = table.child(copy, "b")
        assert copied_b is not None
        copied_c = table.child(copied_b, "c.txt")
        assert copied_c is not None
        assert copied_c is not c
        assert copied_c.size == len(b"payload")

        c.blocks.clear()
        assert copied_c.size == len(b"payload")

    def test_to_info(self) -> None:
        """A snapshot should reflect the node header."""
        table = self._tree()
        a = table.child(table.root, "a")
        assert a is not None
        info = a.to_info()
        assert info.name == "a"
        assert info.kind is NodeKind.DIRECTORY
        assert info.owner == "root"
        assert info.capabilities == "rwx"
        assert info.child_count == 2
