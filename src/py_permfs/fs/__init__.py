"""File system subsystem — nodes, blocks, path resolution, and operations.

Re-exports public symbols so callers can write::

    from py_permfs.fs import FileSystem, ReadCursor
"""

from py_permfs.fs.blocks import Block, BlockStore
from py_permfs.fs.filesystem import DirectoryListing, FileSystem, ListingEntry, ReadCursor
from py_permfs.fs.nodes import ROOT_HANDLE, Node, NodeInfo, NodeKind, NodeTable
from py_permfs.fs.paths import ROOT_PATH, PathResolver, normalize, split_path, split_segments

__all__ = [
    "ROOT_HANDLE",
    "ROOT_PATH",
    "Block",
    "BlockStore",
    "DirectoryListing",
    "FileSystem",
    "ListingEntry",
    "Node",
    "NodeInfo",
    "NodeKind",
    "NodeTable",
    "PathResolver",
    "ReadCursor",
    "normalize",
    "split_path",
    "split_segments",
]
