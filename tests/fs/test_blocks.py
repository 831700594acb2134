"""Tests for fixed-size block storage.

File content is split into blocks of at most 4096 bytes.  The logical
size is tracked separately and reads walk the block list from the
requested offset.
"""

import pytest

from py_permfs.fs.blocks import BLOCK_SIZE, BlockStore

SMALL_BLOCK = 4


def _contents(store: BlockStore) -> bytes:
    """Read the whole store through one buffer of its logical size."""
    buffer = bytearray(store.size)
    store.read_at(0, buffer)
    return bytes(buffer)


class TestAppend:
    """Verify chunking on append."""

    def test_empty_store(self) -> None:
        """A new store should hold no blocks and no bytes."""
        store = BlockStore()
        assert store.size == 0
        assert store.block_count == 0
        assert store.block_size == BLOCK_SIZE

    def test_small_write_uses_one_partial_block(self) -> None:
        """Data shorter than a block should occupy one short block."""
        store = BlockStore()
        store.append(b"hello")
        assert store.block_count == 1
        assert len(store.blocks[0]) == len(b"hello")
        assert store.size == len(b"hello")

    def test_large_write_splits_into_blocks(self) -> None:
        """Data longer than a block should be split at block boundaries."""
        store = BlockStore()
        data = bytes(range(256)) * 40  # 10240 bytes
        written = store.append(data)
        assert written == len(data)
        assert store.block_count == 3
        assert [len(b) for b in store.blocks] == [BLOCK_SIZE, BLOCK_SIZE, 10240 - 2 * BLOCK_SIZE]
        assert store.size == len(data)

    def test_each_append_starts_a_new_block(self) -> None:
        """Appends should not top up a partially filled last block."""
        store = BlockStore(block_size=SMALL_BLOCK)
        store.append(b"ab")
        store.append(b"cd")
        assert store.block_count == 2
        assert store.size == 4
        assert _contents(store) == b"abcd"

    def test_empty_append_changes_nothing(self) -> None:
        """Appending zero bytes should add no block."""
        store = BlockStore()
        assert store.append(b"") == 0
        assert store.block_count == 0

    def test_clear_resets(self) -> None:
        """Clearing should drop blocks and reset the size."""
        store = BlockStore()
        store.append(b"data")
        store.clear()
        assert store.size == 0
        assert store.block_count == 0

    def test_block_size_must_be_positive(self) -> None:
        """A zero block size should be rejected."""
        with pytest.raises(ValueError, match="positive"):
            BlockStore(block_size=0)


class TestReadAt:
    """Verify reads across block boundaries."""

    def test_read_from_start(self) -> None:
        """Reading from offset 0 should return the leading bytes."""
        store = BlockStore(block_size=SMALL_BLOCK)
        store.append(b"abcdefghij")
        buffer = bytearray(6)
        assert store.read_at(0, buffer) == 6
        assert bytes(buffer) == b"abcdef"

    def test_read_skips_whole_blocks(self) -> None:
        """An offset past the first blocks should skip them."""
        store = BlockStore(block_size=SMALL_BLOCK)
        store.append(b"abcdefghij")
        buffer = bytearray(3)
        assert store.read_at(5, buffer) == 3
        assert bytes(buffer) == b"fgh"

    def test_read_stops_at_end(self) -> None:
        """A buffer larger than the remaining data should be partly filled."""
        store = BlockStore(block_size=SMALL_BLOCK)
        store.append(b"abcdefghij")
        buffer = bytearray(10)
        assert store.read_at(8, buffer) == 2
        assert bytes(buffer[:2]) == b"ij"

    def test_read_with_short_blocks(self) -> None:
        """Reads should honour the real length of each partial block."""
        store = BlockStore(block_size=SMALL_BLOCK)
        store.append(b"ab")
        store.append(b"cdef")
        store.append(b"g")
        buffer = bytearray(4)
        assert store.read_at(1, buffer) == 4
        assert bytes(buffer) == b"bcde"

    def test_read_at_end_returns_zero(self) -> None:
        """Reading at the logical size should copy nothing."""
        store = BlockStore()
        store.append(b"abc")
        assert store.read_at(3, bytearray(4)) == 0

    def test_read_into_memoryview(self) -> None:
        """A memoryview over a bytearray should work as the buffer."""
        store = BlockStore()
        store.append(b"xyz")
        backing = bytearray(5)
        assert store.read_at(0, memoryview(backing)[1:4]) == 3
        assert bytes(backing) == b"\x00xyz\x00"


class TestCopy:
    """Verify deep copies."""

    def test_copy_has_same_content(self) -> None:
        """A copy should hold the same bytes and size."""
        store = BlockStore(block_size=SMALL_BLOCK)
        store.append(b"abcdefg")
        clone = store.copy()
        assert _contents(clone) == b"abcdefg"
        assert clone.size == store.size
        assert clone.block_size == SMALL_BLOCK

    def test_copy_does_not_share_payloads(self) -> None:
        """Mutating an original block in place should not affect the copy."""
        store = BlockStore()
        store.append(b"abc")
        clone = store.copy()
        store.blocks[0].data[0:1] = b"Z"
        assert _contents(store) == b"Zbc"
        assert _contents(clone) == b"abc"
