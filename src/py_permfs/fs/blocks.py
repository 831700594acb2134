"""Fixed-size block storage for file content.

Real file systems never store a file as one contiguous blob.  Content
is cut into fixed-size **blocks** (4 KiB on most Linux systems) and the
inode keeps an ordered list of them.  We model the same thing:

- Appending splits the incoming bytes into chunks of at most
  ``block_size`` bytes, one block per chunk.  The final chunk may be
  short, so blocks are *not* all full.
- The file's **logical size** is tracked separately and incremented by
  exactly the number of bytes appended.  It is never inferred from the
  block count.
- Reading walks the block list, skipping whole blocks that lie before
  the requested offset.

Note that appending never tops up a partially filled last block: every
``append`` starts a fresh block.  Reads therefore use each block's own
payload length rather than assuming ``block_size``.
"""

from __future__ import annotations

from dataclasses import dataclass

from py_permfs.config import BLOCK_SIZE


@dataclass
class Block:
    """One chunk of file content.

    ``data`` holds only the bytes actually stored, so its length may be
    smaller than the block capacity.
    """

    data: bytearray

    def __len__(self) -> int:
        """Return the number of payload bytes in this block."""
        return len(self.data)


class BlockStore:
    """Ordered sequence of blocks plus the logical byte length."""

    def __init__(self, *, block_size: int = BLOCK_SIZE) -> None:
        """Create an empty store.

        Args:
            block_size: Maximum payload per block (default 4096).

        Raises:
            ValueError: If *block_size* is not positive.

        """
        if block_size <= 0:
            msg = f"Block size must be positive, got {block_size}"
            raise ValueError(msg)
        self._block_size = block_size
        self._blocks: list[Block] = []
        self._size = 0

    @property
    def block_size(self) -> int:
        """Return the capacity of each block."""
        return self._block_size

    @property
    def size(self) -> int:
        """Return the logical size in bytes."""
        return self._size

    @property
    def block_count(self) -> int:
        """Return the number of blocks currently held."""
        return len(self._blocks)

    @property
    def blocks(self) -> tuple[Block, ...]:
        """Return the blocks in order (the tuple is a snapshot)."""
        return tuple(self._blocks)

    def append(self, data: bytes | bytearray | memoryview) -> int:
        """Split *data* into blocks and append them.

        Returns:
            The number of bytes appended.

        """
        view = memoryview(data)
        for start in range(0, len(view), self._block_size):
            chunk = view[start : start + self._block_size]
            self._blocks.append(Block(data=bytearray(chunk)))
        self._size += len(view)
        return len(view)

    def clear(self) -> None:
        """Drop every block and reset the logical size to zero."""
        self._blocks.clear()
        self._size = 0

    def read_at(self, offset: int, buffer: bytearray | memoryview) -> int:
        """Copy bytes starting at *offset* into *buffer*.

        Stops when *buffer* is full or the blocks run out.  The caller
        is responsible for keeping *offset* within ``[0, size]``.

        Args:
            offset: Byte position in the file to start from.
            buffer: Writable destination; its length is the read limit.

        Returns:
            The number of bytes actually copied.

        """
        wanted = len(buffer)
        copied = 0
        skip = offset
        for block in self._blocks:
            if copied >= wanted:
                break
            if skip >= len(block):
                skip -= len(block)
                continue
            count = min(wanted - copied, len(block) - skip)
            buffer[copied : copied + count] = block.data[skip : skip + count]
            copied += count
            skip = 0
        return copied

    def copy(self) -> BlockStore:
        """Return a deep copy — block payloads are duplicated, not shared."""
        clone = BlockStore(block_size=self._block_size)
        clone._blocks = [Block(data=bytearray(block.data)) for block in self._blocks]
        clone._size = self._size
        return clone
