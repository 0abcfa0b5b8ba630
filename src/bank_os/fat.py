"""File allocation table (FAT) demo.

The FAT maps each file name to the disk blocks that hold it.  Our
allocator is the simplest possible one: a bump pointer.  Each file gets
the next ``size`` consecutive block numbers and a block is never handed
out twice, not even when a file is re-allocated under the same name.
"""

from bank_os.logging import Logger, LogLevel

_SOURCE = "fat"


class FileAllocationTable:
    """Contiguous, bump-pointer block allocator keyed by file name."""

    def __init__(self, *, logger: Logger) -> None:
        """Create an empty table whose first free block is 0."""
        self._logger = logger
        self._files: dict[str, list[int]] = {}
        self._next_block = 0

    @property
    def files(self) -> dict[str, list[int]]:
        """Return a copy of the file → blocks mapping."""
        return {name: list(blocks) for name, blocks in self._files.items()}

    @property
    def next_block(self) -> int:
        """Return the next block number that will be handed out."""
        return self._next_block

    def allocate(self, filename: str, size: int) -> list[int]:
        """Give *filename* the next *size* blocks.

        Re-allocating an existing name replaces its block list; the old
        blocks are not reused.

        Raises:
            ValueError: If *size* is negative.

        """
        if size < 0:
            msg = f"File size must be non-negative, got {size}"
            raise ValueError(msg)
        blocks = list(range(self._next_block, self._next_block + size))
        self._next_block += size
        self._files[filename] = blocks
        self._logger.log(
            LogLevel.INFO, f"Allocated {size} blocks for {filename}: {blocks}", source=_SOURCE
        )
        return list(blocks)

    def blocks(self, filename: str) -> list[int] | None:
        """Return the blocks of *filename*, or None if it is unknown."""
        blocks = self._files.get(filename)
        return None if blocks is None else list(blocks)

    def render(self) -> str:
        """Render the table, one file per line, sorted by name."""
        lines = [f"{'Filename':>20}    Allocated blocks", "-" * 50]
        lines.extend(
            f"{name:>20}    {' '.join(str(b) for b in blocks)}"
            for name, blocks in sorted(self._files.items())
        )
        return "\n".join(lines)
