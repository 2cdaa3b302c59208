"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection.
"""
from typing import Protocol


class ProgressCallback(Protocol):
    """
    Observer notified after every acknowledged chunk.

    Called synchronously from the transfer loop; a slow observer slows the
    whole transfer.
    """

    def __call__(self, bytes_sent: int, total_bytes: int) -> None:
        ...


class ChunkingStrategy(Protocol):
    """Protocol for file chunking strategies."""

    def count_chunks(self, file_size: int) -> int:
        """Number of chunks a file of ``file_size`` bytes is sent in."""
        ...


class AsyncReader(Protocol):
    """Readable file handle, e.g. one opened with ``aiofiles.open(path, 'rb')``."""

    async def read(self, size: int = -1) -> bytes:
        ...
