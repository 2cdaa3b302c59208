"""
Chunking strategies for file uploads.

The upload channel sends fixed-size frames; the count computed here is what
the send loop is expected to produce for a file of a given size.
"""
from ...exceptions import InvalidConfigError


class FixedSizeChunkingStrategy:
    """Fixed-size chunking: every chunk but the last is ``chunk_size`` bytes."""

    DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KiB

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize with chunk size.

        Args:
            chunk_size: Size of each chunk in bytes
        """
        if chunk_size <= 0:
            raise InvalidConfigError("Chunk size must be positive")
        self.chunk_size = chunk_size

    def count_chunks(self, file_size: int) -> int:
        """Number of chunks, ``ceil(file_size / chunk_size)``; zero for an empty file."""
        return -(-file_size // self.chunk_size)
