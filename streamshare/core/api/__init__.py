"""StreamShare API module."""
from .config import (
    ChunkingConfig,
    ClientConfig,
    SSLConfig,
    TimeoutConfig,
    DEFAULT_HOST,
    DEFAULT_CHUNK_SIZE
)
from .async_client import AsyncHTTPClient

__all__ = [
    'AsyncHTTPClient',

    # Configuration
    'ChunkingConfig',
    'ClientConfig',
    'SSLConfig',
    'TimeoutConfig',
    'DEFAULT_HOST',
    'DEFAULT_CHUNK_SIZE',
]
