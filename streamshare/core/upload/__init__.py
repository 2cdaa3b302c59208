"""
Upload module for StreamShare file uploads.

Session negotiation over HTTP, then a chunked, acknowledged transfer over
a WebSocket.
"""
from .negotiator import SessionNegotiator
from .engine import ChunkedUploadEngine
from .models import TransferSession, UploadProgress, TransferState, TransferContext
from .protocols import ProgressCallback, ChunkingStrategy, AsyncReader

__all__ = [
    # Main classes
    'SessionNegotiator',
    'ChunkedUploadEngine',

    # Models
    'TransferSession',
    'UploadProgress',
    'TransferState',
    'TransferContext',

    # Protocols
    'ProgressCallback',
    'ChunkingStrategy',
    'AsyncReader',
]
