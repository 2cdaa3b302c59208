"""
StreamShare - Async Python client for the StreamShare file-sharing service.

Usage:
    >>> from streamshare import StreamShareClient
    >>>
    >>> async with StreamShareClient() as client:
    ...     session = await client.upload("report.pdf")
    ...     print(session.file_identifier, session.deletion_token)
"""
import logging
from .client import StreamShareClient

# Configuration
from .core.api import (
    ClientConfig,
    ChunkingConfig,
    SSLConfig,
    TimeoutConfig,
    AsyncHTTPClient
)

# Transfer components
from .core.upload import (
    SessionNegotiator,
    ChunkedUploadEngine,
    TransferSession,
    UploadProgress
)
from .core.deletion import DeletionService
from .core.download import (
    DownloadService,
    DownloadTarget,
    resolve_target_path,
    parse_suggested_filename
)

from .core import (
    StreamShareError,
    NotAFileError,
    InvalidConfigError,
    RequestError,
    CreateFailedError,
    DeleteFailedError,
    DownloadFailedError,
    InvalidServerResponseError,
    UploadError,
    ConnectFailedError,
    UnexpectedMessageError,
    TransportError,
    PrematureCloseError,
    DestinationError,
    InvalidDestinationError,
    ParentMissingError,
    AlreadyExistsError,
    IoFailureError
)
from .core import __all__ as _exception_names

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for streamshare modules.

    This ensures that all streamshare loggers are properly configured
    to show log messages at the specified level.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'streamshare',
        'streamshare.api',
        'streamshare.client',
        'streamshare.upload',
        'streamshare.upload.engine',
        'streamshare.upload.negotiator',
        'streamshare.upload.file',
        'streamshare.download',
        'streamshare.delete',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        # Ensure propagation is enabled
        logger.propagate = True


__all__ = [
    'StreamShareClient',
    'ClientConfig',
    'ChunkingConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AsyncHTTPClient',
    'SessionNegotiator',
    'ChunkedUploadEngine',
    'TransferSession',
    'UploadProgress',
    'DeletionService',
    'DownloadService',
    'DownloadTarget',
    'resolve_target_path',
    'parse_suggested_filename',
    'setup_logging',
    *_exception_names,
]
