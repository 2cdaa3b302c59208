"""Core components of the StreamShare client."""
from .exceptions import (
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

__all__ = [
    'StreamShareError',
    'NotAFileError',
    'InvalidConfigError',
    'RequestError',
    'CreateFailedError',
    'DeleteFailedError',
    'DownloadFailedError',
    'InvalidServerResponseError',
    'UploadError',
    'ConnectFailedError',
    'UnexpectedMessageError',
    'TransportError',
    'PrematureCloseError',
    'DestinationError',
    'InvalidDestinationError',
    'ParentMissingError',
    'AlreadyExistsError',
    'IoFailureError',
]
