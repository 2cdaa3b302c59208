"""
Custom exceptions for StreamShare transfer operations.

Every failure aborts the current operation and surfaces as one of these.
"""
from typing import Optional, Union
from pathlib import Path


class StreamShareError(Exception):
    """Base exception for all StreamShare-related errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotAFileError(StreamShareError):
    """Raised when an upload source is missing or is not a regular file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(f"Not a file: {path}")


class InvalidConfigError(StreamShareError):
    """Raised for caller programming errors in the client configuration."""
    pass


class RequestError(StreamShareError):
    """Exception raised when an HTTP request returns a non-success status."""

    action = "Request"

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            status: HTTP status code returned by the server
            message: Optional override for the error message
        """
        self.status = status
        super().__init__(message or f"{self.action} failed with HTTP status {status}")


class CreateFailedError(RequestError):
    """The upload session could not be created."""

    action = "Create upload"


class DeleteFailedError(RequestError):
    """The file could not be deleted."""

    action = "Delete"


class DownloadFailedError(RequestError):
    """The file could not be downloaded."""

    action = "Download"


class InvalidServerResponseError(StreamShareError):
    """Raised when a success response has a body we cannot interpret."""
    pass


class UploadError(StreamShareError):
    """Base class for failures on the upload WebSocket channel."""
    pass


class ConnectFailedError(UploadError):
    """The WebSocket connection could not be established."""

    def __init__(self, url: str, reason: object) -> None:
        self.url = url
        super().__init__(f"Could not connect to {url}: {reason}")


class UnexpectedMessageError(UploadError):
    """The server answered a chunk with something other than ``ACK``."""

    def __init__(self, frame: str, chunk_index: int) -> None:
        self.frame = frame
        self.chunk_index = chunk_index
        super().__init__(f"Unexpected message after chunk {chunk_index}: {frame}")


class TransportError(UploadError):
    """A transport-level error occurred while talking to the server."""
    pass


class PrematureCloseError(UploadError):
    """The server closed the channel before acknowledging a chunk."""

    def __init__(self, chunk_index: int, close_code: Optional[int] = None) -> None:
        self.chunk_index = chunk_index
        self.close_code = close_code
        super().__init__(
            f"Connection closed before chunk {chunk_index} was acknowledged "
            f"(close code: {close_code})"
        )


class DestinationError(StreamShareError):
    """Base class for download destinations that cannot be written."""

    reason = "Invalid destination"

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(f"{self.reason}: {path}")


class InvalidDestinationError(DestinationError):
    """The destination exists but is neither a regular file nor a directory."""

    reason = "Destination is neither a file nor a directory"


class ParentMissingError(DestinationError):
    """The destination's parent directory does not exist."""

    reason = "Parent directory does not exist"


class AlreadyExistsError(DestinationError):
    """The resolved path exists and replacing it was not requested."""

    reason = "File already exists (use replace to overwrite)"


class IoFailureError(StreamShareError):
    """Local filesystem I/O failed."""

    def __init__(self, path: Union[str, Path], error: OSError) -> None:
        self.path = Path(path)
        self.error = error
        super().__init__(f"I/O error on {path}: {error}")
