"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TransferSession:
    """
    Identifiers of an upload session returned by the server.

    Attributes:
        file_identifier: Opaque file id used for upload, download and delete
        deletion_token: Opaque token authorizing deletion of the file
    """
    file_identifier: str
    deletion_token: str

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> 'TransferSession':
        """
        Create from a create-response body.

        Args:
            data: Decoded JSON object with camel-case keys

        Raises:
            KeyError: If a field is missing
            TypeError: If a field is not a string
        """
        file_identifier = data['fileIdentifier']
        deletion_token = data['deletionToken']
        if not isinstance(file_identifier, str) or not isinstance(deletion_token, str):
            raise TypeError("fileIdentifier and deletionToken must be strings")
        return cls(file_identifier=file_identifier, deletion_token=deletion_token)


@dataclass(frozen=True)
class UploadProgress:
    """
    Upload progress snapshot.

    Attributes:
        bytes_sent: Bytes acknowledged by the server so far
        total_bytes: File size captured when the upload started
    """
    bytes_sent: int
    total_bytes: int

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        if self.total_bytes == 0:
            return 100.0
        return (self.bytes_sent / self.total_bytes) * 100

    @property
    def is_complete(self) -> bool:
        return self.bytes_sent >= self.total_bytes


class TransferState(Enum):
    """States of the send/acknowledge loop."""
    IDLE = 'idle'
    CHUNK_SENT = 'chunk_sent'
    AWAITING_ACK = 'awaiting_ack'
    DONE = 'done'
    ERRORED = 'errored'


@dataclass
class TransferContext:
    """
    Mutable state of a single upload.

    Attributes:
        session: Session being uploaded
        total_bytes: File size captured once before the first read
        state: Current loop state
        chunks_sent: Number of acknowledged chunks
        bytes_sent: Number of acknowledged bytes
        last_error: Exception that moved the loop to ERRORED
    """
    session: TransferSession
    total_bytes: int
    state: TransferState = TransferState.IDLE
    chunks_sent: int = 0
    bytes_sent: int = 0
    last_error: Optional[BaseException] = None

    @property
    def progress(self) -> UploadProgress:
        return UploadProgress(bytes_sent=self.bytes_sent, total_bytes=self.total_bytes)

    def chunk_sent(self) -> None:
        self.state = TransferState.CHUNK_SENT

    def awaiting_ack(self) -> None:
        self.state = TransferState.AWAITING_ACK

    def acknowledged(self, size: int) -> None:
        """Record an acknowledged chunk and return to IDLE."""
        self.chunks_sent += 1
        self.bytes_sent += size
        self.state = TransferState.IDLE

    def done(self) -> None:
        self.state = TransferState.DONE

    def failed(self, error: BaseException) -> None:
        self.last_error = error
        self.state = TransferState.ERRORED
