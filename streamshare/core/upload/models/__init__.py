"""Upload data models."""
from .upload_models import (
    TransferSession,
    UploadProgress,
    TransferState,
    TransferContext
)

__all__ = [
    'TransferSession',
    'UploadProgress',
    'TransferState',
    'TransferContext',
]
