"""Upload services."""
from .file_service import FileValidator, UNKNOWN_NAME

__all__ = [
    'FileValidator',
    'UNKNOWN_NAME',
]
