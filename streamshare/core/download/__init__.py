"""Download module: filename suggestion, destination resolution and writing."""
from .disposition import parse_suggested_filename, fallback_filename
from .probe import FilesystemProbe, LocalFilesystemProbe
from .resolver import DownloadTarget, resolve_target_path, expand_destination
from .service import DownloadService

__all__ = [
    'DownloadService',
    'DownloadTarget',
    'resolve_target_path',
    'expand_destination',
    'parse_suggested_filename',
    'fallback_filename',
    'FilesystemProbe',
    'LocalFilesystemProbe',
]
