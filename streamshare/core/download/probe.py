"""
Filesystem probe protocol.

Destination resolution only asks these three questions of the filesystem,
so tests can answer them from memory instead of touching the disk.
"""
import os
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class FilesystemProbe(Protocol):
    """Read-only view of the local filesystem."""

    def exists(self, path: Path) -> bool:
        """Returns True if anything exists at ``path``."""
        ...

    def is_dir(self, path: Path) -> bool:
        ...

    def is_file(self, path: Path) -> bool:
        """Returns True if ``path`` is a regular file."""
        ...


class LocalFilesystemProbe:
    """Probe backed by ``os.path``; symlinks are followed."""

    def exists(self, path: Path) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: Path) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: Path) -> bool:
        return os.path.isfile(path)
