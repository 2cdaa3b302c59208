"""
Download destination resolution.

Maps a suggested filename and a user-supplied destination onto the path a
download will be written to. Pure apart from the injected probe: nothing
here creates, opens or modifies files.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import AlreadyExistsError, InvalidDestinationError, ParentMissingError
from .probe import FilesystemProbe, LocalFilesystemProbe

_CURRENT_DIR = Path('.')


@dataclass(frozen=True)
class DownloadTarget:
    """
    Where a download will be written.

    Attributes:
        path: Final file path (relative paths are relative to the cwd)
        suggested_name: Name suggested by the server
        overwrites: True if ``path`` exists and will be replaced
    """
    path: Path
    suggested_name: str
    overwrites: bool = False


def expand_destination(destination: str) -> Path:
    """Expand a leading ``~`` in the destination."""
    return Path(os.path.expanduser(destination))


def resolve_target_path(
    suggested_name: str,
    destination: str,
    replace: bool = False,
    probe: Optional[FilesystemProbe] = None
) -> DownloadTarget:
    """
    Resolve the path a download should be written to.

    Precedence:
        1. empty destination: the suggested name in the current directory
        2. existing directory: directory / suggested name
        3. existing regular file: the destination itself
        4. existing special file: rejected
        5. missing path: the destination itself if its parent is an existing
           directory or it has no parent; rejected otherwise

    Args:
        suggested_name: Filename suggested by the server
        destination: User-supplied destination, may be empty
        replace: Whether an existing file may be overwritten
        probe: Filesystem probe (defaults to the local filesystem)

    Returns:
        DownloadTarget for the resolved path

    Raises:
        InvalidDestinationError: Destination exists but is neither file nor directory
        ParentMissingError: Destination's parent directory does not exist
        AlreadyExistsError: Resolved path exists and ``replace`` is False
    """
    probe = probe or LocalFilesystemProbe()

    if not destination:
        path = Path(suggested_name)
    else:
        dest = expand_destination(destination)
        if probe.exists(dest):
            if probe.is_dir(dest):
                path = dest / suggested_name
            elif probe.is_file(dest):
                path = dest
            else:
                raise InvalidDestinationError(dest)
        else:
            parent = dest.parent
            if parent == _CURRENT_DIR or probe.is_dir(parent):
                path = dest
            else:
                raise ParentMissingError(dest)

    exists = probe.exists(path)
    if exists and not replace:
        raise AlreadyExistsError(path)

    return DownloadTarget(path=path, suggested_name=suggested_name, overwrites=exists)
