"""Suggested filename extraction from ``Content-Disposition`` headers."""
from pathlib import PurePosixPath
from typing import Optional

FILENAME_PREFIX = 'filename='
UNKNOWN_SUFFIX = '.unknown'


def fallback_filename(file_identifier: str) -> str:
    return f"{file_identifier}{UNKNOWN_SUFFIX}"


def parse_suggested_filename(header: Optional[str], file_identifier: str) -> str:
    """
    Get the filename the server suggests for a download.

    Scans the semicolon-separated parts of the header for ``filename=``,
    strips the prefix and surrounding quotes, and keeps only the final path
    component so the name can never point outside the target directory.

    Args:
        header: Raw ``Content-Disposition`` value, or None if absent
        file_identifier: Identifier used to build the fallback name

    Returns:
        Suggested filename, or ``"<file_identifier>.unknown"``

    Example:
        >>> parse_suggested_filename('attachment; filename="report.pdf"', 'abc')
        'report.pdf'
        >>> parse_suggested_filename(None, 'abc')
        'abc.unknown'
    """
    if not header:
        return fallback_filename(file_identifier)

    for part in header.split(';'):
        part = part.strip()
        if not part.lower().startswith(FILENAME_PREFIX):
            continue

        value = part[len(FILENAME_PREFIX):].strip().strip('"\'')
        name = PurePosixPath(value.replace('\\', '/')).name
        if name and name not in ('.', '..'):
            return name
        break

    return fallback_filename(file_identifier)
