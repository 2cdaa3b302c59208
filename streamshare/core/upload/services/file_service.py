"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Tuple, Union
import logging

from ...exceptions import NotAFileError, IoFailureError

UNKNOWN_NAME = 'unknown'


class FileValidator:
    """
    Validates files before upload.

    Responsibilities:
    - Check file existence
    - Verify file is a regular file
    - Get file size
    """

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (validated Path, file size in bytes)

        Raises:
            NotAFileError: If the path is missing or not a regular file
            IoFailureError: If the file metadata cannot be read
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.is_file():
            raise NotAFileError(path)

        try:
            file_size = path.stat().st_size
        except OSError as e:
            raise IoFailureError(path, e) from e

        return path, file_size

    def upload_name(self, path: Path) -> str:
        """
        Name announced to the server for this file.

        Falls back to ``"unknown"`` when the path has no final component or
        the component cannot be encoded as UTF-8.
        """
        name = path.name
        if not name:
            return UNKNOWN_NAME
        try:
            name.encode('utf-8')
        except UnicodeEncodeError:
            logging.getLogger('streamshare.upload.file').debug(
                f"File name of {path!r} is not valid UTF-8, using '{UNKNOWN_NAME}'"
            )
            return UNKNOWN_NAME
        return name
