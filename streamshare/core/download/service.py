"""
Download service.

Fetches a file and writes it to a resolved local path.
"""
import asyncio
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import aiofiles
import aiohttp

from ..api import AsyncHTTPClient
from ..exceptions import DownloadFailedError, IoFailureError, TransportError
from ..logging import get_logger
from .disposition import parse_suggested_filename
from .probe import FilesystemProbe, LocalFilesystemProbe
from .resolver import DownloadTarget, resolve_target_path

logger = get_logger('streamshare.download')

DOWNLOAD_PATH = '/download/{file_identifier}'


class DownloadService:
    """
    Downloads files by identifier.

    The whole body is buffered before anything is written, and every
    destination check runs before a file is opened, so a rejected download
    leaves the filesystem untouched.
    """

    def __init__(self, http: AsyncHTTPClient, probe: Optional[FilesystemProbe] = None):
        self._http = http
        self._probe = probe or LocalFilesystemProbe()

    def download_url(self, file_identifier: str) -> str:
        return self._http.url(DOWNLOAD_PATH.format(file_identifier=quote(file_identifier, safe='')))

    async def download(
        self,
        file_identifier: str,
        destination: str = "",
        replace: bool = False
    ) -> Path:
        """
        Download a file.

        Args:
            file_identifier: Identifier of the file
            destination: File or directory to write to; empty for the cwd
            replace: Overwrite an existing file at the resolved path

        Returns:
            Path the file was written to

        Raises:
            DownloadFailedError: If the server answers with a non-success status
            InvalidDestinationError: If the destination is a special file
            ParentMissingError: If the destination's parent directory is missing
            AlreadyExistsError: If the target exists and ``replace`` is False
            IoFailureError: If writing the file fails
            TransportError: If the HTTP request itself fails
        """
        url = self.download_url(file_identifier)
        session = await self._http.get_session()

        logger.info(f"Downloading {file_identifier}")
        try:
            async with session.get(url) as response:
                if not 200 <= response.status < 300:
                    logger.error(f"Download of {file_identifier} failed: HTTP {response.status}")
                    raise DownloadFailedError(response.status)

                suggested = parse_suggested_filename(
                    response.headers.get(aiohttp.hdrs.CONTENT_DISPOSITION),
                    file_identifier
                )
                target = resolve_target_path(suggested, destination, replace, self._probe)
                logger.debug(
                    f"Resolved download target {target.path} "
                    f"(suggested: {suggested}, overwrites: {target.overwrites})"
                )

                self._create_parent(target)
                content = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Download request to {url} failed: {e}") from e

        await self._write(target.path, content)
        logger.info(f"Downloaded {file_identifier} to {target.path} ({len(content)} bytes)")
        return target.path

    def _create_parent(self, target: DownloadTarget) -> None:
        parent = target.path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoFailureError(parent, e) from e

    async def _write(self, path: Path, content: bytes) -> None:
        """Truncate and write ``content`` to ``path``."""
        try:
            async with aiofiles.open(path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            raise IoFailureError(path, e) from e
