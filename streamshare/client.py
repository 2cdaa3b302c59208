"""
StreamShare Client - simple async interface to the StreamShare service.

Usage:
    async with StreamShareClient() as client:
        session = await client.upload("photo.jpg")
        path = await client.download(session.file_identifier, "~/Downloads")
        await client.delete(session)
"""
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiohttp

from .core.api import AsyncHTTPClient, ClientConfig
from .core.deletion import DeletionService
from .core.download import DownloadService, FilesystemProbe
from .core.exceptions import InvalidConfigError, IoFailureError
from .core.logging import get_logger
from .core.upload import ChunkedUploadEngine, ProgressCallback, SessionNegotiator, TransferSession
from .core.upload.services import FileValidator

logger = get_logger('streamshare.client')


class StreamShareClient:
    """
    Async client for StreamShare.

    All operations share one HTTP session, so independent uploads, downloads
    and deletions may run concurrently as separate tasks.

    Example:
        >>> async with StreamShareClient(chunk_size=256 * 1024) as client:
        ...     session = await client.upload("video.mp4")
        ...     print(client.download_url(session.file_identifier))
    """

    def __init__(
        self,
        host: Optional[str] = None,
        chunk_size: Optional[int] = None,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        probe: Optional[FilesystemProbe] = None
    ):
        """
        Initialize client.

        Args:
            host: Server host, overrides ``config.host``
            chunk_size: Upload chunk size in bytes, overrides ``config.chunk_size``
            config: Full client configuration
            session: Optional externally owned aiohttp session
            probe: Filesystem probe used to resolve download destinations

        Raises:
            InvalidConfigError: If host or chunk size are invalid
        """
        config = config or ClientConfig.default()
        if host is not None or chunk_size is not None:
            config = ClientConfig(
                host=host if host is not None else config.host,
                chunk_size=chunk_size if chunk_size is not None else config.chunk_size,
                secure=config.secure,
                user_agent=config.user_agent,
                extra_headers=dict(config.extra_headers),
                ssl=config.ssl,
                timeout=config.timeout,
                log_level=config.log_level
            )

        self._config = config
        self._http = AsyncHTTPClient(config, session=session)
        self._validator = FileValidator()
        self._negotiator = SessionNegotiator(self._http, self._validator)
        self._engine = ChunkedUploadEngine(self._http, config.chunking)
        self._deletion = DeletionService(self._http)
        self._downloads = DownloadService(self._http, probe)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def __aenter__(self) -> 'StreamShareClient':
        await self._http.get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the HTTP session (if owned by this client)."""
        await self._http.close()

    async def upload(
        self,
        file_path: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None
    ) -> TransferSession:
        """
        Upload a file.

        The file size is read once before the session is created; changing
        the file during the upload is not supported.

        Args:
            file_path: Path to the file
            progress_callback: Optional callback(bytes_sent, total_bytes)

        Returns:
            TransferSession with file identifier and deletion token
        """
        path, file_size = self._validator.validate(file_path)
        session = await self._negotiator.open_session(self._validator.upload_name(path))

        try:
            async with aiofiles.open(path, 'rb') as f:
                await self._engine.transfer(session, f, file_size, progress_callback)
        except OSError as e:
            raise IoFailureError(path, e) from e

        logger.info(f"Uploaded {path.name} as {session.file_identifier}")
        return session

    async def delete(
        self,
        file: Union[str, TransferSession],
        deletion_token: Optional[str] = None
    ) -> None:
        """
        Delete an uploaded file.

        Args:
            file: File identifier or the TransferSession returned by upload()
            deletion_token: Required when ``file`` is an identifier
        """
        if isinstance(file, TransferSession):
            file_identifier, deletion_token = file.file_identifier, file.deletion_token
        else:
            file_identifier = file
        if not deletion_token:
            raise InvalidConfigError("A deletion token is required to delete a file")
        await self._deletion.delete(file_identifier, deletion_token)

    async def download(
        self,
        file_identifier: str,
        destination: Union[str, Path] = "",
        replace: bool = False
    ) -> Path:
        """
        Download a file.

        Args:
            file_identifier: Identifier of the file
            destination: Target file or directory; empty for the current directory
            replace: Overwrite an existing file

        Returns:
            Path to the downloaded file
        """
        return await self._downloads.download(file_identifier, str(destination), replace)

    def download_url(self, file_identifier: str) -> str:
        """Public download link for a file."""
        return self._downloads.download_url(file_identifier)
