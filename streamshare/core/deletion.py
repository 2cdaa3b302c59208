"""Deletion of uploaded files."""
import asyncio
from urllib.parse import quote

import aiohttp

from .api import AsyncHTTPClient
from .exceptions import DeleteFailedError, TransportError
from .logging import get_logger

logger = get_logger('streamshare.delete')

DELETE_PATH = '/api/delete/{file_identifier}/{deletion_token}'


class DeletionService:
    """
    Deletes files using the identifiers handed out at upload time.

    Whether a repeated delete succeeds is up to the server.
    """

    def __init__(self, http: AsyncHTTPClient):
        self._http = http

    def delete_url(self, file_identifier: str, deletion_token: str) -> str:
        path = DELETE_PATH.format(
            file_identifier=quote(file_identifier, safe=''),
            deletion_token=quote(deletion_token, safe='')
        )
        return self._http.url(path)

    async def delete(self, file_identifier: str, deletion_token: str) -> None:
        """
        Delete a file.

        Args:
            file_identifier: Identifier returned when the upload was created
            deletion_token: Token returned alongside the identifier

        Raises:
            DeleteFailedError: If the server answers with a non-success status
            TransportError: If the HTTP request itself fails
        """
        url = self.delete_url(file_identifier, deletion_token)
        session = await self._http.get_session()

        logger.info(f"Deleting {file_identifier}")
        try:
            async with session.delete(url) as response:
                if not 200 <= response.status < 300:
                    logger.error(f"Delete of {file_identifier} failed: HTTP {response.status}")
                    raise DeleteFailedError(response.status)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Delete request to {url} failed: {e}") from e

        logger.info(f"Deleted {file_identifier}")
