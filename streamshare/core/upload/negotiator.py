"""
Transfer session negotiation.

Issues the HTTP create call that opens an upload session on the server.
"""
import asyncio
import json
from pathlib import Path
from typing import Union, Optional

import aiohttp

from ..api import AsyncHTTPClient
from ..exceptions import CreateFailedError, InvalidServerResponseError, TransportError
from ..logging import get_logger
from .models import TransferSession
from .services import FileValidator

logger = get_logger('streamshare.upload.negotiator')

CREATE_PATH = '/api/create'


class SessionNegotiator:
    """
    Creates upload sessions.

    A single attempt is made per call; any failure is terminal.
    """

    def __init__(self, http: AsyncHTTPClient, validator: Optional[FileValidator] = None):
        self._http = http
        self._validator = validator or FileValidator()

    async def create(self, file_path: Union[str, Path]) -> TransferSession:
        """
        Create an upload session for a local file.

        Args:
            file_path: Path to the file that will be uploaded

        Returns:
            TransferSession with file identifier and deletion token

        Raises:
            NotAFileError: If the path is not a regular file (no request is made)
            CreateFailedError: If the server answers with a non-success status
            InvalidServerResponseError: If the response body is malformed
            TransportError: If the HTTP request itself fails
        """
        path, _ = self._validator.validate(file_path)
        return await self.open_session(self._validator.upload_name(path))

    async def open_session(self, name: str) -> TransferSession:
        """
        Issue the create call for an already validated file.

        Args:
            name: Filename announced to the server
        """
        url = self._http.url(CREATE_PATH)

        logger.info(f"Creating upload session for {name}")
        session = await self._http.get_session()

        try:
            async with session.post(url, json={'name': name}) as response:
                if not 200 <= response.status < 300:
                    logger.error(f"Create request failed: HTTP {response.status}")
                    raise CreateFailedError(response.status)
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Create request to {url} failed: {e}") from e

        transfer_session = self._parse_response(body)
        logger.info(f"Upload session created: {transfer_session.file_identifier}")
        return transfer_session

    def _parse_response(self, body: bytes) -> TransferSession:
        """
        Parse the create-response body.

        Raises:
            InvalidServerResponseError: If the body is not a JSON object with
                string ``fileIdentifier`` and ``deletionToken`` fields
        """
        try:
            data = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise InvalidServerResponseError(f"Create response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise InvalidServerResponseError(
                f"Create response must be a JSON object, got {type(data).__name__}"
            )

        try:
            return TransferSession.from_response(data)
        except KeyError as e:
            raise InvalidServerResponseError(f"Create response is missing field {e}") from e
        except TypeError as e:
            raise InvalidServerResponseError(f"Create response has invalid fields: {e}") from e
