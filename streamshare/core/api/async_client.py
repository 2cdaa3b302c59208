"""
Async StreamShare HTTP client.

Owns the aiohttp session shared by all transfer services.
"""
import logging
from typing import Optional
import aiohttp

from .config import ClientConfig
from ..logging import get_logger


class AsyncHTTPClient:
    """
    Holds the shared aiohttp session and builds service URLs.

    The session carries no per-transfer state, so independent uploads,
    deletions and downloads may use it concurrently.

    Example:
        >>> async with AsyncHTTPClient(ClientConfig.default()) as http:
        ...     session = await http.get_session()
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize async HTTP client.

        Args:
            config: Client configuration (uses defaults if not provided)
            session: Optional externally owned session; it is never closed here
        """
        self._config = config or ClientConfig.default()
        self._session = session
        self._owns_session = session is None

        self._logger = get_logger('streamshare.api')
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def config(self) -> ClientConfig:
        """Get current configuration."""
        return self._config

    async def __aenter__(self) -> 'AsyncHTTPClient':
        await self.get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(**self._config.get_connector_kwargs())
            self._session = aiohttp.ClientSession(
                connector=connector,
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
            self._logger.debug(f"HTTP session opened for {self._config.host}")
        return self._session

    async def close(self):
        """Close session if we own it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._logger.debug("HTTP session closed")
        if self._owns_session:
            self._session = None

    def url(self, path: str) -> str:
        return self._config.http_url(path)

    def ws_url(self, path: str) -> str:
        return self._config.ws_url(path)
