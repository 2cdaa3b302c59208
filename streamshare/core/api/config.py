"""
API configuration module.

Provides configuration for the StreamShare HTTP and WebSocket client.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Union
import ssl

import aiohttp

from ..exceptions import InvalidConfigError

DEFAULT_HOST = 'streamshare.wireway.ch'
DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KiB


@dataclass(frozen=True)
class ChunkingConfig:
    """
    Upload chunking configuration.

    Immutable per client instance. The chunk size is a tunable, not a
    protocol constant.

    Attributes:
        server_host: Host (and optional port) of the StreamShare server
        chunk_size: Bytes per WebSocket frame
    """
    server_host: str
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        if not self.server_host:
            raise InvalidConfigError("Server host must not be empty")
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
            raise InvalidConfigError(
                f"Chunk size must be an integer, got {type(self.chunk_size).__name__}"
            )
        if self.chunk_size <= 0:
            raise InvalidConfigError(f"Chunk size must be positive, got {self.chunk_size}")


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.

    Allows customization of SSL behavior for security requirements.
    """
    verify: bool = True
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self) -> Union[ssl.SSLContext, bool]:
        """Create SSL context from configuration."""
        if not self.verify:
            return False  # Disable SSL verification

        context = ssl.create_default_context()

        if self.ca_file:
            context.load_verify_locations(self.ca_file)

        context.check_hostname = self.check_hostname

        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Nothing is limited by default; callers that need deadlines set them here
    or wrap operations in ``asyncio.wait_for``.
    """
    total: Optional[float] = None
    connect: Optional[float] = None
    sock_read: Optional[float] = None
    sock_connect: Optional[float] = None

    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        """Convert to aiohttp ClientTimeout."""
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class ClientConfig:
    """
    Complete client configuration.

    Centralizes all configuration options for the StreamShare client.

    Example:
        >>> config = ClientConfig(host="localhost:8080", secure=False)
        >>> config.http_url("/api/create")
        'http://localhost:8080/api/create'
    """
    host: str = DEFAULT_HOST
    chunk_size: int = DEFAULT_CHUNK_SIZE

    # https/wss when True, http/ws otherwise
    secure: bool = True

    user_agent: str = 'streamshare/1.0.0'
    extra_headers: Dict[str, str] = field(default_factory=dict)

    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    log_level: int = 20  # logging.INFO

    def __post_init__(self):
        # Fail eagerly on bad host or chunk size
        self._chunking = ChunkingConfig(self.host, self.chunk_size)

    @classmethod
    def default(cls) -> 'ClientConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def local(cls, host: str, **kwargs) -> 'ClientConfig':
        """Create configuration for a plain-text (http/ws) server."""
        return cls(host=host, secure=False, **kwargs)

    @property
    def chunking(self) -> ChunkingConfig:
        """Returns the chunking configuration."""
        return self._chunking

    @property
    def http_scheme(self) -> str:
        return 'https' if self.secure else 'http'

    @property
    def ws_scheme(self) -> str:
        return 'wss' if self.secure else 'ws'

    def http_url(self, path: str) -> str:
        """Build an HTTP URL for the given path."""
        return f"{self.http_scheme}://{self.host}/{path.lstrip('/')}"

    def ws_url(self, path: str) -> str:
        """Build a WebSocket URL for the given path."""
        return f"{self.ws_scheme}://{self.host}/{path.lstrip('/')}"

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'ssl': self.ssl.create_ssl_context() if self.secure else False,
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
