"""
Chunked upload engine.

Streams a file over the upload WebSocket, one chunk at a time. Each binary
frame must be answered by a text ``ACK`` frame before the next one is sent,
so at most one unacknowledged chunk is ever in flight.
"""
import asyncio
import time
from typing import Optional

import aiohttp

from ..api import AsyncHTTPClient, ChunkingConfig
from ..exceptions import (
    ConnectFailedError,
    IoFailureError,
    PrematureCloseError,
    TransportError,
    UnexpectedMessageError,
    UploadError
)
from ..logging import get_logger
from .models import TransferContext, TransferSession
from .protocols import AsyncReader, ChunkingStrategy, ProgressCallback
from .strategies import FixedSizeChunkingStrategy

logger = get_logger('streamshare.upload.engine')

UPLOAD_PATH = '/api/upload/{file_identifier}'
ACK = 'ACK'
DONE_REASON = b'FILE_UPLOAD_DONE'

# Close frames are flushed on send; the server's close reply is not awaited.
WS_TIMEOUT = aiohttp.ClientWSTimeout(ws_receive=None, ws_close=0)

_CLOSED_TYPES = (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED)


def describe_frame(msg: aiohttp.WSMessage) -> str:
    """Short human-readable description of a WebSocket message."""
    if msg.type == aiohttp.WSMsgType.TEXT:
        text = msg.data if len(msg.data) <= 64 else msg.data[:64] + '...'
        return f"text frame {text!r}"
    if msg.type == aiohttp.WSMsgType.BINARY:
        return f"binary frame ({len(msg.data)} bytes)"
    return f"{msg.type.name.lower()} frame"


class ChunkedUploadEngine:
    """
    Drives the send/acknowledge loop for one upload at a time.

    The engine keeps no state between transfers; everything about an upload
    lives in its ``TransferContext``.

    Example:
        >>> engine = ChunkedUploadEngine(http, ChunkingConfig("example.com"))
        >>> async with aiofiles.open("photo.jpg", "rb") as f:
        ...     await engine.transfer(session, f, total_bytes=size)
    """

    def __init__(
        self,
        http: AsyncHTTPClient,
        chunking: ChunkingConfig,
        chunking_strategy: Optional[ChunkingStrategy] = None
    ):
        """
        Initialize upload engine.

        Args:
            http: Client holding the shared aiohttp session
            chunking: Server host and chunk size
            chunking_strategy: Strategy used to plan the expected chunks
        """
        self._http = http
        self._chunking = chunking
        self._strategy = chunking_strategy or FixedSizeChunkingStrategy(chunking.chunk_size)

    @property
    def chunk_size(self) -> int:
        return self._chunking.chunk_size

    def upload_url(self, session: TransferSession) -> str:
        return self._http.ws_url(UPLOAD_PATH.format(file_identifier=session.file_identifier))

    async def transfer(
        self,
        session: TransferSession,
        reader: AsyncReader,
        total_bytes: int,
        progress_callback: Optional[ProgressCallback] = None
    ) -> TransferSession:
        """
        Upload the contents of ``reader`` for an already negotiated session.

        Args:
            session: Session returned by the negotiator
            reader: Open binary file handle positioned at the start
            total_bytes: File size captured before the upload started
            progress_callback: Optional callback(bytes_sent, total_bytes)

        Returns:
            The same session, for later deletion or reference

        Raises:
            ConnectFailedError: If the WebSocket cannot be opened
            UnexpectedMessageError: If a chunk is answered with anything but ACK
            TransportError: On transport-level send/receive errors
            PrematureCloseError: If the server closes before acknowledging
            IoFailureError: If reading the file fails
        """
        url = self.upload_url(session)
        planned = self._strategy.count_chunks(total_bytes)
        logger.info(
            f"Uploading {session.file_identifier}: {total_bytes} bytes "
            f"in {planned} chunks of up to {self.chunk_size} bytes"
        )

        http_session = await self._http.get_session()
        try:
            ws = await http_session.ws_connect(url, timeout=WS_TIMEOUT)
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            logger.error(f"WebSocket connection to {url} failed: {e}")
            raise ConnectFailedError(url, e) from e

        context = TransferContext(session=session, total_bytes=total_bytes)
        async with ws:
            await self.send_file(ws, reader, context, progress_callback)

        return session

    async def send_file(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        reader: AsyncReader,
        context: TransferContext,
        progress_callback: Optional[ProgressCallback] = None
    ) -> TransferContext:
        """
        Run the send/acknowledge loop over an open WebSocket.

        Moves ``context`` through IDLE -> CHUNK_SENT -> AWAITING_ACK and back
        to IDLE for every chunk, ending in DONE or ERRORED.
        """
        started = time.time()
        try:
            while True:
                chunk = await self._read_chunk(reader)
                if not chunk:
                    break

                await self._send_chunk(ws, chunk, context)
                await self._await_ack(ws, context)
                context.acknowledged(len(chunk))
                progress = context.progress
                logger.debug(
                    f"Chunk {context.chunks_sent - 1} acknowledged "
                    f"({progress.bytes_sent}/{progress.total_bytes} bytes, {progress.percentage:.1f}%)"
                )

                if progress_callback:
                    progress_callback(context.bytes_sent, context.total_bytes)
        except (UploadError, IoFailureError) as e:
            context.failed(e)
            logger.error(f"Upload of {context.session.file_identifier} aborted: {e}")
            raise

        await self._finish(ws)
        context.done()

        elapsed = time.time() - started
        speed_kbps = (context.bytes_sent / 1024 / elapsed) if elapsed > 0 else 0
        logger.info(
            f"Upload of {context.session.file_identifier} complete: "
            f"{context.chunks_sent} chunks, {context.bytes_sent} bytes "
            f"in {elapsed:.2f}s ({speed_kbps:.1f} KB/s)"
        )
        return context

    async def _read_chunk(self, reader: AsyncReader) -> bytes:
        try:
            return await reader.read(self.chunk_size)
        except OSError as e:
            raise IoFailureError(getattr(reader, 'name', '<file>'), e) from e

    async def _send_chunk(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        chunk: bytes,
        context: TransferContext
    ) -> None:
        try:
            await ws.send_bytes(chunk)
        except (aiohttp.ClientError, OSError) as e:
            raise TransportError(f"Sending chunk {context.chunks_sent} failed: {e}") from e
        context.chunk_sent()

    async def _await_ack(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        context: TransferContext
    ) -> None:
        """Wait for exactly one frame and require it to be ``ACK``."""
        context.awaiting_ack()
        index = context.chunks_sent
        msg = await ws.receive()

        if msg.type == aiohttp.WSMsgType.TEXT and msg.data == ACK:
            return
        if msg.type in _CLOSED_TYPES:
            close_code = msg.data if msg.type == aiohttp.WSMsgType.CLOSE else ws.close_code
            raise PrematureCloseError(index, close_code)
        if msg.type == aiohttp.WSMsgType.ERROR:
            raise TransportError(f"WebSocket error while awaiting ACK for chunk {index}: {msg.data}")
        raise UnexpectedMessageError(describe_frame(msg), index)

    async def _finish(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        """Send the final close frame without waiting for the server's reply."""
        try:
            closed = await ws.close(code=aiohttp.WSCloseCode.OK, message=DONE_REASON)
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Close handshake failed after upload: {e}")
            return
        if not closed:
            logger.debug("WebSocket was already closed when the upload finished")
