"""Tests for the chunked upload engine."""
import asyncio
import math

import aiofiles
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, Mock

from aiohttp import WSMessage, WSMsgType, web
from aiohttp.test_utils import TestServer

from streamshare.core.api import AsyncHTTPClient, ChunkingConfig, ClientConfig
from streamshare.core.exceptions import (
    ConnectFailedError,
    IoFailureError,
    PrematureCloseError,
    UnexpectedMessageError
)
from streamshare.core.upload import (
    ChunkedUploadEngine,
    TransferContext,
    TransferSession,
    TransferState
)
from streamshare.core.upload.engine import describe_frame

KIB = 1024


class TestRoundTrip:
    """Uploads against the fake server."""

    @pytest.mark.asyncio
    async def test_130k_file_in_64k_chunks(self, client, fake_service, make_file):
        """130 KiB with 64 KiB chunks is sent as 64K, 64K, 2K."""
        path = make_file(size=130 * KIB)

        session = await client.upload(path)

        assert session.file_identifier
        assert session.deletion_token
        record = fake_service.uploads[session.file_identifier]
        assert [len(c) for c in record.chunks] == [64 * KIB, 64 * KIB, 2 * KIB]
        assert record.content == path.read_bytes()

        await asyncio.wait_for(record.closed.wait(), 5)
        assert record.close_code == 1000
        assert record.close_reason == "FILE_UPLOAD_DONE"

        await client.delete(session)
        assert record.deleted

    @pytest.mark.asyncio
    async def test_empty_file_sends_no_chunks(self, client, fake_service, make_file):
        """Zero-byte files open the channel and close it immediately."""
        path = make_file(size=0)
        progress = Mock()

        session = await client.upload(path, progress_callback=progress)

        record = fake_service.uploads[session.file_identifier]
        await asyncio.wait_for(record.closed.wait(), 5)
        assert record.chunks == []
        assert record.close_reason == "FILE_UPLOAD_DONE"
        assert fake_service.ws_connects == 1
        progress.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 1000, 4096, 4097, 10_000])
    async def test_chunk_count(self, fake_service, make_file, size):
        """ceil(S / C) chunks whose lengths add up to S."""
        engine_chunk = 4096
        config = ClientConfig.local(fake_service.host, chunk_size=engine_chunk)
        path = make_file(size=size)

        async with AsyncHTTPClient(config) as http:
            engine = ChunkedUploadEngine(http, config.chunking)
            session = TransferSession("manual", "token")
            async with aiofiles.open(path, 'rb') as f:
                await engine.transfer(session, f, size)

        chunks = fake_service.uploads["manual"].chunks
        assert len(chunks) == math.ceil(size / engine_chunk)
        assert sum(len(c) for c in chunks) == size

    @pytest.mark.asyncio
    async def test_progress_is_monotonic_and_complete(self, client, make_file):
        """Progress reports cumulative bytes and ends at the total."""
        path = make_file(size=200 * KIB)
        calls = []

        await client.upload(path, progress_callback=lambda sent, total: calls.append((sent, total)))

        sent_values = [sent for sent, _ in calls]
        assert len(calls) == 4
        assert sent_values == sorted(sent_values)
        assert all(total == 200 * KIB for _, total in calls)
        assert calls[-1] == (200 * KIB, 200 * KIB)

    @pytest.mark.asyncio
    async def test_unexpected_reply_stops_transfer(self, client, fake_service, make_file):
        """A reply other than ACK aborts and no further chunks are sent."""
        fake_service.replies = {1: "NOPE"}
        path = make_file(size=300 * KIB)

        with pytest.raises(UnexpectedMessageError) as exc_info:
            await client.upload(path)

        assert exc_info.value.chunk_index == 1
        assert "NOPE" in exc_info.value.frame
        record = fake_service.uploads["file1"]
        await asyncio.wait_for(record.closed.wait(), 5)
        assert len(record.chunks) == 2
        assert record.close_reason != "FILE_UPLOAD_DONE"

    @pytest.mark.asyncio
    async def test_binary_reply_is_unexpected(self, client, fake_service, make_file):
        fake_service.replies = {0: b"ACK"}

        with pytest.raises(UnexpectedMessageError, match="binary frame"):
            await client.upload(make_file(size=10))

    @pytest.mark.asyncio
    async def test_lowercase_ack_is_unexpected(self, client, fake_service, make_file):
        fake_service.replies = {0: "ack"}

        with pytest.raises(UnexpectedMessageError):
            await client.upload(make_file(size=10))

    @pytest.mark.asyncio
    async def test_server_close_before_ack(self, client, fake_service, make_file):
        """Server closing instead of acknowledging is a premature close."""
        fake_service.replies = {0: fake_service.CLOSE}

        with pytest.raises(PrematureCloseError) as exc_info:
            await client.upload(make_file(size=100 * KIB))

        assert exc_info.value.chunk_index == 0
        assert len(fake_service.uploads["file1"].chunks) == 1

    @pytest.mark.asyncio
    async def test_connect_failure(self, make_file):
        """Unreachable server fails with ConnectFailedError."""
        config = ClientConfig.local("127.0.0.1:1")
        path = make_file(size=10)

        async with AsyncHTTPClient(config) as http:
            engine = ChunkedUploadEngine(http, config.chunking)
            async with aiofiles.open(path, 'rb') as f:
                with pytest.raises(ConnectFailedError, match="127.0.0.1:1"):
                    await engine.transfer(TransferSession("id", "tok"), f, 10)


class FakeReader:
    """In-memory async reader."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    async def read(self, size: int = -1) -> bytes:
        chunk = self._data[self._pos:self._pos + size]
        self._pos += len(chunk)
        return chunk


class TestSendLoop:
    """Tests for the send/ack loop with a mocked WebSocket."""

    @pytest.fixture
    def engine(self):
        http = AsyncHTTPClient(ClientConfig.local("example.invalid", chunk_size=4))
        return ChunkedUploadEngine(http, ChunkingConfig("example.invalid", 4))

    @pytest.fixture
    def context(self):
        return TransferContext(session=TransferSession("id", "tok"), total_bytes=10)

    def make_ws(self, *messages):
        ws = Mock()
        ws.send_bytes = AsyncMock()
        ws.receive = AsyncMock(side_effect=list(messages))
        ws.close = AsyncMock(return_value=True)
        ws.close_code = None
        return ws

    @pytest.mark.asyncio
    async def test_state_after_success(self, engine, context):
        ack = WSMessage(WSMsgType.TEXT, "ACK", None)
        ws = self.make_ws(ack, ack, ack)

        result = await engine.send_file(ws, FakeReader(b"0123456789"), context)

        assert result.state == TransferState.DONE
        assert result.chunks_sent == 3
        assert result.bytes_sent == 10
        assert [c.args[0] for c in ws.send_bytes.call_args_list] == [b"0123", b"4567", b"89"]
        ws.close.assert_awaited_once()
        assert ws.close.call_args.kwargs['message'] == b"FILE_UPLOAD_DONE"

    @pytest.mark.asyncio
    async def test_state_after_unexpected_message(self, engine, context):
        ws = self.make_ws(
            WSMessage(WSMsgType.TEXT, "ACK", None),
            WSMessage(WSMsgType.TEXT, "ERR", None)
        )

        with pytest.raises(UnexpectedMessageError):
            await engine.send_file(ws, FakeReader(b"0123456789"), context)

        assert context.state == TransferState.ERRORED
        assert isinstance(context.last_error, UnexpectedMessageError)
        assert context.bytes_sent == 4
        assert ws.send_bytes.await_count == 2
        ws.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_error_frame_is_transport_error(self, engine, context):
        from streamshare.core.exceptions import TransportError

        ws = self.make_ws(WSMessage(WSMsgType.ERROR, ConnectionResetError("reset"), None))

        with pytest.raises(TransportError, match="reset"):
            await engine.send_file(ws, FakeReader(b"0123"), context)

    @pytest.mark.asyncio
    async def test_send_failure_is_transport_error(self, engine, context):
        from streamshare.core.exceptions import TransportError

        ws = self.make_ws()
        ws.send_bytes = AsyncMock(side_effect=ConnectionResetError("Cannot write to closing transport"))

        with pytest.raises(TransportError):
            await engine.send_file(ws, FakeReader(b"0123"), context)

        assert context.state == TransferState.ERRORED

    @pytest.mark.asyncio
    async def test_close_failure_does_not_fail_upload(self, engine, context):
        ws = self.make_ws(WSMessage(WSMsgType.TEXT, "ACK", None))
        ws.close = AsyncMock(side_effect=asyncio.TimeoutError())

        result = await engine.send_file(ws, FakeReader(b"012"), context)

        assert result.state == TransferState.DONE

    @pytest.mark.asyncio
    async def test_read_failure_is_io_failure(self, engine, context):
        reader = Mock()
        reader.name = "/data/video.mp4"
        reader.read = AsyncMock(side_effect=OSError(5, "Input/output error"))
        ws = self.make_ws()

        with pytest.raises(IoFailureError, match="video.mp4"):
            await engine.send_file(ws, reader, context)

        assert context.state == TransferState.ERRORED
        assert isinstance(context.last_error, IoFailureError)
        ws.send_bytes.assert_not_awaited()
        ws.close.assert_not_awaited()


class TestCloseNotAwaited:
    """The final close frame does not wait for the server's reply."""

    @pytest_asyncio.fixture
    async def silent_server(self):
        """Server that accepts the channel and never reads from it."""
        release = asyncio.Event()

        async def handler(request):
            ws = web.WebSocketResponse()
            await ws.prepare(request)
            await release.wait()
            return ws

        app = web.Application()
        app.router.add_get('/api/upload/{file_id}', handler)
        server = TestServer(app)
        await server.start_server()
        yield f"{server.host}:{server.port}"
        release.set()
        await server.close()

    @pytest.mark.asyncio
    async def test_returns_without_close_reply(self, silent_server):
        config = ClientConfig.local(silent_server)

        async with AsyncHTTPClient(config) as http:
            engine = ChunkedUploadEngine(http, config.chunking)
            session = TransferSession("id", "tok")

            result = await asyncio.wait_for(engine.transfer(session, FakeReader(b""), 0), 2)

        assert result == session


class TestDescribeFrame:
    """Tests for frame descriptions in error messages."""

    def test_text(self):
        assert describe_frame(WSMessage(WSMsgType.TEXT, "NOPE", None)) == "text frame 'NOPE'"

    def test_long_text_is_truncated(self):
        description = describe_frame(WSMessage(WSMsgType.TEXT, "x" * 500, None))
        assert len(description) < 100

    def test_binary(self):
        assert describe_frame(WSMessage(WSMsgType.BINARY, b"abc", None)) == "binary frame (3 bytes)"
