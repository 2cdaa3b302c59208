"""Pytest fixtures for StreamShare tests."""
import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web, WSMsgType
from aiohttp.test_utils import TestServer

from streamshare import StreamShareClient, ClientConfig

# Reply that makes the fake server close the channel instead of answering
CLOSE = object()


@dataclass
class UploadRecord:
    """What the fake server saw on one upload channel."""
    name: str
    deletion_token: str
    chunks: List[bytes] = field(default_factory=list)
    close_code: Optional[int] = None
    close_reason: Optional[str] = None
    deleted: bool = False
    closed: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def content(self) -> bytes:
        return b''.join(self.chunks)


class FakeStreamShare:
    """
    In-process StreamShare server.

    Implements create, upload, delete and download over plain http/ws.
    Behaviour can be changed per test through the public attributes.
    """

    CLOSE = CLOSE

    def __init__(self):
        self.uploads: Dict[str, UploadRecord] = {}
        self.create_requests: List[Any] = []
        self.create_status = 200
        self.create_body: Optional[Any] = None
        self.replies: Dict[int, Any] = {}
        self.ws_connects = 0
        self.download_requests = 0
        self.downloads: Dict[str, tuple] = {}
        # Seconds the HTTP endpoints wait before answering
        self.delay = 0.0
        self._counter = 0
        self.server: Optional[TestServer] = None

    @property
    def host(self) -> str:
        return f"{self.server.host}:{self.server.port}"

    async def stall(self):
        if self.delay:
            await asyncio.sleep(self.delay)

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post('/api/create', self.create)
        app.router.add_get('/api/upload/{file_id}', self.upload)
        app.router.add_delete('/api/delete/{file_id}/{token}', self.delete)
        app.router.add_get('/download/{file_id}', self.download)
        return app

    async def create(self, request: web.Request) -> web.StreamResponse:
        self.create_requests.append(await request.json())
        await self.stall()
        if self.create_status != 200:
            return web.Response(status=self.create_status)
        if self.create_body is not None:
            if isinstance(self.create_body, (str, bytes)):
                return web.Response(body=self.create_body, content_type='application/json')
            return web.json_response(self.create_body)

        self._counter += 1
        file_id = f"file{self._counter}"
        token = f"token{self._counter}"
        self.uploads[file_id] = UploadRecord(
            name=self.create_requests[-1]['name'],
            deletion_token=token
        )
        return web.json_response({'fileIdentifier': file_id, 'deletionToken': token})

    async def upload(self, request: web.Request) -> web.StreamResponse:
        self.ws_connects += 1
        file_id = request.match_info['file_id']
        record = self.uploads.setdefault(file_id, UploadRecord(name=file_id, deletion_token=''))

        ws = web.WebSocketResponse()
        await ws.prepare(request)

        try:
            while True:
                msg = await ws.receive()
                if msg.type == WSMsgType.BINARY:
                    record.chunks.append(msg.data)
                    reply = self.replies.get(len(record.chunks) - 1, 'ACK')
                    if reply is CLOSE:
                        await ws.close()
                        break
                    if isinstance(reply, bytes):
                        await ws.send_bytes(reply)
                    else:
                        await ws.send_str(reply)
                elif msg.type == WSMsgType.CLOSE:
                    record.close_code = msg.data
                    record.close_reason = msg.extra
                    break
                else:
                    break
        finally:
            record.closed.set()
        return ws

    async def delete(self, request: web.Request) -> web.StreamResponse:
        await self.stall()
        record = self.uploads.get(request.match_info['file_id'])
        if record is None or record.deleted or record.deletion_token != request.match_info['token']:
            return web.Response(status=404)
        record.deleted = True
        return web.Response(status=200)

    async def download(self, request: web.Request) -> web.StreamResponse:
        self.download_requests += 1
        await self.stall()
        file_id = request.match_info['file_id']
        if file_id in self.downloads:
            body, headers = self.downloads[file_id]
            return web.Response(body=body, headers=headers)

        record = self.uploads.get(file_id)
        if record is None or record.deleted:
            return web.Response(status=404)
        return web.Response(
            body=record.content,
            headers={'Content-Disposition': f'attachment; filename="{record.name}"'}
        )


@pytest_asyncio.fixture
async def fake_service():
    """Start a fake StreamShare server on a random local port."""
    service = FakeStreamShare()
    service.server = TestServer(service.make_app())
    await service.server.start_server()
    yield service
    await service.server.close()


@pytest.fixture
def chunk_size():
    return 64 * 1024


@pytest_asyncio.fixture
async def client(fake_service, chunk_size):
    """Client talking to the fake server."""
    config = ClientConfig.local(fake_service.host, chunk_size=chunk_size)
    async with StreamShareClient(config=config) as c:
        yield c


@pytest.fixture
def make_file(tmp_path):
    """Factory creating files with deterministic content."""
    def _make(name: str = "data.bin", size: int = 0) -> Path:
        path = tmp_path / name
        path.write_bytes(bytes(i % 251 for i in range(size)))
        return path
    return _make
