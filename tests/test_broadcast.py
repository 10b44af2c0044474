"""Tests for the live reload WebSocket endpoint."""

import asyncio
from collections.abc import Callable
from pathlib import Path

import aiohttp
import pytest
from aiohttp.test_utils import TestClient
from liveserve.core import LiveServer
from liveserve.live.broadcast import WS_PATH
from liveserve.live.messages import BroadcastMessage


@pytest.fixture
def client(server: LiveServer, aiohttp_client) -> TestClient:
    """Create test client for the live server application."""
    return aiohttp_client(server.create_app())


async def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


async def _connect(test_client: TestClient) -> aiohttp.ClientWebSocketResponse:
    ws = await test_client.ws_connect(WS_PATH)
    assert await ws.receive_json() == {"action": "connected"}
    return ws


async def _assert_silent(ws: aiohttp.ClientWebSocketResponse) -> None:
    with pytest.raises(asyncio.TimeoutError):
        await ws.receive(timeout=0.2)


class TestConnection:
    """Tests for the WebSocket connection lifecycle."""

    @pytest.mark.asyncio
    async def test__connect__sends_handshake(self, server: LiveServer, client) -> None:
        test_client = await client

        ws = await _connect(test_client)

        assert len(server.broadcaster.clients) == 1
        await ws.close()

    @pytest.mark.asyncio
    async def test__watch_list__registers_client(self, server: LiveServer, client) -> None:
        test_client = await client
        ws = await _connect(test_client)

        await ws.send_json({"watchList": ["/app/page.html"]})
        await _wait_for(lambda: len(server.watchers) == 1)

        (registered,) = server.broadcaster.clients
        assert server.watchers.watch_list(registered) == ["/app/page.html"]
        await ws.close()

    @pytest.mark.asyncio
    async def test__empty_watch_list__replaces_previous(
        self, server: LiveServer, client, root_dir: Path
    ) -> None:
        test_client = await client
        ws = await _connect(test_client)
        await ws.send_json({"watchList": ["/app/page.html"]})
        await _wait_for(lambda: len(server.watchers) == 1)
        (registered,) = server.broadcaster.clients

        await ws.send_json({"watchList": []})
        await _wait_for(lambda: server.watchers.watch_list(registered) == [])

        server.debouncer.on_change(str(root_dir / "app" / "page.html"), "<h1>Gone</h1>")
        await _assert_silent(ws)
        await ws.close()

    @pytest.mark.asyncio
    async def test__close__unregisters_client(self, server: LiveServer, client) -> None:
        test_client = await client
        ws = await _connect(test_client)
        await ws.send_json({"watchList": "/"})
        await _wait_for(lambda: len(server.watchers) == 1)

        await ws.close()
        await _wait_for(lambda: not server.broadcaster.clients)

        assert len(server.watchers) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        ["not json", "[1, 2]", '{"other": 1}', '{"watchList": 5}', '{"watchList": ""}'],
    )
    async def test__malformed_message__ignored_and_connection_kept(
        self, server: LiveServer, client, payload: str
    ) -> None:
        test_client = await client
        ws = await _connect(test_client)

        await ws.send_str(payload)
        await ws.send_json({"watchList": "/index.html"})
        await _wait_for(lambda: len(server.watchers) == 1)

        (registered,) = server.broadcaster.clients
        assert server.watchers.watch_list(registered) == ["/index.html"]
        assert not ws.closed
        await ws.close()

    @pytest.mark.asyncio
    async def test__upgrade_on_other_path__rejected(self, server: LiveServer, client) -> None:
        test_client = await client

        with pytest.raises(aiohttp.ClientError):
            await test_client.ws_connect("/not-the-socket")

        assert not server.broadcaster.clients

    @pytest.mark.asyncio
    async def test__upgrade_with_query_string__rejected(
        self, server: LiveServer, client
    ) -> None:
        test_client = await client

        with pytest.raises(aiohttp.ClientError):
            await test_client.ws_connect(f"{WS_PATH}?x=1")

        assert not server.broadcaster.clients


class TestBroadcast:
    """Tests for BroadcastManager.broadcast()."""

    @pytest.mark.asyncio
    async def test__html_change__reaches_only_watching_clients(
        self, server: LiveServer, client, root_dir: Path
    ) -> None:
        test_client = await client
        watching = await _connect(test_client)
        other = await _connect(test_client)
        await watching.send_json({"watchList": ["/app/page.html"]})
        await other.send_json({"watchList": ["/other.html"]})
        await _wait_for(lambda: len(server.watchers) == 2)

        server.debouncer.on_change(str(root_dir / "app" / "page.html"), "<h1>New</h1>")

        assert await watching.receive_json(timeout=2) == {
            "data": {"dom": "<h1>New</h1>", "fileName": "/app/page.html"},
            "action": "hot",
        }
        await _assert_silent(other)
        await watching.close()
        await other.close()

    @pytest.mark.asyncio
    async def test__css_change__reaches_every_client(
        self, server: LiveServer, client, root_dir: Path
    ) -> None:
        test_client = await client
        watching = await _connect(test_client)
        other = await _connect(test_client)
        unregistered = await _connect(test_client)
        await watching.send_json({"watchList": ["/app/page.html"]})
        await other.send_json({"watchList": ["/other.html"]})
        await _wait_for(lambda: len(server.watchers) == 2)

        server.debouncer.on_change(str(root_dir / "app" / "style.css"), "body {}")

        expected = {"data": {"fileName": "/app/style.css"}, "action": "refreshcss"}
        for ws in (watching, other, unregistered):
            assert await ws.receive_json(timeout=2) == expected
            await ws.close()

    @pytest.mark.asyncio
    async def test__directory_watch__matches_index_page(
        self, server: LiveServer, client
    ) -> None:
        test_client = await client
        ws = await _connect(test_client)
        await ws.send_json({"watchList": "/"})
        await _wait_for(lambda: len(server.watchers) == 1)

        sent = await server.broadcaster.broadcast(
            BroadcastMessage(action="reload", file_name="/index.html")
        )

        assert sent == 1
        assert (await ws.receive_json(timeout=2))["action"] == "reload"
        await ws.close()

    @pytest.mark.asyncio
    async def test__no_clients__sends_nothing(self, server: LiveServer) -> None:
        sent = await server.broadcaster.broadcast(
            BroadcastMessage(action="reload", file_name="/app.js")
        )

        assert sent == 0

    @pytest.mark.asyncio
    async def test__close_all__empties_registries(self, server: LiveServer, client) -> None:
        test_client = await client
        ws = await _connect(test_client)
        await ws.send_json({"watchList": "/"})
        await _wait_for(lambda: len(server.watchers) == 1)

        closing = asyncio.create_task(server.broadcaster.close_all())
        msg = await ws.receive(timeout=2)
        await closing

        assert msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED)
        assert not server.broadcaster.clients
        assert len(server.watchers) == 0
