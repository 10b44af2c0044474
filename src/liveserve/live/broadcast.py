"""WebSocket endpoint and reload fan-out.

Browser clients connect to WS_PATH, receive a handshake, declare which pages
they are showing and then get reload notifications for those pages (HTML) or
for every change (stylesheets and other assets).
"""

import json
import logging
from collections.abc import Awaitable, Callable

from aiohttp import WSCloseCode, WSMsgType, hdrs, web

from liveserve.injection import is_injectable_file
from liveserve.live.messages import BroadcastMessage
from liveserve.live.watchers import WatcherRegistry

logger = logging.getLogger(__name__)

WS_PATH = "/_ws_lspp"


class BroadcastManager:
    """Owns connected WebSocket clients and their watch lists."""

    def __init__(self, watchers: WatcherRegistry[web.WebSocketResponse] | None = None) -> None:
        self.watchers: WatcherRegistry[web.WebSocketResponse] = (
            watchers if watchers is not None else WatcherRegistry()
        )
        self._clients: set[web.WebSocketResponse] = set()

    @property
    def clients(self) -> frozenset[web.WebSocketResponse]:
        return frozenset(self._clients)

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Serve one browser client for its whole connection.

        Sends the connected handshake, registers every watch list the client
        declares and drops the client and its watch list when it disconnects.
        """
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._clients.add(ws)
        logger.debug(f"Client connected ({len(self._clients)} open)")

        try:
            await ws.send_str(BroadcastMessage.connected().to_json())
            async for msg in ws:
                if msg.type == WSMsgType.TEXT:
                    self._on_message(ws, msg.data)
                elif msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._clients.discard(ws)
            self.watchers.unregister(ws)
            logger.debug(f"Client disconnected ({len(self._clients)} open)")

        return ws

    def _on_message(self, ws: web.WebSocketResponse, raw: str) -> None:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug(f"Ignoring malformed client message: {raw[:100]!r}")
            return

        if not isinstance(payload, dict):
            return

        watch_list = payload.get("watchList")
        if watch_list is None or watch_list == "":
            return
        if isinstance(watch_list, list) and all(isinstance(p, str) for p in watch_list):
            self.watchers.register(ws, watch_list)
        elif isinstance(watch_list, str):
            self.watchers.register(ws, watch_list)
        else:
            logger.debug(f"Ignoring watch list of type {type(watch_list).__name__}")

    def recipients(self, message: BroadcastMessage) -> list[web.WebSocketResponse]:
        """Select the clients a message is delivered to.

        HTML changes only reach clients watching the changed page, anything
        else reaches every connected client.
        """
        if is_injectable_file(message.file_name):
            return [ws for ws in self.watchers.clients_for(message.file_name) if ws in self._clients]
        return list(self._clients)

    async def broadcast(self, message: BroadcastMessage) -> int:
        """Send a reload notification to the interested clients.

        Args:
            message: Notification to deliver

        Returns:
            Number of clients the message was sent to
        """
        recipients = self.recipients(message)
        if not recipients:
            return 0

        payload = message.to_json()
        sent = 0
        for ws in recipients:
            if ws.closed:
                continue
            try:
                await ws.send_str(payload)
            except ConnectionResetError:
                # Client disconnected mid-send, cleaned up by its handler
                continue
            sent += 1

        logger.debug(f"Sent {message.action} for {message.file_name} to {sent} client(s)")
        return sent

    async def close_all(self) -> None:
        """Close every client socket and forget all registrations."""
        try:
            for ws in list(self._clients):
                await ws.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
        finally:
            self._clients.clear()
            self.watchers.clear()


@web.middleware
async def reject_foreign_upgrades(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Drop WebSocket upgrade requests aimed at anything but WS_PATH."""
    upgrade = request.headers.get(hdrs.UPGRADE, "")
    if upgrade.lower() == "websocket" and request.path_qs != WS_PATH:
        logger.debug(f"Rejecting WebSocket upgrade for {request.path}")
        if request.transport is not None:
            request.transport.close()
        return web.Response(status=400)
    return await handler(request)
