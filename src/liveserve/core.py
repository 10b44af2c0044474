"""Live server orchestration.

LiveServer ties the static file router, the WebSocket broadcast endpoint and
the change debouncer together and exposes start/stop/reconfigure plus an
event surface to the hosting application.
"""

import enum
import errno
import logging
from collections.abc import Callable
from typing import Protocol

from aiohttp import web

from liveserve.config import Config
from liveserve.errors import (
    CWD_UNDEFINED,
    PORT_ALREADY_IN_USE,
    SERVER_IS_ALREADY_RUNNING,
    SERVER_IS_NOT_RUNNING,
    LiveServerError,
)
from liveserve.events import (
    EventEmitter,
    GoLiveEvent,
    GoOfflineEvent,
    ServerErrorEvent,
    Subscription,
)
from liveserve.live.broadcast import WS_PATH, BroadcastManager, reject_foreign_upgrades
from liveserve.live.debounce import ChangeDebouncer
from liveserve.live.source import ChangeEventSource, DocumentChange
from liveserve.live.watchers import WatcherRegistry
from liveserve.router import Middleware, RequestRouter

logger = logging.getLogger(__name__)


class ServerState(enum.Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


class ChangeSource(Protocol):
    def subscribe(self, handler: Callable[[DocumentChange], object]) -> Subscription: ...


class Service(Protocol):
    def register(self) -> None: ...


ServiceFactory = Callable[["LiveServer"], Service]


class LiveServer:
    """Development server with targeted live reload.

    Lifecycle problems (starting twice, stopping while stopped, a busy port)
    are reported through on_server_error instead of being raised.
    """

    def __init__(self, config: Config, change_source: ChangeSource | None = None) -> None:
        self.change_source: ChangeSource = (
            change_source if change_source is not None else ChangeEventSource()
        )
        self.on_did_go_live: EventEmitter[GoLiveEvent] = EventEmitter()
        self.on_did_go_offline: EventEmitter[GoOfflineEvent] = EventEmitter()
        self.on_server_error: EventEmitter[ServerErrorEvent] = EventEmitter()

        self._state = ServerState.STOPPED
        self._middlewares: list[Middleware] = []
        self._runner: web.AppRunner | None = None
        self._change_subscription: Subscription | None = None

        self.watchers: WatcherRegistry[web.WebSocketResponse] = WatcherRegistry()
        self.broadcaster = BroadcastManager(self.watchers)
        self.debouncer = ChangeDebouncer(self.broadcaster.broadcast)
        self.router = RequestRouter(None, self._middlewares)

        self._config = config
        self._apply_config()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ServerState.RUNNING

    @property
    def port(self) -> int:
        return self._config.server.port

    @property
    def url(self) -> str:
        return f"http://{self._config.server.host}:{self.port}/"

    def reload_config(self, config: Config) -> None:
        """Replace the configuration snapshot.

        Root directory, index file, debounce window and reloading strategy
        apply immediately; host and port apply on the next go_live().
        """
        self._config = config
        self._apply_config()

    def use_middleware(self, *middlewares: Middleware) -> None:
        self._middlewares.extend(middlewares)

    def use_service(self, *factories: ServiceFactory) -> None:
        """Instantiate services with this server and let them register."""
        for factory in factories:
            service = factory(self)
            service.register()

    def create_app(self) -> web.Application:
        """Create the aiohttp application serving files and the WebSocket."""
        app = web.Application(middlewares=[reject_foreign_upgrades])
        app.router.add_get(WS_PATH, self.broadcaster.handle_websocket)
        app.router.add_route("*", "/{path:.*}", self.router.handle)
        return app

    async def go_live(self) -> None:
        if self._state is not ServerState.STOPPED:
            self._fire_error(SERVER_IS_ALREADY_RUNNING, "Server is already running")
            return

        self._state = ServerState.STARTING
        try:
            await self._listen()
        except LiveServerError as e:
            self._state = ServerState.STOPPED
            self._fire_error(e.code, e.message)
            return
        except OSError as e:
            self._state = ServerState.STOPPED
            if e.errno == errno.EADDRINUSE:
                self._fire_error(PORT_ALREADY_IN_USE, f"{self.port} is already in use!")
            else:
                self._fire_error(type(e).__name__, str(e))
            return
        except Exception as e:
            self._state = ServerState.STOPPED
            logger.exception("Error while starting")
            self._fire_error(type(e).__name__, str(e))
            return

        self._change_subscription = self.change_source.subscribe(self._on_document_change)
        self._state = ServerState.RUNNING
        logger.info(f"Serving {self._config.root_dir} at {self.url}")
        self.on_did_go_live.fire(GoLiveEvent(self))

    async def shutdown(self) -> None:
        if self._state is not ServerState.RUNNING:
            self._fire_error(SERVER_IS_NOT_RUNNING, "Server is not running")
            return

        if self._change_subscription is not None:
            self._change_subscription.dispose()
            self._change_subscription = None
        self.debouncer.cancel_all()

        failure: Exception | None = None
        try:
            await self.broadcaster.close_all()
        except Exception as e:
            logger.exception("Error while closing client sockets")
            failure = e
        try:
            await self._close_listener()
        except Exception as e:
            logger.exception("Error while closing the listener")
            failure = failure or e

        self._state = ServerState.STOPPED
        if failure is not None:
            self._fire_error(type(failure).__name__, str(failure))
            return

        logger.info("Server stopped")
        self.on_did_go_offline.fire(GoOfflineEvent(self))

    async def _listen(self) -> None:
        if self._config.root_dir is None:
            raise LiveServerError("CWD is not defined", CWD_UNDEFINED)

        runner = web.AppRunner(self.create_app(), handle_signals=False)
        await runner.setup()
        site = web.TCPSite(runner, self._config.server.host, self.port)
        try:
            await site.start()
        except BaseException:
            await runner.cleanup()
            raise
        self._runner = runner

    async def _close_listener(self) -> None:
        if self._runner is not None:
            runner, self._runner = self._runner, None
            await runner.cleanup()

    def _on_document_change(self, change: DocumentChange) -> None:
        self.debouncer.on_change(change.file_path, change.text)

    def _apply_config(self) -> None:
        config = self._config
        self.router.root_dir = config.root_dir
        self.watchers.index_file = config.live_reload.index_file
        self.debouncer.root_dir = str(config.root_dir) if config.root_dir is not None else ""
        self.debouncer.window_ms = config.live_reload.debounce_ms
        self.debouncer.strategy = config.live_reload.reloading_strategy

    def _fire_error(self, code: str, message: str) -> None:
        logger.error(f"{code}: {message}")
        self.on_server_error.fire(ServerErrorEvent(self, code, message))
