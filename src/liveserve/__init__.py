"""liveserve - static development server with targeted live reload."""

from liveserve.config import Config, LiveReloadConfig, ServerConfig
from liveserve.core import LiveServer, ServerState
from liveserve.errors import LiveServerError
from liveserve.events import GoLiveEvent, GoOfflineEvent, ServerErrorEvent, Subscription
from liveserve.live import BroadcastMessage, ChangeEventSource, DocumentChange
from liveserve.middleware import StaticFileResolver

__all__ = [
    "BroadcastMessage",
    "ChangeEventSource",
    "Config",
    "DocumentChange",
    "GoLiveEvent",
    "GoOfflineEvent",
    "LiveReloadConfig",
    "LiveServer",
    "LiveServerError",
    "ServerConfig",
    "ServerErrorEvent",
    "ServerState",
    "StaticFileResolver",
    "Subscription",
]
