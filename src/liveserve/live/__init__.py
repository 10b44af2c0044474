"""Live reload: WebSocket clients, watch lists, debounced change broadcasts."""

from liveserve.live.broadcast import WS_PATH, BroadcastManager
from liveserve.live.debounce import ChangeDebouncer
from liveserve.live.messages import BroadcastMessage
from liveserve.live.source import ChangeEventSource, DocumentChange, WatchfilesChangeSource
from liveserve.live.watchers import WatcherRegistry

__all__ = [
    "WS_PATH",
    "BroadcastManager",
    "BroadcastMessage",
    "ChangeDebouncer",
    "ChangeEventSource",
    "DocumentChange",
    "WatchfilesChangeSource",
    "WatcherRegistry",
]
