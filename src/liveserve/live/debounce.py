"""Per-file coalescing of change events."""

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from liveserve.config import DEFAULT_DEBOUNCE_MS
from liveserve.live.messages import BroadcastMessage
from liveserve.paths import to_url_path
from liveserve.strategy import ReloadingStrategy, carries_dom, select_action

logger = logging.getLogger(__name__)


@dataclass
class PendingChange:
    file_path: str
    text: str | None
    timer: asyncio.TimerHandle


class ChangeDebouncer:
    """Turns bursts of change events into one broadcast per file.

    Each path has its own timer. A new event for a path cancels the pending
    timer and restarts the window with the newest document text, so only the
    latest state is broadcast. Events for different paths never merge.
    """

    def __init__(
        self,
        broadcast: Callable[[BroadcastMessage], Awaitable[object]],
        *,
        root_dir: str = "",
        window_ms: int = DEFAULT_DEBOUNCE_MS,
        strategy: ReloadingStrategy = "hot",
    ) -> None:
        self.root_dir = root_dir
        self.window_ms = window_ms
        self.strategy: ReloadingStrategy = strategy
        self._broadcast = broadcast
        self._pending: dict[str, PendingChange] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    def on_change(self, file_path: str, text: str | None) -> None:
        """Record a change event, (re)starting the quiet window for its path.

        Must be called from within the running event loop.
        """
        key = os.path.normpath(file_path)
        previous = self._pending.pop(key, None)
        if previous is not None:
            previous.timer.cancel()

        loop = asyncio.get_running_loop()
        timer = loop.call_later(self.window_ms / 1000, self._fire, key)
        self._pending[key] = PendingChange(file_path=file_path, text=text, timer=timer)

    def build_message(self, file_path: str, text: str | None) -> BroadcastMessage:
        action = select_action(file_path, self.strategy)
        return BroadcastMessage(
            action=action,
            file_name=to_url_path(file_path, self.root_dir),
            dom=text if carries_dom(action) else None,
        )

    def cancel_all(self) -> None:
        """Drop every pending change and in-flight broadcast."""
        for pending in self._pending.values():
            pending.timer.cancel()
        self._pending.clear()
        for task in list(self._tasks):
            task.cancel()

    def _fire(self, key: str) -> None:
        pending = self._pending.pop(key, None)
        if pending is None:
            return

        message = self.build_message(pending.file_path, pending.text)
        logger.info(f"{message.file_name} changed, sending {message.action}")

        task = asyncio.get_running_loop().create_task(self._send(message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send(self, message: BroadcastMessage) -> None:
        try:
            await self._broadcast(message)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Broadcast of {message.file_name} failed")
