"""Change-event sources feeding the live server.

The server never watches the file system itself; it subscribes to a source
that hands it (file path, document text) pairs. Editor integrations push
into a ChangeEventSource directly, the command line uses the watchfiles
backed source.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from watchfiles import Change, awatch

from liveserve.events import EventEmitter, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentChange:
    """A changed file and its current text (None when not text)."""

    file_path: str
    text: str | None = None


class ChangeEventSource:
    """In-process change source. Hosts call emit() for every edit."""

    def __init__(self) -> None:
        self._emitter: EventEmitter[DocumentChange] = EventEmitter()

    def subscribe(self, handler: Callable[[DocumentChange], object]) -> Subscription:
        return self._emitter.subscribe(handler)

    def emit(self, change: DocumentChange) -> None:
        self._emitter.fire(change)

    @property
    def subscriber_count(self) -> int:
        return len(self._emitter)


class WatchfilesChangeSource(ChangeEventSource):
    """Change source fed by watchfiles for a directory tree."""

    def __init__(self, root_dir: Path) -> None:
        super().__init__()
        self._root_dir = root_dir
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

    async def _watch_files(self) -> None:
        async for changes in awatch(self._root_dir):
            for change_type, path_str in changes:
                if change_type == Change.deleted:
                    continue
                self.emit(DocumentChange(path_str, read_document(Path(path_str))))


def read_document(path: Path) -> str | None:
    """Read a changed file as UTF-8 text.

    Returns:
        File contents, or None for binary or unreadable files
    """
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return None
    except OSError as e:
        logger.debug(f"Could not read {path}: {e}")
        return None
