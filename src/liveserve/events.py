"""Observer-style event surface exposed to the hosting application."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from liveserve.core import LiveServer

T = TypeVar("T")


class Subscription:
    """Handle returned by EventEmitter.subscribe()."""

    def __init__(self, dispose: Callable[[], None]) -> None:
        self._dispose: Callable[[], None] | None = dispose

    def dispose(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        if self._dispose is not None:
            self._dispose()
            self._dispose = None

    @property
    def disposed(self) -> bool:
        return self._dispose is None


class EventEmitter(Generic[T]):
    """Synchronous event emitter.

    Handlers run in subscription order on the emitting call stack.
    """

    def __init__(self) -> None:
        self._handlers: list[Callable[[T], object]] = []

    def subscribe(self, handler: Callable[[T], object]) -> Subscription:
        self._handlers.append(handler)
        return Subscription(lambda: self._remove(handler))

    def fire(self, event: T) -> None:
        for handler in list(self._handlers):
            handler(event)

    def __len__(self) -> int:
        return len(self._handlers)

    def _remove(self, handler: Callable[[T], object]) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)


@dataclass(frozen=True)
class GoLiveEvent:
    server: "LiveServer"


@dataclass(frozen=True)
class GoOfflineEvent:
    server: "LiveServer"


@dataclass(frozen=True)
class ServerErrorEvent:
    server: "LiveServer"
    code: str
    message: str
