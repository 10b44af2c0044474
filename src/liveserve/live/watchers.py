"""Per-client registry of the pages each browser is showing."""

import posixpath
from collections.abc import Hashable, Sequence
from typing import Generic, TypeVar

from liveserve.config import DEFAULT_INDEX_FILE
from liveserve.paths import strip_leading_slash, url_join

ClientT = TypeVar("ClientT", bound=Hashable)


class WatcherRegistry(Generic[ClientT]):
    """Maps connected clients to the page paths they declared.

    A client has at most one registration; registering again replaces the
    previous watch list.
    """

    def __init__(self, index_file: str = DEFAULT_INDEX_FILE) -> None:
        self.index_file = index_file
        self._watch_lists: dict[ClientT, list[str]] = {}

    def register(self, client: ClientT, watch_list: str | Sequence[str]) -> None:
        if isinstance(watch_list, str):
            watch_list = [watch_list]
        self._watch_lists[client] = list(watch_list)

    def unregister(self, client: ClientT) -> None:
        self._watch_lists.pop(client, None)

    def watch_list(self, client: ClientT) -> list[str] | None:
        watch_list = self._watch_lists.get(client)
        return list(watch_list) if watch_list is not None else None

    def matches(self, client: ClientT, target: str) -> bool:
        """Check whether a client is watching the target file.

        Entries without an extension are directories and stand for their
        index file.

        Args:
            client: Registered client
            target: Root-relative URL path of the changed file

        Returns:
            True if any watch list entry refers to the target
        """
        target = strip_leading_slash(target)
        for entry in self._watch_lists.get(client, ()):
            if not posixpath.splitext(entry)[1]:
                entry = url_join(entry, self.index_file)
            if strip_leading_slash(entry) == target:
                return True
        return False

    def clients_for(self, target: str) -> list[ClientT]:
        return [client for client in self._watch_lists if self.matches(client, target)]

    def clear(self) -> None:
        self._watch_lists.clear()

    def __contains__(self, client: object) -> bool:
        return client in self._watch_lists

    def __len__(self) -> int:
        return len(self._watch_lists)
