"""Reload action selection for changed files."""

from pathlib import PurePosixPath
from typing import Literal

from liveserve.injection import is_injectable_file

ReloadingStrategy = Literal["hot", "partial-reload", "reload"]
BroadcastAction = Literal["hot", "partial-reload", "reload", "refreshcss", "connected"]

RELOADING_STRATEGIES: tuple[ReloadingStrategy, ...] = ("hot", "partial-reload", "reload")

_DOM_ACTIONS = frozenset({"hot", "partial-reload"})


def select_action(file_path: str, strategy: ReloadingStrategy) -> BroadcastAction:
    """Pick the broadcast action for a changed file.

    Stylesheets are always refreshed in place, HTML documents follow the
    configured strategy and every other asset forces a full reload.

    Args:
        file_path: Path of the changed file
        strategy: Configured reloading strategy

    Returns:
        Action sent to the browser clients
    """
    if PurePosixPath(file_path.replace("\\", "/")).suffix.lower() == ".css":
        return "refreshcss"
    if is_injectable_file(file_path):
        return strategy
    return "reload"


def carries_dom(action: BroadcastAction) -> bool:
    """Whether clients need the document text to apply the action."""
    return action in _DOM_ACTIONS
