"""Reload client injection for served HTML documents."""

from functools import cache
from importlib.resources import files
from pathlib import PurePosixPath

INJECTABLE_EXTENSIONS = frozenset({".html", ".htm", ".xhtml"})

CLIENT_SCRIPT = "reload-client.js"


def is_injectable_file(path: str) -> bool:
    """Check whether the reload client should be injected into a file."""
    suffix = PurePosixPath(path.replace("\\", "/")).suffix
    return suffix.lower() in INJECTABLE_EXTENSIONS


@cache
def get_injected_text() -> str:
    """Return the script element written ahead of injectable documents.

    Raises:
        FileNotFoundError: If the packaged client script is missing.
    """
    script = files("liveserve").joinpath("static").joinpath(CLIENT_SCRIPT)
    if not script.is_file():
        raise FileNotFoundError(f"Reload client not found: {CLIENT_SCRIPT}")
    return f"<script>\n{script.read_text(encoding='utf-8')}</script>\n"
