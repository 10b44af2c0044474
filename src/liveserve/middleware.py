"""Default request middleware: map URL paths to files below the root."""

import mimetypes
from collections.abc import Callable
from pathlib import Path
from urllib.parse import unquote

from aiohttp import web

from liveserve.config import Config
from liveserve.paths import url_join
from liveserve.router import CONTENT_TYPE_KEY, FILE_KEY


class StaticFileResolver:
    """Resolve the requested file and its content type.

    Directory paths (empty, trailing slash, or an existing directory) resolve
    to the configured index file. The configuration is read on every call so
    reloaded settings apply to the next request.
    """

    def __init__(self, get_config: Callable[[], Config]) -> None:
        self._get_config = get_config

    def __call__(self, request: web.Request, response: web.StreamResponse) -> None:
        config = self._get_config()
        path = unquote(request.path).lstrip("/")

        if self._is_directory(path, config.root_dir):
            path = url_join(path, config.live_reload.index_file)

        content_type, _ = mimetypes.guess_type(path)
        request[FILE_KEY] = path
        request[CONTENT_TYPE_KEY] = content_type or "application/octet-stream"

    @staticmethod
    def _is_directory(path: str, root_dir: Path | None) -> bool:
        if not path or path.endswith("/"):
            return True
        return root_dir is not None and (root_dir / path).is_dir()
