"""Static file routing with reload client injection.

Every request that is not the live reload WebSocket ends up here. Registered
middlewares decide which file a request refers to; the router streams that
file back, prefixed with the reload client for HTML documents.
"""

import asyncio
import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import IO, Any

from aiohttp import web

from liveserve.injection import get_injected_text, is_injectable_file

logger = logging.getLogger(__name__)

FILE_KEY = "file"
CONTENT_TYPE_KEY = "content_type"

CHUNK_SIZE = 64 * 1024

Middleware = Callable[[web.Request, web.StreamResponse], None]


class RequestRouter:
    """Resolves requests to files below the root directory and streams them.

    Middlewares may store an absolute path in request[FILE_KEY]; such paths
    are served as-is without confinement to the root directory.
    """

    def __init__(self, root_dir: Path | None, middlewares: Sequence[Middleware] = ()) -> None:
        self.root_dir = root_dir
        self.middlewares = middlewares

    async def handle(self, request: web.Request) -> web.StreamResponse:
        if self.root_dir is None:
            return web.Response(text="Root Path is missing")

        response = web.StreamResponse()
        for middleware in self.middlewares:
            middleware(request, response)

        file_path = self.resolve(request)
        content_type: str = request.get(CONTENT_TYPE_KEY) or ""
        binary = "image" in content_type

        try:
            handle = await asyncio.to_thread(_open, file_path, binary)
        except OSError as e:
            logger.error(f"Cannot serve {file_path}: {e}")
            status = 404 if isinstance(e, FileNotFoundError) else 500
            return await self._fail(request, response, status)

        with handle:
            if content_type:
                response.content_type = content_type.split(";")[0].strip()
                if not binary:
                    response.charset = "utf-8"
            await response.prepare(request)

            if is_injectable_file(str(file_path)):
                await response.write(get_injected_text().encode("utf-8"))

            try:
                await self._pipe(handle, response, binary)
            except OSError as e:
                # Headers are already sent, the body is cut short
                logger.error(f"Error while reading {file_path}: {e}")

        await response.write_eof()
        return response

    def resolve(self, request: web.Request) -> Path:
        """Return the file a request refers to."""
        file: str = request.get(FILE_KEY) or request.path.lstrip("/")
        if os.path.isabs(file):
            return Path(file)
        assert self.root_dir is not None
        return self.root_dir / file

    async def _pipe(self, handle: IO[Any], response: web.StreamResponse, binary: bool) -> None:
        while True:
            chunk = await asyncio.to_thread(handle.read, CHUNK_SIZE)
            if not chunk:
                return
            await response.write(chunk if binary else chunk.encode("utf-8"))

    async def _fail(
        self, request: web.Request, response: web.StreamResponse, status: int
    ) -> web.StreamResponse:
        response.set_status(status)
        response.content_length = 0
        await response.prepare(request)
        await response.write_eof()
        return response


def _open(path: Path, binary: bool) -> IO[Any]:
    if binary:
        return path.open("rb")
    return path.open("r", encoding="utf-8", errors="replace")
