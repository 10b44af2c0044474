"""URL-style path helpers."""

import re

_LEADING_SLASHES = re.compile(r"^/+")
_TRAILING_SLASHES = re.compile(r"/+$")


def url_join(*parts: str) -> str:
    """Join URL path segments with single slashes.

    The first segment keeps its leading slash (so absolute URL paths stay
    absolute), later segments are trimmed on both sides. Empty segments are
    dropped.

    Args:
        parts: Path segments to join

    Returns:
        Joined path
    """
    trimmed = []
    for index, part in enumerate(parts):
        part = _TRAILING_SLASHES.sub("", part)
        if index > 0:
            part = _LEADING_SLASHES.sub("", part)
        if part:
            trimmed.append(part)
    return "/".join(trimmed)


def to_url_path(file_path: str, root_dir: str) -> str:
    """Convert a changed file's path to a root-relative URL path.

    Args:
        file_path: Absolute or workspace-relative path of the changed file
        root_dir: Served root directory

    Returns:
        URL path such as "/app/page.html"
    """
    path = file_path.replace("\\", "/")
    root = root_dir.replace("\\", "/").rstrip("/")
    if root and path.startswith(root + "/"):
        path = path[len(root) :]
    return url_join(path)


def strip_leading_slash(path: str) -> str:
    return path[1:] if path.startswith("/") else path
