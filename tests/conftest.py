"""Shared test fixtures."""

from pathlib import Path

import pytest
from liveserve.config import Config, LiveReloadConfig, ServerConfig
from liveserve.core import LiveServer
from liveserve.live.source import ChangeEventSource


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    """Create a served root directory with a couple of pages."""
    root = tmp_path / "site"
    (root / "app").mkdir(parents=True)
    (root / "index.html").write_text("<h1>Home</h1>")
    (root / "app" / "page.html").write_text("<h1>Page</h1>")
    (root / "app" / "style.css").write_text("body { color: red; }")
    return root


@pytest.fixture
def test_config(root_dir: Path) -> Config:
    """Create a test configuration with a short debounce window."""
    return Config(
        root_dir=root_dir,
        server=ServerConfig(),
        live_reload=LiveReloadConfig(debounce_ms=20),
    )


@pytest.fixture
def change_source() -> ChangeEventSource:
    return ChangeEventSource()


@pytest.fixture
def server(test_config: Config, change_source: ChangeEventSource) -> LiveServer:
    return LiveServer(test_config, change_source=change_source)
