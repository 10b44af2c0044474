"""Configuration management for liveserve.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from liveserve.strategy import RELOADING_STRATEGIES, ReloadingStrategy

CONFIG_FILENAME = "liveserve.toml"

DEFAULT_PORT = 5555
DEFAULT_INDEX_FILE = "index.html"
DEFAULT_DEBOUNCE_MS = 400


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT


@dataclass(frozen=True)
class LiveReloadConfig:
    """Live reload configuration."""

    index_file: str = DEFAULT_INDEX_FILE
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    reloading_strategy: ReloadingStrategy = "hot"


@dataclass(frozen=True)
class Config:
    """Application configuration.

    A Config is an immutable snapshot; the live server swaps whole snapshots
    instead of mutating fields.
    """

    root_dir: Path | None = None
    server: ServerConfig = field(default_factory=ServerConfig)
    live_reload: LiveReloadConfig = field(default_factory=LiveReloadConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for liveserve.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        root_dir = data.get("root_dir")
        if root_dir is not None and not isinstance(root_dir, str):
            raise ValueError("root_dir must be a string")

        return cls(
            root_dir=config_dir / root_dir if root_dir is not None else None,
            server=cls._parse_server(data.get("server")),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", DEFAULT_PORT)
        if not isinstance(port, int) or isinstance(port, bool) or port <= 0:
            raise ValueError("server.port must be a positive integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
        """Parse live_reload configuration section.

        Args:
            data: Raw live_reload section data

        Returns:
            LiveReloadConfig instance
        """
        if data is None:
            return LiveReloadConfig()

        if not isinstance(data, dict):
            raise ValueError("live_reload section must be a dictionary")

        index_file = data.get("index_file", DEFAULT_INDEX_FILE)
        if not isinstance(index_file, str) or not index_file:
            raise ValueError("live_reload.index_file must be a non-empty string")

        debounce_ms = data.get("debounce_ms", DEFAULT_DEBOUNCE_MS)
        if (
            not isinstance(debounce_ms, int)
            or isinstance(debounce_ms, bool)
            or debounce_ms < 0
        ):
            raise ValueError("live_reload.debounce_ms must be a non-negative integer")

        strategy = data.get("reloading_strategy", "hot")
        if strategy not in RELOADING_STRATEGIES:
            choices = ", ".join(RELOADING_STRATEGIES)
            raise ValueError(f"live_reload.reloading_strategy must be one of: {choices}")

        return LiveReloadConfig(
            index_file=index_file,
            debounce_ms=debounce_ms,
            reloading_strategy=strategy,
        )

    def with_overrides(
        self,
        *,
        root_dir: Path | None = None,
        host: str | None = None,
        port: int | None = None,
        index_file: str | None = None,
        debounce_ms: int | None = None,
        reloading_strategy: ReloadingStrategy | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None:
            server = replace(server, host=host)
        if port is not None:
            server = replace(server, port=port)

        live_reload = self.live_reload
        if index_file is not None:
            live_reload = replace(live_reload, index_file=index_file)
        if debounce_ms is not None:
            live_reload = replace(live_reload, debounce_ms=debounce_ms)
        if reloading_strategy is not None:
            live_reload = replace(live_reload, reloading_strategy=reloading_strategy)

        return replace(
            self,
            root_dir=root_dir if root_dir is not None else self.root_dir,
            server=server,
            live_reload=live_reload,
        )
