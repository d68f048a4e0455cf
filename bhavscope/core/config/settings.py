"""Configuration management for bhavscope."""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from bhavscope.core.exceptions import ConfigurationError

DEFAULT_HOME = Path.home() / ".bhavscope"


@dataclass
class HistoryConfig:
    """Rolling history configuration."""

    window_days: int = 21
    max_concurrency: int = 8
    top_n: int = 20

    def __post_init__(self) -> None:
        if self.window_days < 1:
            raise ConfigurationError("window_days must be at least 1", setting="history.window_days")
        if self.max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1", setting="history.max_concurrency")
        if self.top_n < 0:
            raise ConfigurationError("top_n must be non-negative", setting="history.top_n")


@dataclass
class StoreConfig:
    """Snapshot store configuration."""

    snapshot_dir: str = str(DEFAULT_HOME / "snapshots")
    base_url: str | None = None
    cloud_name: str | None = None
    timeout: float = 30.0
    max_retries: int = 3
    backoff_factor: float = 1.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    file: str | None = None


@dataclass
class BhavscopeConfig:
    """bhavscope main configuration."""

    history: HistoryConfig = field(default_factory=HistoryConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "BhavscopeConfig":
        """Build a config from a nested dictionary."""
        try:
            return cls(
                history=HistoryConfig(**config_dict.get("history", {})),
                store=StoreConfig(**config_dict.get("store", {})),
                logging=LoggingConfig(**config_dict.get("logging", {})),
            )
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to a nested dictionary."""
        return {
            "history": asdict(self.history),
            "store": asdict(self.store),
            "logging": asdict(self.logging),
        }


class ConfigManager:
    """Loads configuration from a TOML file and the environment."""

    def __init__(self, config_path: Path | None = None, *, use_env: bool = True):
        """Initialise the manager.

        Args:
            config_path: Config file path, defaults to ``~/.bhavscope/config.toml``
            use_env: Apply ``BHAVSCOPE_*`` environment overrides on top of the file
        """
        self.config_path = config_path or DEFAULT_HOME / "config.toml"
        self.use_env = use_env
        self.config = self._load_config()

    def _load_config(self) -> BhavscopeConfig:
        config_dict: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning("Failed to load config from {}: {}", self.config_path, e)
                config_dict = {}

        if self.use_env:
            _deep_update(config_dict, load_config_from_env())

        return BhavscopeConfig.from_dict(config_dict)

    def get_config(self) -> BhavscopeConfig:
        """Return the current configuration."""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Apply nested updates to the current configuration."""
        config_dict = self.config.to_dict()
        _deep_update(config_dict, updates)
        self.config = BhavscopeConfig.from_dict(config_dict)


def _deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = _deep_update(d.get(k, {}), v)
        else:
            d[k] = v
    return d


def _env_int(name: str) -> int | None:
    raw_value = os.getenv(name)
    if raw_value is None:
        return None
    try:
        return int(raw_value)
    except ValueError as error:
        raise ConfigurationError(
            f"Invalid {name} value: expected integer, got '{raw_value}'.",
            setting=name,
        ) from error


def get_default_config() -> BhavscopeConfig:
    """Return the default configuration."""
    return BhavscopeConfig()


def load_config_from_env() -> dict[str, Any]:
    """Collect configuration overrides from ``BHAVSCOPE_*`` environment variables."""
    config: dict[str, Any] = {}

    history_config: dict[str, Any] = {}
    window_days = _env_int("BHAVSCOPE_WINDOW_DAYS")
    if window_days is not None:
        history_config["window_days"] = window_days
    max_concurrency = _env_int("BHAVSCOPE_MAX_CONCURRENCY")
    if max_concurrency is not None:
        history_config["max_concurrency"] = max_concurrency
    top_n = _env_int("BHAVSCOPE_TOP_N")
    if top_n is not None:
        history_config["top_n"] = top_n
    if history_config:
        config["history"] = history_config

    store_config: dict[str, Any] = {}
    if os.getenv("BHAVSCOPE_SNAPSHOT_DIR"):
        store_config["snapshot_dir"] = os.getenv("BHAVSCOPE_SNAPSHOT_DIR")
    if os.getenv("BHAVSCOPE_STORE_URL"):
        store_config["base_url"] = os.getenv("BHAVSCOPE_STORE_URL")
    if os.getenv("BHAVSCOPE_CLOUD_NAME"):
        store_config["cloud_name"] = os.getenv("BHAVSCOPE_CLOUD_NAME")
    if store_config:
        config["store"] = store_config

    log_level = os.getenv("BHAVSCOPE_LOG_LEVEL")
    if log_level is not None:
        config["logging"] = {"level": log_level}

    return config
