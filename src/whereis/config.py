"""Persisted settings and the explicit settings object handed to the lookup code."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .cli_errors import ConfigError, FileError
from .constants import (
    CONFIG_FILE_NAME,
    CONFIG_KEYS,
    DEFAULT_LOG_LEVEL,
    FASTAH_ENDPOINT_BASE,
    HANDSHAKE_TIMEOUT,
    KEY_API_KEY,
    KEY_ENDPOINT,
    KEY_LOG_LEVEL,
    KEY_MMDB_PATH,
    MMDB_FILE_NAME,
)

logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    return Path.home() / CONFIG_FILE_NAME


def env_names(key: str) -> tuple[str, str]:
    """Environment variable names that override ``key``.

    ``fastah-api-key`` is looked up as ``FASTAH_API_KEY`` first, then as the
    literal upper-cased ``FASTAH-API-KEY``.
    """
    upper = key.upper()
    return (upper.replace("-", "_"), upper)


class ConfigStore:
    """YAML key/value file with an environment overlay on recognized keys."""

    def __init__(
        self,
        path: Optional[str | Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.path = Path(path) if path else default_config_path()
        self.environ = os.environ if environ is None else environ
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.debug("Config file %s not found; starting empty", self.path)
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.path}: {e}") from e
        except OSError as e:
            raise FileError(f"Cannot read {self.path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a key/value mapping in {self.path}")
        logger.debug("Using config file %s", self.path)
        return data

    def get(self, key: str, default: Any = None) -> Any:
        if key in CONFIG_KEYS:
            for name in env_names(key):
                value = self.environ.get(name)
                if value:
                    return value
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self._data, f, default_flow_style=False, sort_keys=True)
        except OSError as e:
            raise FileError(f"Cannot write {self.path}: {e}") from e
        logger.info("Saved configuration to %s", self.path)


@dataclass(frozen=True)
class AppSettings:
    """Settings resolved once at startup and passed to the client and batch loop."""

    fastah_api_key: str = ""
    fastah_endpoint: str = FASTAH_ENDPOINT_BASE
    mmdb_path: Path = Path.home() / MMDB_FILE_NAME
    handshake_timeout: float = HANDSHAKE_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_store(cls, store: ConfigStore) -> "AppSettings":
        endpoint = str(store.get(KEY_ENDPOINT) or FASTAH_ENDPOINT_BASE)
        if not endpoint.endswith("/"):
            endpoint += "/"
        mmdb_path = store.get(KEY_MMDB_PATH)
        return cls(
            fastah_api_key=str(store.get(KEY_API_KEY) or ""),
            fastah_endpoint=endpoint,
            mmdb_path=Path(mmdb_path).expanduser() if mmdb_path else Path.home() / MMDB_FILE_NAME,
            log_level=str(store.get(KEY_LOG_LEVEL) or os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        )

    def require_api_key(self) -> str:
        if not self.fastah_api_key:
            raise ConfigError(
                "No Fastah API key configured; run `whereis init --fastah-api-key <KEY>` "
                "or set FASTAH_API_KEY"
            )
        return self.fastah_api_key


def save_api_key(store: ConfigStore, key: str) -> None:
    """Write or overwrite the API key in the config file."""
    store.set(KEY_API_KEY, key)
    store.save()
