"""Configuration for the watchlist.

Centralizes all configuration: where the local store lives, the remote
backup endpoint and credential, and the per-deployment behavior
switches. All config is loaded from environment variables at runtime
(no hardcoded secrets).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from watchlist.query import TIE_BREAK_DATE, TIE_BREAKS

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class StorageConfig:
    data_dir: Path = Path("data")
    filename: str = "watchlist.json"

    @property
    def path(self) -> Path:
        return self.data_dir / self.filename


@dataclass(frozen=True)
class BackupConfig:
    endpoint: str = "https://api.jsonbin.io/v3/b"
    api_key: str = ""
    interval_hours: int = 24
    request_timeout: int = 30
    retry_count: int = 0
    user_agent: str = "WatchlistBackup/1.0"

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class BehaviorConfig:
    require_unwatch_confirmation: bool = True
    watched_tie_break: str = TIE_BREAK_DATE


@dataclass(frozen=True)
class WatchlistConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: '{raw}'")


def load_config() -> WatchlistConfig:
    """Load and validate configuration from environment variables.

    Reads:
        WATCHLIST_DATA_DIR: directory of the local store (default "data").
        JSONBIN_API_KEY: remote backup key; empty disables the backup.
        WATCHLIST_BACKUP_URL: overrides the backup endpoint (http/https).
        WATCHLIST_UNWATCH_CONFIRM: whether unwatching is two-phase.
        WATCHLIST_TIE_BREAK: "date" or "year" ordering of watched entries.

    Returns:
        WatchlistConfig with validated settings.

    Raises:
        ValueError: If a value is malformed.
    """
    data_dir = os.environ.get("WATCHLIST_DATA_DIR", "").strip() or "data"

    endpoint = os.environ.get("WATCHLIST_BACKUP_URL", "").strip() or BackupConfig.endpoint
    parsed = urlparse(endpoint)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(
            f"Invalid backup URL: '{endpoint}'. Expected an http or https URL."
        )

    tie_break = os.environ.get("WATCHLIST_TIE_BREAK", "").strip().lower() or TIE_BREAK_DATE
    if tie_break not in TIE_BREAKS:
        raise ValueError(
            f"Invalid WATCHLIST_TIE_BREAK: '{tie_break}'. "
            f"Expected one of {', '.join(TIE_BREAKS)}."
        )

    return WatchlistConfig(
        storage=StorageConfig(data_dir=Path(data_dir)),
        backup=BackupConfig(
            endpoint=endpoint,
            api_key=os.environ.get("JSONBIN_API_KEY", "").strip(),
        ),
        behavior=BehaviorConfig(
            require_unwatch_confirmation=_parse_bool("WATCHLIST_UNWATCH_CONFIRM", True),
            watched_tie_break=tie_break,
        ),
    )
