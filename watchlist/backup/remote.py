"""Best-effort remote backup of the watchlist.

A check runs at start-up and whenever the host calls it. It uploads a
snapshot only when all of these hold:

    1. A backup credential is configured
    2. The data changed since the last confirmed backup (dirty flag)
    3. At least interval_hours passed since that backup

The check only reads a snapshot and never touches the repository, so
it is safe to skip or delay. It never raises: network errors and
non-success responses are logged and the dirty flag stays set, so the
next scheduled check tries again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Sequence

import requests
from requests.exceptions import RequestException

from watchlist.config import BackupConfig
from watchlist.errors import StorageError
from watchlist.models import Entry
from watchlist.storage.persistence import WatchlistStore

logger = logging.getLogger(__name__)

SKIPPED_DISABLED = "disabled"
SKIPPED_CLEAN = "clean"
SKIPPED_TOO_SOON = "too_soon"
UPLOADED = "uploaded"
FAILED = "failed"


@dataclass(frozen=True)
class BackupOutcome:
    """What a backup check did.

    Attributes:
        status: One of "disabled", "clean", "too_soon", "uploaded", "failed".
        detail: Error text for failures, empty otherwise.
    """

    status: str
    detail: str = ""

    @property
    def uploaded(self) -> bool:
        return self.status == UPLOADED


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RemoteBackup:
    """Uploads {watchlistData, rankings, timestamp} to the backup endpoint."""

    def __init__(
        self,
        session: requests.Session,
        config: BackupConfig,
        store: WatchlistStore,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._session = session
        self._config = config
        self._store = store
        self._clock = clock

    def is_due(self, now: datetime) -> BackupOutcome | None:
        """Return a skip outcome, or None when a backup should run."""
        if not self._config.enabled:
            return BackupOutcome(SKIPPED_DISABLED)
        if not self._store.is_dirty():
            return BackupOutcome(SKIPPED_CLEAN)
        last = self._store.last_backup()
        if last is not None and now - last <= timedelta(hours=self._config.interval_hours):
            return BackupOutcome(SKIPPED_TOO_SOON)
        return None

    def check(self, entries: Sequence[Entry]) -> BackupOutcome:
        """Upload a snapshot if one is due. Never raises."""
        now = self._clock()
        try:
            skipped = self.is_due(now)
        except StorageError as exc:
            logger.warning("Auto backup check failed: %s", exc)
            return BackupOutcome(FAILED, str(exc))
        if skipped is not None:
            logger.debug("Auto backup skipped: %s", skipped.status)
            return skipped
        return self.perform(entries, now)

    def build_payload(self, entries: Sequence[Entry], now: datetime) -> dict[str, Any]:
        return {
            "watchlistData": [entry.to_document() for entry in entries],
            "rankings": self._store.load_rankings(),
            "timestamp": now.isoformat().replace("+00:00", "Z"),
        }

    def perform(self, entries: Sequence[Entry], now: datetime) -> BackupOutcome:
        """POST the snapshot; record success, log and swallow failures."""
        try:
            response = self._session.post(
                self._config.endpoint,
                json=self.build_payload(entries, now),
                timeout=self._config.request_timeout,
            )
        except RequestException as exc:
            logger.warning("Auto backup failed: %s", exc)
            return BackupOutcome(FAILED, str(exc))

        if not response.ok:
            logger.warning("Auto backup failed: HTTP %d", response.status_code)
            return BackupOutcome(FAILED, f"HTTP {response.status_code}")

        try:
            self._store.record_backup(now)
        except StorageError as exc:
            logger.warning("Auto backup uploaded but bookkeeping failed: %s", exc)
            return BackupOutcome(FAILED, str(exc))

        logger.info("Auto backup completed (%d entries)", len(entries))
        return BackupOutcome(UPLOADED)
