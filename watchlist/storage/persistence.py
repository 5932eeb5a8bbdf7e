"""Watchlist persistence on top of the local key/value store.

Keys match the browser version of the app, so a document exported from
one can be dropped into the other:

    watchlistData       list of entry documents
    watchlistRankings   opaque rankings list, passed through untouched
    dataChanged         dirty flag for the remote backup
    lastAutoBackup      epoch milliseconds of the last confirmed backup

save() never raises: a failed write is logged and reported as False,
and the in-memory watchlist stays the source of truth for the session.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from watchlist.errors import FormatError, StorageError
from watchlist.models import Entry
from watchlist.storage.local_store import LocalStore

logger = logging.getLogger(__name__)

WATCHLIST_KEY = "watchlistData"
RANKINGS_KEY = "watchlistRankings"
DIRTY_KEY = "dataChanged"
LAST_BACKUP_KEY = "lastAutoBackup"


class WatchlistStore:
    """Loads and saves entries, rankings and backup bookkeeping."""

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    def load(self) -> tuple[Entry, ...]:
        """Read the stored entries.

        Returns:
            The stored entries, or an empty tuple if nothing is stored.

        Raises:
            StorageError: If the file is unreadable or the stored entries
                are malformed. Callers should not overwrite the file
                in that case.
        """
        raw = self._store.get(WATCHLIST_KEY)
        if raw is None:
            return ()
        if not isinstance(raw, list):
            raise StorageError(f"stored {WATCHLIST_KEY} is not a list")
        try:
            entries = tuple(Entry.from_document(doc) for doc in raw)
        except FormatError as exc:
            raise StorageError(f"stored {WATCHLIST_KEY} is malformed: {exc}") from exc
        logger.info("Loaded %d entries", len(entries))
        return entries

    def save(self, entries: Sequence[Entry]) -> bool:
        """Write all entries and mark the data changed for backup.

        Both keys are written in a single flush.

        Returns:
            True on success, False if the write failed.
        """
        try:
            self._store.update({
                WATCHLIST_KEY: [entry.to_document() for entry in entries],
                DIRTY_KEY: True,
            })
        except StorageError as exc:
            logger.error("Saving watchlist failed: %s", exc)
            return False
        logger.info("Saved %d entries", len(entries))
        return True

    def load_rankings(self) -> list[Any]:
        rankings = self._store.get(RANKINGS_KEY, [])
        return rankings if isinstance(rankings, list) else []

    def save_rankings(self, rankings: Sequence[Any]) -> bool:
        try:
            self._store.set(RANKINGS_KEY, list(rankings))
        except StorageError as exc:
            logger.error("Saving rankings failed: %s", exc)
            return False
        return True

    def is_dirty(self) -> bool:
        return bool(self._store.get(DIRTY_KEY, False))

    def last_backup(self) -> datetime | None:
        raw = self._store.get(LAST_BACKUP_KEY)
        try:
            millis = int(raw)
        except (TypeError, ValueError):
            return None
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)

    def record_backup(self, when: datetime) -> None:
        """Store the backup time and clear the dirty flag.

        Raises:
            StorageError: If the bookkeeping couldn't be written.
        """
        self._store.update(
            {LAST_BACKUP_KEY: int(when.timestamp() * 1000)}, drop=(DIRTY_KEY,)
        )
