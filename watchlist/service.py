"""Watchlist service: the entry point a UI layer talks to.

This is the thin orchestration layer that ties everything together.
Every mutation:

    1. Validates input and applies it to the in-memory repository
       (raising ValidationError / EntryIndexError without side effects)
    2. Writes the whole watchlist through to the local store
    3. Leaves the dirty flag set for the next remote backup check

A failed local write is logged and the session carries on; memory is
the source of truth until the next successful save.

All logging is structured JSON once configure_logging() has been called.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime
from typing import Callable, Iterable

from watchlist.backup.http_client import create_session
from watchlist.backup.remote import SKIPPED_DISABLED, BackupOutcome, RemoteBackup
from watchlist.config import WatchlistConfig, load_config
from watchlist.confirmations import ConfirmationBook
from watchlist.dates import normalize_date, to_iso
from watchlist.errors import EntryIndexError, FormatError, StorageError, ValidationError
from watchlist.models import WATCHED, Entry, PendingConfirmation, WatchlistStats
from watchlist.query import ALL, TIE_BREAK_DATE, QueryResult, compute_stats, genre_options, query
from watchlist.repository import EntryRepository
from watchlist.seasons import add_season, check_season_index, edit_season
from watchlist.status import StatusMachine
from watchlist.storage.export import ImportedDocument, dump_export, parse_import
from watchlist.storage.local_store import LocalStore
from watchlist.storage.persistence import WatchlistStore

logger = logging.getLogger(__name__)

DELETE = "delete"
SEASON_EDIT = "season_edit"


class _JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Serialize the log record to a JSON string."""
        return json.dumps({
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def configure_logging(level: int = logging.INFO) -> None:
    """Install the JSON handler on the root logger (once)."""
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_JSONFormatter())
        root.addHandler(handler)


def parse_genres(genres: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split the comma-separated genre field; blanks are dropped.

    Examples:
        "Sci-Fi, Action" -> ("Action", "Sci-Fi")
        ["Drama", " "]   -> ("Drama",)
    """
    if genres is None:
        return ()
    if isinstance(genres, str):
        genres = genres.split(",")
    return tuple(sorted(g.strip() for g in genres if g and g.strip()))


@dataclass(frozen=True)
class SeasonEdit:
    """An open season edit, with values to prefill the form.

    Attributes:
        pending: Token to pass to commit_season_edit / cancel_season_edit.
        season: Current season number, None for unnumbered movies.
        iso_date: Current date as "YYYY-MM-DD".
    """

    pending: PendingConfirmation
    season: int | None
    iso_date: str


class WatchlistService:
    """Mutations and queries over one watchlist, with write-through saves."""

    def __init__(
        self,
        repository: EntryRepository,
        store: WatchlistStore,
        confirmations: ConfirmationBook,
        status: StatusMachine,
        backup: RemoteBackup | None = None,
        tie_break: str = TIE_BREAK_DATE,
    ) -> None:
        self._repository = repository
        self._store = store
        self._confirmations = confirmations
        self._status = status
        self._backup = backup
        self._tie_break = tie_break

    # -- persistence -------------------------------------------------

    def _persist(self) -> bool:
        return self._store.save(self._repository.list())

    # -- entries -----------------------------------------------------

    def build_entry(
        self,
        title: str,
        status: str,
        genres: str | Iterable[str] | None = None,
        date: date_type | str | None = None,
        year: str | None = None,
        note: str | None = None,
        is_movie: bool = False,
    ) -> Entry:
        """Turn add/edit form values into an Entry.

        Blank optional fields are dropped. A watched entry without a
        date is dated today; other statuses never keep a date.

        Raises:
            ValidationError: If the date can't be parsed.
        """
        try:
            display_date = normalize_date(date)
        except ValueError as exc:
            raise ValidationError(str(exc)) from None
        if status == WATCHED and not display_date:
            display_date = self._status.today()

        return Entry(
            title=(title or "").strip(),
            status=status,
            genres=parse_genres(genres),
            is_movie=bool(is_movie),
            date=display_date if status == WATCHED else None,
            year=(year or "").strip() or None,
            note=(note or "").strip() or None,
        )

    def add_entry(self, title: str, status: str, genres=None, date=None,
                  year=None, note=None, is_movie: bool = False) -> Entry:
        stored = self._repository.add(
            self.build_entry(title, status, genres, date, year, note, is_movie)
        )
        self._persist()
        return stored

    def edit_entry(self, index: int, title: str, status: str, genres=None,
                   date=None, year=None, note=None, is_movie: bool = False) -> Entry:
        """Replace an entry's form fields; seasons, rating and horror are kept.

        A watched entry edited without a date keeps its watched date.
        """
        previous = self._repository.get(index)
        blank = date is None or (isinstance(date, str) and not date.strip())
        if blank and previous.is_watched:
            date = previous.date
        stored = self._repository.update(
            index, self.build_entry(title, status, genres, date, year, note, is_movie)
        )
        self._persist()
        return stored

    def form_date(self, index: int) -> str:
        """Watched date of an entry as "YYYY-MM-DD" for the edit form."""
        entry = self._repository.get(index)
        return to_iso(entry.date) if entry.is_watched else ""

    def request_delete(self, index: int) -> PendingConfirmation:
        entry = self._repository.get(index)
        return self._confirmations.request(
            DELETE, index, f'Are you sure you want to delete "{entry.title}"?'
        )

    def confirm_delete(self, token: str) -> Entry:
        """Delete the confirmed entry and drop every other pending action.

        Raises:
            EntryIndexError: If the token is unknown or stale.
        """
        _, index = self._confirmations.resolve(token, DELETE)
        removed = self._repository.remove(index)
        self._confirmations.clear()
        self._persist()
        return removed

    def cancel_delete(self, token: str) -> bool:
        return self._confirmations.cancel(token)

    def reset(self) -> None:
        """Empty the watchlist. The caller is expected to have confirmed."""
        self._repository.replace_all(())
        self._confirmations.clear()
        self._persist()

    # -- status ------------------------------------------------------

    def toggle_watch(self, index: int) -> Entry | PendingConfirmation:
        result = self._status.toggle(index)
        if isinstance(result, Entry):
            self._persist()
        return result

    def confirm_unwatch(self, token: str) -> Entry:
        stored = self._status.confirm_unwatch(token)
        self._persist()
        return stored

    def cancel_unwatch(self, token: str) -> bool:
        return self._status.cancel_unwatch(token)

    # -- seasons -----------------------------------------------------

    def add_season(self, index: int, season_number=None, date=None) -> Entry:
        entry = self._repository.get(index)
        stored = self._repository.put(index, add_season(entry, season_number, date))
        self._persist()
        return stored

    def begin_season_edit(self, index: int, season_index: int) -> SeasonEdit:
        """Open an edit of one season record and return its current values.

        Raises:
            EntryIndexError: If either index is out of range.
        """
        entry = self._repository.get(index)
        check_season_index(entry, season_index)
        season = entry.seasons[season_index]
        label = "movie" if entry.is_movie else "season"
        pending = self._confirmations.request(
            SEASON_EDIT, index, f"Edit {label} for: {entry.title}", season=season
        )
        return SeasonEdit(pending=pending, season=season.season, iso_date=to_iso(season.date))

    def commit_season_edit(self, token: str, season_number=None, date=None) -> Entry:
        """Apply a season edit.

        A ValidationError leaves the token open so the form can be fixed
        and resubmitted.

        The record is located by value, so seasons added while the edit
        was open don't shift it.

        Raises:
            EntryIndexError: If the token is unknown or stale, or the
                record being edited is gone.
            ValidationError: If the number or date is invalid.
        """
        pending, index = self._confirmations.peek(token, SEASON_EDIT)
        entry = self._repository.get(index)
        if pending.season not in entry.seasons:
            self._confirmations.cancel(token)
            raise EntryIndexError(f"the season being edited on '{entry.title}' no longer exists")
        season_index = entry.seasons.index(pending.season)
        updated = edit_season(entry, season_index, season_number, date)
        stored = self._repository.put(index, updated)
        self._confirmations.cancel(token)
        self._persist()
        return stored

    def cancel_season_edit(self, token: str) -> bool:
        return self._confirmations.cancel(token)

    # -- import / export ---------------------------------------------

    def import_document(self, text: str | bytes) -> ImportedDocument:
        """Replace the watchlist (and rankings, if present) from a file.

        Raises:
            FormatError: If the document is malformed or holds an invalid
                entry. Nothing is changed in that case.
        """
        document = parse_import(text)
        try:
            self._repository.replace_all(document.entries)
        except ValidationError as exc:
            raise FormatError(f"Invalid entry in import: {exc}") from exc

        self._confirmations.clear()
        if document.rankings is not None:
            self._store.save_rankings(document.rankings)
        self._persist()
        logger.info("Imported %d entries", len(document.entries))
        return document

    def export_document(self) -> str:
        return dump_export(self._repository.list(), self._store.load_rankings())

    # -- queries -----------------------------------------------------

    def entries(self) -> tuple[Entry, ...]:
        return self._repository.list()

    def query(
        self,
        search_term: str = "",
        status_filter: str = ALL,
        genre_filter: str = ALL,
        section_filter: str = ALL,
    ) -> QueryResult:
        return query(
            self._repository.list(),
            search_term=search_term,
            status_filter=status_filter,
            genre_filter=genre_filter,
            section_filter=section_filter,
            tie_break=self._tie_break,
        )

    def genre_options(self) -> tuple[str, ...]:
        return genre_options(self._repository.list())

    def stats(self) -> WatchlistStats:
        return compute_stats(self._repository.list())

    # -- backup ------------------------------------------------------

    def check_backup(self) -> BackupOutcome:
        """Run the periodic backup check against a snapshot. Never raises."""
        if self._backup is None:
            return BackupOutcome(SKIPPED_DISABLED)
        return self._backup.check(self._repository.list())


def open_watchlist(
    config: WatchlistConfig | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> WatchlistService:
    """Load the persisted watchlist and wire up a service.

    Runs one backup check at start-up.

    Raises:
        ValueError: If configuration from the environment is invalid.
        StorageError: If the stored watchlist can't be read.
    """
    if config is None:
        config = load_config()

    store = WatchlistStore(LocalStore(config.storage.path))
    try:
        repository = EntryRepository(store.load())
    except ValidationError as exc:
        raise StorageError(f"Stored watchlist holds an invalid entry: {exc}") from exc
    confirmations = ConfirmationBook(repository)
    status = StatusMachine(
        repository,
        confirmations,
        clock=clock,
        require_unwatch_confirmation=config.behavior.require_unwatch_confirmation,
    )

    backup = None
    if config.backup.enabled:
        backup = RemoteBackup(create_session(config.backup), config.backup, store)

    service = WatchlistService(
        repository,
        store,
        confirmations,
        status,
        backup=backup,
        tie_break=config.behavior.watched_tie_break,
    )
    logger.info("Opened watchlist at %s (%d entries)", config.storage.path, len(repository))
    service.check_backup()
    return service
