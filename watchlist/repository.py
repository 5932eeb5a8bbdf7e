"""In-memory repository of watchlist entries.

Owns the canonical ordered list of entries. Every entry gets a stable
id on insert, and the repository keeps a structural generation counter
that is bumped on removal and bulk replace. Pending two-phase actions
record both, so a token taken out before a delete can never land on
the entry that shifted into the deleted position.

Entries are frozen, so list() and get() can hand out the stored objects
directly without letting callers alter repository state.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Iterable

from watchlist.errors import EntryIndexError, ValidationError
from watchlist.models import Entry
from watchlist.validation.validators import ValidationResult, validate_all, validate_entry

logger = logging.getLogger(__name__)

_UNSET = object()


def _new_id() -> str:
    return uuid.uuid4().hex


def _report(results: tuple[ValidationResult, ...]) -> None:
    """Raise ValidationError if any result has errors, log any warnings."""
    errors = tuple(error for result in results for error in result.errors)
    if errors:
        raise ValidationError("; ".join(errors), errors)
    for result in results:
        for warning in result.warnings:
            logger.warning("%s", warning)


def _checked(entry: Entry, legacy: bool = False) -> Entry:
    _report((validate_entry(entry, legacy=legacy),))
    return entry


def _is_legacy(entry: Entry) -> bool:
    """Watched without a date, as older versions sometimes saved."""
    return entry.is_watched and not entry.date


class EntryRepository:
    """Ordered, validated collection of Entry objects."""

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        self._entries: list[Entry] = []
        self._generation = 0
        if entries:
            self.replace_all(entries)

    @property
    def generation(self) -> int:
        """Counter bumped on every removal or bulk replace."""
        return self._generation

    def __len__(self) -> int:
        return len(self._entries)

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise EntryIndexError(f"entry index must be an integer, got {index!r}")
        if not 0 <= index < len(self._entries):
            raise EntryIndexError(
                f"entry index {index} out of range (0-{len(self._entries) - 1})"
                if self._entries
                else f"entry index {index} out of range (watchlist is empty)"
            )

    def add(self, entry: Entry) -> Entry:
        """Validate and append an entry, assigning it a fresh id.

        Returns:
            The stored entry (with id and section set).

        Raises:
            ValidationError: If the title is empty, the status unknown,
                or a watched entry has no date.
        """
        stored = _checked(replace(entry, id=_new_id()))
        self._entries.append(stored)
        logger.info("Added '%s' at index %d", stored.title, len(self._entries) - 1)
        return stored

    def update(
        self,
        index: int,
        entry: Entry,
        *,
        seasons: tuple | object = _UNSET,
        rating: object = _UNSET,
        horror: object = _UNSET,
    ) -> Entry:
        """Replace the entry at index, keeping seasons, rating and horror.

        Edit forms don't carry seasons, rating or the horror tag, so the
        prior values are kept unless passed here as keyword arguments.
        The entry's id is always kept.

        Raises:
            EntryIndexError: If index is out of bounds.
            ValidationError: If the new value is invalid.
        """
        self._check_index(index)
        previous = self._entries[index]
        stored = replace(
            entry,
            id=previous.id,
            seasons=previous.seasons if seasons is _UNSET else seasons,
            rating=previous.rating if rating is _UNSET else rating,
            horror=previous.horror if horror is _UNSET else horror,
        )
        self._entries[index] = _checked(stored)
        logger.info("Updated '%s' at index %d", stored.title, index)
        return stored

    def put(self, index: int, entry: Entry) -> Entry:
        """Store a whole new value at index (seasons and rating included).

        Used by the status machine and season ledger, which derive the
        new value from the current one. A legacy watched entry without a
        date may keep that state; nothing may newly enter it.
        """
        self._check_index(index)
        previous = self._entries[index]
        stored = _checked(replace(entry, id=previous.id), legacy=_is_legacy(previous))
        self._entries[index] = stored
        return stored

    def remove(self, index: int) -> Entry:
        """Delete the entry at index.

        Raises:
            EntryIndexError: If index is out of bounds.
        """
        self._check_index(index)
        removed = self._entries.pop(index)
        self._generation += 1
        logger.info("Removed '%s' from index %d", removed.title, index)
        return removed

    def replace_all(self, entries: Iterable[Entry]) -> None:
        """Overwrite the whole collection (import and reset).

        Every entry is validated before anything is replaced, so a bad
        entry leaves the current contents untouched. Entries come from
        storage or an import file, so a watched entry without a date is
        accepted with a warning.
        """
        fresh = [replace(entry, id=_new_id()) for entry in entries]
        _report(validate_all(fresh, legacy=True))
        self._entries = fresh
        self._generation += 1
        logger.info("Replaced watchlist with %d entries", len(fresh))

    def get(self, index: int) -> Entry:
        self._check_index(index)
        return self._entries[index]

    def list(self) -> tuple[Entry, ...]:
        """Snapshot of all entries in repository order."""
        return tuple(self._entries)

    def index_of(self, entry_id: str) -> int:
        """Current position of the entry with this id.

        Raises:
            EntryIndexError: If no entry has this id (it was removed).
        """
        for position, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return position
        raise EntryIndexError(f"entry {entry_id} no longer exists")

    def find(self, entry_id: str) -> Entry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None
