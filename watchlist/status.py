"""Watch status transitions.

    upcoming --mark_watched--> watched
    pending  --mark_watched--> watched
    watched  --request_unwatch / confirm_unwatch--> pending

Marking watched stamps today's date and needs no confirmation. Going
back from watched loses the date, so by default it is two-phase: the
caller gets a PendingConfirmation and has to confirm it. Deployments
that prefer single-click unwatch turn confirmation off in BehaviorConfig.
There is no direct upcoming <-> pending transition.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from watchlist.confirmations import ConfirmationBook
from watchlist.dates import format_display_date
from watchlist.errors import ValidationError
from watchlist.models import PENDING, WATCHED, Entry, PendingConfirmation
from watchlist.repository import EntryRepository

logger = logging.getLogger(__name__)

UNWATCH = "unwatch"

Clock = Callable[[], datetime]


class StatusMachine:
    """Applies status transitions to entries in a repository."""

    def __init__(
        self,
        repository: EntryRepository,
        confirmations: ConfirmationBook,
        clock: Clock = datetime.now,
        require_unwatch_confirmation: bool = True,
    ) -> None:
        self._repository = repository
        self._confirmations = confirmations
        self._clock = clock
        self.require_unwatch_confirmation = require_unwatch_confirmation

    def today(self) -> str:
        """Today's date from the injected clock, as display text."""
        return format_display_date(self._clock().date())

    def mark_watched(self, index: int) -> Entry:
        """Move a pending or upcoming entry to watched, dated today.

        Raises:
            ValidationError: If the entry is already watched.
            EntryIndexError: If index is out of bounds.
        """
        entry = self._repository.get(index)
        if entry.status == WATCHED:
            raise ValidationError(f"'{entry.title}' is already watched")
        stored = self._repository.put(index, replace(entry, status=WATCHED, date=self.today()))
        logger.info("Marked '%s' watched on %s", stored.title, stored.date)
        return stored

    def request_unwatch(self, index: int) -> PendingConfirmation:
        """Ask for confirmation before moving a watched entry to pending.

        Raises:
            ValidationError: If the entry isn't watched.
            EntryIndexError: If index is out of bounds.
        """
        entry = self._repository.get(index)
        if entry.status != WATCHED:
            raise ValidationError(f"'{entry.title}' is not watched")
        return self._confirmations.request(
            UNWATCH,
            index,
            f'Are you sure you want to mark "{entry.title}" as unwatched?',
        )

    def confirm_unwatch(self, token: str) -> Entry:
        """Apply a confirmed unwatch: status pending, date cleared.

        Raises:
            EntryIndexError: If the token is unknown or stale.
        """
        _, index = self._confirmations.resolve(token, UNWATCH)
        return self._unwatch(index)

    def cancel_unwatch(self, token: str) -> bool:
        return self._confirmations.cancel(token)

    def toggle(self, index: int) -> Entry | PendingConfirmation:
        """Flip watch status the way the watch button does.

        Returns:
            The updated Entry, or a PendingConfirmation when unwatching
            needs to be confirmed first.
        """
        entry = self._repository.get(index)
        if entry.status != WATCHED:
            return self.mark_watched(index)
        if self.require_unwatch_confirmation:
            return self.request_unwatch(index)
        return self._unwatch(index)

    def _unwatch(self, index: int) -> Entry:
        entry = self._repository.get(index)
        stored = self._repository.put(index, replace(entry, status=PENDING, date=None))
        logger.info("Marked '%s' unwatched", stored.title)
        return stored
