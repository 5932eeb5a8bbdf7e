"""Pending two-phase actions (unwatch, delete, season edit).

A request records the target entry's stable id and the repository
generation. Resolving the token later re-finds the entry by id and
checks that no removal or bulk replace happened in between; otherwise
the token is stale and resolving it raises instead of acting on
whatever entry now sits at the old position.
"""

from __future__ import annotations

import logging
import uuid

from watchlist.errors import EntryIndexError
from watchlist.models import PendingConfirmation, Season
from watchlist.repository import EntryRepository

logger = logging.getLogger(__name__)


class ConfirmationBook:
    """Holds the outstanding confirmations for one repository."""

    def __init__(self, repository: EntryRepository) -> None:
        self._repository = repository
        self._pending: dict[str, PendingConfirmation] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def request(
        self,
        kind: str,
        index: int,
        message: str,
        season: Season | None = None,
    ) -> PendingConfirmation:
        """Open a confirmation targeting the entry currently at index.

        Any earlier request of the same kind is dropped; there is only
        ever one dialog of each kind open.
        """
        entry = self._repository.get(index)
        self.discard_kind(kind)
        pending = PendingConfirmation(
            token=uuid.uuid4().hex,
            kind=kind,
            entry_id=entry.id,
            generation=self._repository.generation,
            message=message,
            season=season,
        )
        self._pending[pending.token] = pending
        logger.info("Requested %s for '%s'", kind, entry.title)
        return pending

    def peek(self, token: str, kind: str) -> tuple[PendingConfirmation, int]:
        """Look up a token and its target's current index without consuming it.

        Stale tokens are dropped.

        Raises:
            EntryIndexError: If the token is unknown, of another kind, or
                stale because the watchlist changed structurally since
                the request.
        """
        pending = self._pending.get(token)
        if pending is None or pending.kind != kind:
            raise EntryIndexError(f"no pending {kind} for token {token}")

        if pending.generation != self._repository.generation:
            del self._pending[token]
            logger.warning("Dropped stale %s for entry %s", kind, pending.entry_id)
            raise EntryIndexError(
                f"pending {kind} is stale: the watchlist changed since it was requested"
            )
        return pending, self._repository.index_of(pending.entry_id)

    def resolve(self, token: str, kind: str) -> tuple[PendingConfirmation, int]:
        """Consume a token and return it with the target's current index."""
        pending, index = self.peek(token, kind)
        del self._pending[token]
        return pending, index

    def cancel(self, token: str) -> bool:
        """Discard a token without acting. Returns False if it wasn't pending."""
        return self._pending.pop(token, None) is not None

    def discard_kind(self, kind: str) -> None:
        for token in [t for t, p in self._pending.items() if p.kind == kind]:
            del self._pending[token]

    def clear(self) -> None:
        """Drop every pending confirmation (after delete or reset)."""
        if self._pending:
            logger.info("Cleared %d pending confirmations", len(self._pending))
        self._pending.clear()
