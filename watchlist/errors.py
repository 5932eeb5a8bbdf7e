"""Exception taxonomy for the watchlist core.

Validation and index errors are raised before any state is touched, so
a caller that catches them can assume the repository is unchanged.
"""

from __future__ import annotations


class WatchlistError(Exception):
    """Base class for all watchlist errors."""


class ValidationError(WatchlistError):
    """A required field is empty, missing, or has an unsupported value.

    Attributes:
        errors: Individual problems found, one message each.
    """

    def __init__(self, message: str, errors: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.errors = errors or (message,)


class EntryIndexError(WatchlistError, IndexError):
    """A positional reference or pending token no longer points anywhere."""


class FormatError(WatchlistError):
    """An import document or stored payload is malformed."""


class StorageError(WatchlistError):
    """The local store could not be read or written."""
