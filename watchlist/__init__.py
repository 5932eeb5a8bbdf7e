"""Personal media watchlist: entries, seasons, status, queries and storage."""

from watchlist.errors import (
    EntryIndexError,
    FormatError,
    StorageError,
    ValidationError,
    WatchlistError,
)
from watchlist.models import Entry, PendingConfirmation, Season
from watchlist.service import WatchlistService, configure_logging, open_watchlist

__all__ = [
    "Entry",
    "EntryIndexError",
    "FormatError",
    "PendingConfirmation",
    "Season",
    "StorageError",
    "ValidationError",
    "WatchlistError",
    "WatchlistService",
    "configure_logging",
    "open_watchlist",
]
