from watchlist.storage.export import ImportedDocument, build_export, dump_export, parse_import
from watchlist.storage.local_store import LocalStore
from watchlist.storage.persistence import WatchlistStore

__all__ = [
    "ImportedDocument",
    "LocalStore",
    "WatchlistStore",
    "build_export",
    "dump_export",
    "parse_import",
]
