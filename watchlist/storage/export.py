"""Export and import documents.

Export writes {"entries": [...], "rankings": [...]}. Import accepts that
shape, the older {"watchlistData": [...], "rankings": [...]} shape, and
a bare list of entries (which carries no rankings).

Parsing is all-or-nothing: every entry is decoded before anything is
returned, so a malformed document never leads to a partial import.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

from watchlist.errors import FormatError
from watchlist.models import Entry

ENTRIES_KEYS = ("entries", "watchlistData")


@dataclass(frozen=True)
class ImportedDocument:
    """A decoded import file.

    Attributes:
        entries: Decoded entries in file order.
        rankings: Rankings to store, or None when the file had none
            (bare list), meaning the current rankings stay as they are.
    """

    entries: tuple[Entry, ...]
    rankings: tuple[Any, ...] | None = None


def build_export(entries: Sequence[Entry], rankings: Sequence[Any]) -> dict:
    return {
        "entries": [entry.to_document() for entry in entries],
        "rankings": list(rankings),
    }


def dump_export(entries: Sequence[Entry], rankings: Sequence[Any]) -> str:
    """Serialize an export document as indented JSON."""
    return json.dumps(build_export(entries, rankings), indent=2, ensure_ascii=False)


def parse_import(text: str | bytes) -> ImportedDocument:
    """Decode an import file.

    Raises:
        FormatError: If the text isn't JSON, has neither accepted shape,
            or any entry is malformed.
    """
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise FormatError(f"Invalid JSON: {exc}") from exc

    if isinstance(data, list):
        return ImportedDocument(entries=_decode_entries(data))

    if not isinstance(data, dict):
        raise FormatError(f"Expected a list or an object, got {type(data).__name__}")

    key = next((k for k in ENTRIES_KEYS if k in data), None)
    if key is None:
        raise FormatError("Object has no 'entries' or 'watchlistData' list")
    raw_entries = data[key]
    if not isinstance(raw_entries, list):
        raise FormatError(f"'{key}' must be a list")

    rankings = data.get("rankings") or []
    if not isinstance(rankings, list):
        raise FormatError("'rankings' must be a list")

    return ImportedDocument(entries=_decode_entries(raw_entries), rankings=tuple(rankings))


def _decode_entries(raw: list) -> tuple[Entry, ...]:
    entries = []
    for position, doc in enumerate(raw):
        try:
            entries.append(Entry.from_document(doc))
        except FormatError as exc:
            raise FormatError(f"entry {position}: {exc}") from exc
    return tuple(entries)
