"""Immutable data models for watchlist entries.

All dataclasses are frozen (immutable) to prevent accidental mutation.
Changes go through dataclasses.replace(), which re-runs __post_init__
so derived fields (section, sorted genres) can never go stale.

Each model has a to_document() method that converts it to a dict in the
stored JSON shape (camelCase keys, absent optional fields omitted) and a
from_document() classmethod that reverses it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from watchlist.errors import FormatError

UPCOMING = "upcoming"
PENDING = "pending"
WATCHED = "watched"

STATUSES = (UPCOMING, PENDING, WATCHED)

DIGIT_SECTION = "0-9"

Rating = Union[int, float, str]


def section_for(title: str) -> str:
    """Alphabetic bucket for a title.

    Examples:
        "Arcane"  -> "A"
        "1917"    -> "0-9"
        "ēlan"    -> "Ē"
    """
    if not title:
        return ""
    first = title[0].upper()
    return DIGIT_SECTION if first.isdigit() else first


@dataclass(frozen=True)
class Season:
    """One completion event within an entry.

    Attributes:
        date: Completion date as display text ("Feb 1, 2024").
        season: Season or installment number. Optional because some
            movie completions have no numbering.
    """

    date: str
    season: int | None = None

    def to_document(self) -> dict:
        """Convert to the stored dict. Omits season when absent."""
        doc: dict[str, Any] = {}
        if self.season is not None:
            doc["season"] = self.season
        doc["date"] = self.date
        return doc

    @classmethod
    def from_document(cls, doc: Any) -> Season:
        if not isinstance(doc, dict):
            raise FormatError(f"season record must be an object, got {type(doc).__name__}")

        date = doc.get("date")
        if not isinstance(date, str) or not date.strip():
            raise FormatError("season record is missing its date")

        number = doc.get("season")
        if number is not None:
            if isinstance(number, bool) or not isinstance(number, (int, float)):
                raise FormatError(f"season number must be numeric, got {number!r}")
            if number != int(number):
                raise FormatError(f"season number must be whole, got {number!r}")
            number = int(number)

        return cls(date=date, season=number)


@dataclass(frozen=True)
class Entry:
    """One tracked show or movie.

    Attributes:
        title: Display name; must be non-empty.
        status: One of "upcoming", "pending" or "watched".
        genres: Tags, kept sorted ascending. Duplicates are kept.
        section: Alphabetic bucket derived from the title (read-only).
        is_movie: Movies label their seasons as installments and don't
            require installment numbers.
        date: Watched date as display text; only kept while watched.
        year: Free-text release year.
        rating: Score set outside the entry forms.
        note: Free-text annotation.
        horror: Extra tag flag, stored only when set.
        seasons: Completion records, ascending by season number.
        id: Session-scoped identifier assigned by the repository. Not
            serialized and not part of equality.
    """

    title: str
    status: str
    genres: tuple[str, ...] = ()
    section: str = ""
    is_movie: bool = False
    date: str | None = None
    year: str | None = None
    rating: Rating | None = None
    note: str | None = None
    horror: bool = False
    seasons: tuple[Season, ...] = ()
    id: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "section", section_for(self.title))
        object.__setattr__(self, "genres", tuple(sorted(self.genres)))
        object.__setattr__(self, "seasons", tuple(self.seasons))
        if self.status != WATCHED and self.date is not None:
            object.__setattr__(self, "date", None)

    @property
    def is_watched(self) -> bool:
        return self.status == WATCHED

    def to_document(self) -> dict:
        """Convert to the stored dict, omitting absent optional fields."""
        doc: dict[str, Any] = {
            "title": self.title,
            "status": self.status,
            "genres": list(self.genres),
            "section": self.section,
            "isMovie": self.is_movie,
            "seasons": [season.to_document() for season in self.seasons],
        }
        if self.date:
            doc["date"] = self.date
        if self.year:
            doc["year"] = self.year
        if self.rating is not None and self.rating != "":
            doc["rating"] = self.rating
        if self.note:
            doc["note"] = self.note
        if self.horror:
            doc["horror"] = True
        return doc

    @classmethod
    def from_document(cls, doc: Any) -> Entry:
        """Build an Entry from a stored dict.

        The stored section is ignored and recomputed from the title.

        Raises:
            FormatError: If a field is missing or has the wrong type.
        """
        if not isinstance(doc, dict):
            raise FormatError(f"entry must be an object, got {type(doc).__name__}")

        title = doc.get("title")
        if not isinstance(title, str):
            raise FormatError("entry is missing its title")

        status = doc.get("status")
        if not isinstance(status, str):
            raise FormatError(f"entry '{title}' is missing its status")

        genres = doc.get("genres", [])
        if not isinstance(genres, list) or not all(isinstance(g, str) for g in genres):
            raise FormatError(f"entry '{title}' has malformed genres")

        seasons = doc.get("seasons") or []
        if not isinstance(seasons, list):
            raise FormatError(f"entry '{title}' has malformed seasons")

        rating = doc.get("rating")
        if rating is not None and (
            isinstance(rating, bool) or not isinstance(rating, (int, float, str))
        ):
            raise FormatError(f"entry '{title}' has malformed rating")

        return cls(
            title=title,
            status=status,
            genres=tuple(genres),
            is_movie=bool(doc.get("isMovie", False)),
            date=_optional_text(doc, "date", title),
            year=_optional_text(doc, "year", title),
            rating=rating,
            note=_optional_text(doc, "note", title),
            horror=bool(doc.get("horror", False)),
            seasons=tuple(Season.from_document(s) for s in seasons),
        )


def _optional_text(doc: dict, key: str, title: str) -> str | None:
    """Read an optional text field. Numbers are accepted (e.g. year 2019)."""
    value = doc.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise FormatError(f"entry '{title}' has malformed {key}")
    return str(value)


@dataclass(frozen=True)
class PendingConfirmation:
    """A two-phase action waiting for the caller to confirm or cancel.

    Attributes:
        token: Opaque handle passed back to confirm/cancel.
        kind: What will happen on confirm ("unwatch", "delete", "season_edit").
        entry_id: Target entry's stable id.
        generation: Repository generation when the request was made; any
            structural mutation since then invalidates the token.
        message: Prompt text for the caller to show.
        season: Target season record for "season_edit" requests. The
            record is found again by value on commit, since adding a
            season re-sorts the ledger.
    """

    token: str
    kind: str
    entry_id: str
    generation: int
    message: str
    season: Season | None = None


@dataclass(frozen=True)
class WatchlistStats:
    """Counts shown in the header of the watchlist."""

    total: int
    watched: int
    pending: int
    upcoming: int
