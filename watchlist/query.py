"""Filtered, grouped, sorted views of the watchlist.

query() is a pure function of its inputs. It returns a QueryResult made
of tuples of frozen entries, so callers can't edit a group in place and
drift away from the repository.

Sorting within a section is stable (sorted() is guaranteed stable) and
uses only the status rank plus one tie-break between watched entries.
Every other pair keeps its repository order.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Iterator

from watchlist.dates import sort_date
from watchlist.models import PENDING, UPCOMING, WATCHED, Entry, WatchlistStats

ALL = "all"

STATUS_RANK = {
    WATCHED: 0,
    PENDING: 1,
    UPCOMING: 2,
}

TIE_BREAK_DATE = "date"
TIE_BREAK_YEAR = "year"
TIE_BREAKS = (TIE_BREAK_DATE, TIE_BREAK_YEAR)


@dataclass(frozen=True)
class SectionGroup:
    """Entries sharing one alphabetic section, in display order."""

    section: str
    entries: tuple[Entry, ...]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class QueryResult:
    """Section groups ordered by section key."""

    groups: tuple[SectionGroup, ...]

    def __iter__(self) -> Iterator[SectionGroup]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    @property
    def sections(self) -> tuple[str, ...]:
        return tuple(group.section for group in self.groups)

    @property
    def entry_count(self) -> int:
        return sum(len(group) for group in self.groups)

    def is_empty(self) -> bool:
        return not self.groups


def matches(entry: Entry, search_term: str, status_filter: str, genre_filter: str) -> bool:
    """Whether an entry passes the search box and both dropdown filters."""
    term = search_term.lower()
    matches_search = term in entry.title.lower() or any(
        term in genre.lower() for genre in entry.genres
    )
    matches_status = status_filter == ALL or entry.status == status_filter
    matches_genre = genre_filter == ALL or genre_filter in entry.genres
    return matches_search and matches_status and matches_genre


def _year_key(entry: Entry) -> int:
    """Leading digits of the free-text year; missing years sort first."""
    digits = ""
    for char in (entry.year or "").strip():
        if not char.isdigit():
            break
        digits += char
    return int(digits) if digits else 0


def _sort_key(tie_break: str):
    def key(entry: Entry) -> tuple:
        rank = STATUS_RANK.get(entry.status, len(STATUS_RANK))
        if entry.status != WATCHED:
            return (rank,)
        if tie_break == TIE_BREAK_YEAR:
            return (rank, _year_key(entry))
        return (rank, sort_date(entry.date))

    return key


def sort_section(entries: Iterable[Entry], tie_break: str = TIE_BREAK_DATE) -> tuple[Entry, ...]:
    """Order one section: watched, then pending, then upcoming.

    Watched entries are ordered by watched date (earliest first, missing
    dates as epoch), or by release year when tie_break is "year".
    """
    if tie_break not in TIE_BREAKS:
        raise ValueError(f"Unknown tie break '{tie_break}'")
    return tuple(sorted(entries, key=_sort_key(tie_break)))


def query(
    entries: Iterable[Entry],
    search_term: str = "",
    status_filter: str = ALL,
    genre_filter: str = ALL,
    section_filter: str = ALL,
    tie_break: str = TIE_BREAK_DATE,
) -> QueryResult:
    """Filter, group by section, and sort.

    Args:
        entries: Entries in repository order.
        search_term: Case-insensitive substring of the title or any genre.
        status_filter: "all" or one status.
        genre_filter: "all" or one exact genre tag.
        section_filter: "all" or one section key, e.g. "A" or "0-9".
        tie_break: "date" or "year" ordering among watched entries.

    Returns:
        QueryResult with groups ordered by section key.
    """
    grouped: dict[str, list[Entry]] = defaultdict(list)
    for entry in entries:
        if matches(entry, search_term, status_filter, genre_filter):
            grouped[entry.section].append(entry)

    groups = tuple(
        SectionGroup(section=section, entries=sort_section(grouped[section], tie_break))
        for section in sorted(grouped)
        if section_filter == ALL or section == section_filter
    )
    return QueryResult(groups=groups)


def genre_options(entries: Iterable[Entry]) -> tuple[str, ...]:
    """Distinct genres across all entries, sorted, for the genre dropdown."""
    return tuple(sorted({genre for entry in entries for genre in entry.genres}))


def compute_stats(entries: Iterable[Entry]) -> WatchlistStats:
    counts = {WATCHED: 0, PENDING: 0, UPCOMING: 0}
    total = 0
    for entry in entries:
        total += 1
        if entry.status in counts:
            counts[entry.status] += 1
    return WatchlistStats(
        total=total,
        watched=counts[WATCHED],
        pending=counts[PENDING],
        upcoming=counts[UPCOMING],
    )
