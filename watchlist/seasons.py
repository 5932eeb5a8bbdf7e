"""Season ledger: completion records owned by one entry.

Records are added and edited, never deleted. After each change the
ledger is re-sorted by season number with an explicit total order:
records without a number come first, then ascending numbers. The sort
is stable, so records with equal keys keep their insertion order.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date as date_type

from watchlist.dates import normalize_date
from watchlist.errors import EntryIndexError, ValidationError
from watchlist.models import Entry, Season

logger = logging.getLogger(__name__)


def season_sort_key(season: Season) -> tuple[int, int]:
    """Absent numbers sort before every present number."""
    if season.season is None:
        return (0, 0)
    return (1, season.season)


def sort_seasons(seasons: tuple[Season, ...] | list[Season]) -> tuple[Season, ...]:
    return tuple(sorted(seasons, key=season_sort_key))


def _parse_number(value: int | str | None, is_movie: bool) -> int | None:
    """Turn form input into a season number.

    Blank input is only allowed for movies. Digit strings are accepted
    since that's what number inputs submit.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if is_movie:
            return None
        raise ValidationError("season number is required")

    if isinstance(value, bool):
        raise ValidationError(f"season number must be an integer, got {value!r}")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValidationError(
                f"season number must be an integer, got '{value}'"
            ) from None
    if not isinstance(value, int):
        raise ValidationError(f"season number must be an integer, got {value!r}")
    if value < 1:
        raise ValidationError(f"season number must be positive, got {value}")
    return value


def make_season(
    entry: Entry,
    season_number: int | str | None,
    date: date_type | str | None,
) -> Season:
    """Validate form input and build a Season for this entry.

    Raises:
        ValidationError: If the date is missing or unparseable, or the
            number is missing on a show or isn't a positive integer.
    """
    try:
        display_date = normalize_date(date)
    except ValueError as exc:
        raise ValidationError(str(exc)) from None
    if not display_date:
        raise ValidationError("season date is required")

    return Season(date=display_date, season=_parse_number(season_number, entry.is_movie))


def add_season(
    entry: Entry,
    season_number: int | str | None,
    date: date_type | str | None,
) -> Entry:
    """Append a completion record and re-sort.

    Returns:
        A new Entry with the record added.
    """
    season = make_season(entry, season_number, date)
    logger.info("Added season %s (%s) to '%s'", season.season, season.date, entry.title)
    return replace(entry, seasons=sort_seasons(entry.seasons + (season,)))


def check_season_index(entry: Entry, season_index: int) -> None:
    """Raise EntryIndexError unless season_index points at a record."""
    if (
        isinstance(season_index, bool)
        or not isinstance(season_index, int)
        or not 0 <= season_index < len(entry.seasons)
    ):
        raise EntryIndexError(
            f"season index {season_index!r} out of range for '{entry.title}' "
            f"({len(entry.seasons)} recorded)"
        )


def edit_season(
    entry: Entry,
    season_index: int,
    season_number: int | str | None,
    date: date_type | str | None,
) -> Entry:
    """Replace the record at season_index and re-sort.

    Raises:
        EntryIndexError: If season_index is out of range.
        ValidationError: Same rules as add_season.
    """
    check_season_index(entry, season_index)
    season = make_season(entry, season_number, date)
    seasons = list(entry.seasons)
    seasons[season_index] = season
    logger.info("Edited season %d of '%s'", season_index, entry.title)
    return replace(entry, seasons=sort_seasons(seasons))
