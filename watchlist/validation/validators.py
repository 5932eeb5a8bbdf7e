"""Data validation for watchlist entries and season records.

Validates entries before they enter the repository. Catches issues like:
- Empty titles (the form was submitted blank)
- Unknown statuses (a hand-edited or foreign import file)
- Season numbers that aren't positive integers
- Watched entries without a watched date

Validation errors prevent the mutation. Warnings are logged but don't
block it - they flag unusual but legacy-compatible data. A watched
entry without a date is an error on new writes, but only a warning
when validating stored or imported data, since older versions saved
such entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from watchlist.models import STATUSES, WATCHED, Entry, Season

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a single entry or season.

    Attributes:
        valid: True if no errors (warnings are OK).
        errors: Issues that should prevent the mutation.
        warnings: Unusual data that's still acceptable.
    """

    valid: bool
    errors: tuple[str, ...]
    warnings: tuple[str, ...]


def validate_entry(entry: Entry, legacy: bool = False) -> ValidationResult:
    """Validate a single entry.

    Checks:
    - Title is non-empty
    - Status is one of upcoming/pending/watched
    - Watched entries carry a date (only warns when legacy is set)
    - Genres are non-blank (warns otherwise)
    - Every season record is valid

    Args:
        entry: The Entry to validate.
        legacy: True for stored or imported data.

    Returns:
        ValidationResult with valid=True if no errors found.
    """
    errors: list[str] = []
    warnings: list[str] = []
    context = f"entry '{entry.title}'" if entry.title else "entry"

    if not entry.title or not entry.title.strip():
        errors.append(f"{context}: title is required")

    if entry.status not in STATUSES:
        errors.append(
            f"{context}: unknown status '{entry.status}' "
            f"(expected one of {', '.join(STATUSES)})"
        )

    if entry.status == WATCHED and not entry.date:
        if legacy:
            warnings.append(f"{context}: watched without a date")
        else:
            errors.append(f"{context}: watched entries need a date")

    if any(not genre.strip() for genre in entry.genres):
        warnings.append(f"{context}: blank genre tag")

    for position, season in enumerate(entry.seasons):
        result = validate_season(season, is_movie=entry.is_movie)
        errors.extend(f"{context}/season[{position}]: {e}" for e in result.errors)
        warnings.extend(f"{context}/season[{position}]: {w}" for w in result.warnings)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )


def validate_season(season: Season, is_movie: bool = False) -> ValidationResult:
    """Validate one season record.

    Checks:
    - Date is non-empty
    - Number is present unless the parent is a movie
    - Number, when present, is a positive integer
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not season.date or not season.date.strip():
        errors.append("date is required")

    if season.season is None:
        if not is_movie:
            warnings.append("season number missing on a show")
    elif isinstance(season.season, bool) or not isinstance(season.season, int):
        errors.append(f"season number must be an integer, got {season.season!r}")
    elif season.season < 1:
        errors.append(f"season number must be positive, got {season.season}")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )


def validate_all(
    entries: Iterable[Entry], legacy: bool = False
) -> tuple[ValidationResult, ...]:
    """Validate all entries and log summary statistics.

    Args:
        entries: Entry objects to validate.
        legacy: True for stored or imported data.

    Returns:
        Tuple of ValidationResult objects, one per input entry,
        in the same order.
    """
    results = []
    total_errors = 0
    total_warnings = 0

    for entry in entries:
        result = validate_entry(entry, legacy=legacy)
        results.append(result)
        total_errors += len(result.errors)
        total_warnings += len(result.warnings)

    if total_errors:
        logger.warning("Validation found %d errors", total_errors)
    if total_warnings:
        logger.info("Validation found %d warnings", total_warnings)

    return tuple(results)
