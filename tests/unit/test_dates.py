from datetime import date, datetime

import pytest

from watchlist.dates import (
    EPOCH,
    format_display_date,
    normalize_date,
    parse_display_date,
    sort_date,
    to_iso,
)


class TestFormat:
    def test_unpadded_day(self):
        assert format_display_date(date(2024, 1, 5)) == "Jan 5, 2024"

    def test_two_digit_day(self):
        assert format_display_date(date(2023, 12, 25)) == "Dec 25, 2023"


class TestParse:
    def test_display_text(self):
        assert parse_display_date("Jan 5, 2024") == date(2024, 1, 5)

    def test_iso_text(self):
        assert parse_display_date("2024-02-01") == date(2024, 2, 1)

    def test_full_month_name(self):
        assert parse_display_date("September 9, 2022") == date(2022, 9, 9)

    def test_unparseable(self):
        assert parse_display_date("someday") is None
        assert parse_display_date("") is None
        assert parse_display_date(None) is None

    def test_impossible_date(self):
        assert parse_display_date("Feb 30, 2024") is None


class TestNormalize:
    def test_iso_to_display(self):
        assert normalize_date("2024-02-01") == "Feb 1, 2024"

    def test_date_and_datetime(self):
        assert normalize_date(date(2024, 1, 5)) == "Jan 5, 2024"
        assert normalize_date(datetime(2024, 1, 5, 23, 59)) == "Jan 5, 2024"

    def test_blank(self):
        assert normalize_date("  ") is None
        assert normalize_date(None) is None

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            normalize_date("next week")


class TestHelpers:
    def test_to_iso(self):
        assert to_iso("Jan 5, 2024") == "2024-01-05"
        assert to_iso(None) == ""

    def test_sort_date_defaults_to_epoch(self):
        assert sort_date(None) == EPOCH
        assert sort_date("not a date") == EPOCH
        assert sort_date("Mar 1, 2020") == date(2020, 3, 1)
