from watchlist.models import Entry, Season
from watchlist.validation.validators import validate_all, validate_entry, validate_season


def _make_entry(**overrides):
    fields = dict(title="Arcane", status="upcoming", genres=("Action",))
    fields.update(overrides)
    return Entry(**fields)


class TestValidateEntry:
    def test_valid_entry(self):
        result = validate_entry(_make_entry())
        assert result.valid is True
        assert result.errors == ()
        assert result.warnings == ()

    def test_empty_title(self):
        result = validate_entry(_make_entry(title=""))
        assert result.valid is False
        assert any("title is required" in e for e in result.errors)

    def test_blank_title(self):
        result = validate_entry(_make_entry(title="   "))
        assert result.valid is False

    def test_unknown_status(self):
        result = validate_entry(_make_entry(status="dropped"))
        assert result.valid is False
        assert any("unknown status" in e for e in result.errors)

    def test_watched_without_date_error(self):
        result = validate_entry(_make_entry(status="watched"))
        assert result.valid is False
        assert any("need a date" in e for e in result.errors)

    def test_watched_without_date_legacy_warning(self):
        result = validate_entry(_make_entry(status="watched"), legacy=True)
        assert result.valid is True
        assert any("watched without a date" in w for w in result.warnings)

    def test_blank_genre_warning(self):
        result = validate_entry(_make_entry(genres=("",)))
        assert result.valid is True
        assert any("blank genre" in w for w in result.warnings)

    def test_invalid_season_reported_with_position(self):
        entry = _make_entry(seasons=(Season(date="Jan 1, 2024", season=0),))
        result = validate_entry(entry)
        assert result.valid is False
        assert any("season[0]" in e and "positive" in e for e in result.errors)


class TestValidateSeason:
    def test_valid(self):
        assert validate_season(Season(date="Jan 1, 2024", season=3)).valid is True

    def test_missing_date(self):
        result = validate_season(Season(date="", season=1))
        assert result.valid is False
        assert any("date is required" in e for e in result.errors)

    def test_unnumbered_movie_ok(self):
        result = validate_season(Season(date="Jan 1, 2024"), is_movie=True)
        assert result.valid is True
        assert result.warnings == ()

    def test_unnumbered_show_warns(self):
        result = validate_season(Season(date="Jan 1, 2024"))
        assert result.valid is True
        assert any("season number missing" in w for w in result.warnings)


class TestValidateAll:
    def test_multiple_entries(self):
        results = validate_all((_make_entry(), _make_entry(title="")))
        assert len(results) == 2
        assert results[0].valid is True
        assert results[1].valid is False

    def test_empty_input(self):
        assert validate_all(()) == ()

    def test_legacy_flag_passed_through(self):
        entries = [_make_entry(status="watched")]
        assert validate_all(entries)[0].valid is False
        assert validate_all(entries, legacy=True)[0].valid is True
