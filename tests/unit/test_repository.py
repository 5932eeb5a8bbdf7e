import pytest

from watchlist.errors import EntryIndexError, ValidationError
from watchlist.models import Entry, Season
from watchlist.repository import EntryRepository


def _make_entry(title="Arcane", **overrides):
    fields = dict(title=title, status="upcoming", genres=("Action", "Sci-Fi"))
    fields.update(overrides)
    return Entry(**fields)


def _make_repo(*titles):
    return EntryRepository(_make_entry(title) for title in titles)


class TestAdd:
    def test_add_assigns_id_and_section(self):
        repo = EntryRepository()
        stored = repo.add(_make_entry())
        assert stored.id
        assert stored.section == "A"
        assert stored.date is None
        assert len(repo) == 1

    def test_ids_are_unique(self):
        repo = EntryRepository()
        first = repo.add(_make_entry())
        second = repo.add(_make_entry())
        assert first.id != second.id

    def test_add_empty_title_fails_without_mutation(self):
        repo = _make_repo("Dune")
        with pytest.raises(ValidationError):
            repo.add(_make_entry(title=""))
        assert len(repo) == 1

    def test_add_does_not_bump_generation(self):
        repo = EntryRepository()
        before = repo.generation
        repo.add(_make_entry())
        assert repo.generation == before

    def test_watched_requires_date(self):
        repo = EntryRepository()
        with pytest.raises(ValidationError):
            repo.add(_make_entry(status="watched"))
        assert len(repo) == 0
        stored = repo.add(_make_entry(status="watched", date="Jan 5, 2024"))
        assert stored.date == "Jan 5, 2024"


class TestUpdate:
    def test_preserves_seasons_and_rating(self):
        repo = EntryRepository()
        original = repo.add(
            _make_entry(rating=8, horror=True, seasons=(Season(date="Jan 1, 2024", season=1),))
        )
        updated = repo.update(0, _make_entry(title="Arcane: League of Legends"))
        assert updated.seasons == original.seasons
        assert updated.rating == 8
        assert updated.horror is True
        assert updated.id == original.id

    def test_explicit_overwrite(self):
        repo = EntryRepository()
        repo.add(_make_entry(rating=8))
        updated = repo.update(0, _make_entry(), rating=None, seasons=())
        assert updated.rating is None
        assert updated.seasons == ()

    def test_section_recomputed(self):
        repo = _make_repo("Arcane")
        assert repo.update(0, _make_entry(title="1899")).section == "0-9"

    def test_out_of_bounds(self):
        repo = _make_repo("Arcane")
        with pytest.raises(EntryIndexError):
            repo.update(1, _make_entry())

    def test_entry_index_error_is_index_error(self):
        repo = EntryRepository()
        with pytest.raises(IndexError):
            repo.update(0, _make_entry())

    def test_invalid_value_leaves_entry(self):
        repo = _make_repo("Arcane")
        with pytest.raises(ValidationError):
            repo.update(0, _make_entry(title=""))
        assert repo.get(0).title == "Arcane"

    def test_watched_requires_date(self):
        repo = _make_repo("Arcane")
        with pytest.raises(ValidationError):
            repo.update(0, _make_entry(status="watched"))
        assert repo.get(0).status == "upcoming"


class TestPut:
    def test_keeps_id(self):
        repo = _make_repo("Arcane")
        original = repo.get(0)
        stored = repo.put(0, _make_entry(status="pending"))
        assert stored.id == original.id
        assert stored.status == "pending"

    def test_watched_requires_date(self):
        repo = _make_repo("Arcane")
        with pytest.raises(ValidationError):
            repo.put(0, _make_entry(status="watched"))
        assert repo.get(0).status == "upcoming"

    def test_legacy_entry_may_stay_dateless(self):
        repo = EntryRepository([_make_entry(status="watched")])
        season = Season(date="Jan 1, 2024", season=1)
        stored = repo.put(0, _make_entry(status="watched", seasons=(season,)))
        assert stored.seasons == (season,)
        assert stored.date is None


class TestRemove:
    def test_remove_shifts_and_bumps_generation(self):
        repo = _make_repo("A1", "B1", "C1")
        before = repo.generation
        removed = repo.remove(1)
        assert removed.title == "B1"
        assert [e.title for e in repo.list()] == ["A1", "C1"]
        assert repo.generation == before + 1

    def test_out_of_bounds(self):
        repo = _make_repo("A1")
        with pytest.raises(EntryIndexError):
            repo.remove(5)

    def test_negative_index_rejected(self):
        repo = _make_repo("A1", "B1")
        with pytest.raises(EntryIndexError):
            repo.remove(-1)
        assert len(repo) == 2


class TestReplaceAll:
    def test_replace(self):
        repo = _make_repo("A1", "B1")
        repo.replace_all([_make_entry("Zodiac")])
        assert [e.title for e in repo.list()] == ["Zodiac"]

    def test_reset_to_empty(self):
        repo = _make_repo("A1")
        repo.replace_all([])
        assert repo.list() == ()

    def test_invalid_entry_leaves_contents(self):
        repo = _make_repo("A1", "B1")
        with pytest.raises(ValidationError):
            repo.replace_all([_make_entry("Good"), _make_entry("")])
        assert [e.title for e in repo.list()] == ["A1", "B1"]

    def test_accepts_legacy_watched_without_date(self):
        repo = _make_repo("A1")
        repo.replace_all([_make_entry("Zodiac", status="watched")])
        assert repo.get(0).status == "watched"
        assert repo.get(0).date is None

    def test_all_errors_reported(self):
        repo = EntryRepository()
        with pytest.raises(ValidationError) as excinfo:
            repo.replace_all([_make_entry(""), _make_entry("Zodiac", status="dropped")])
        assert len(excinfo.value.errors) == 2


class TestAccessors:
    def test_list_is_snapshot(self):
        repo = _make_repo("A1")
        snapshot = repo.list()
        repo.add(_make_entry("B1"))
        assert len(snapshot) == 1
        assert isinstance(snapshot, tuple)

    def test_get_out_of_bounds(self):
        with pytest.raises(EntryIndexError):
            EntryRepository().get(0)

    def test_index_of_and_find(self):
        repo = _make_repo("A1", "B1")
        target = repo.get(1)
        assert repo.index_of(target.id) == 1
        assert repo.find(target.id) == target
        repo.remove(0)
        assert repo.index_of(target.id) == 0

    def test_index_of_removed(self):
        repo = _make_repo("A1")
        gone = repo.remove(0)
        assert repo.find(gone.id) is None
        with pytest.raises(EntryIndexError):
            repo.index_of(gone.id)
