import json
from datetime import datetime, timedelta, timezone

import responses
from requests.exceptions import ConnectionError

from watchlist.backup.http_client import create_session
from watchlist.backup.remote import RemoteBackup
from watchlist.config import BackupConfig
from watchlist.models import Entry
from watchlist.storage.local_store import LocalStore
from watchlist.storage.persistence import WatchlistStore

ENDPOINT = "https://api.jsonbin.io/v3/b"
NOW = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)


def _entries():
    return (Entry(title="Arcane", status="upcoming", genres=("Action",)),)


def _make_backup(tmp_path, api_key="secret-key", dirty=True, last_backup=None):
    store = WatchlistStore(LocalStore(tmp_path / "store.json"))
    if dirty:
        store.save(_entries())
    if last_backup is not None:
        store.record_backup(last_backup)
        if dirty:
            store.save(_entries())
    config = BackupConfig(api_key=api_key)
    backup = RemoteBackup(create_session(config), config, store, clock=lambda: NOW)
    return backup, store


class TestSession:
    def test_headers(self):
        session = create_session(BackupConfig(api_key="k"))
        assert session.headers["X-Master-Key"] == "k"
        assert session.headers["Content-Type"] == "application/json"
        assert session.headers["User-Agent"] == "WatchlistBackup/1.0"


class TestBackupGating:
    def test_disabled_without_key(self, tmp_path):
        backup, _ = _make_backup(tmp_path, api_key="")
        assert backup.check(_entries()).status == "disabled"

    def test_clean_data_skipped(self, tmp_path):
        backup, _ = _make_backup(tmp_path, dirty=False)
        assert backup.check(_entries()).status == "clean"

    def test_too_soon(self, tmp_path):
        backup, _ = _make_backup(tmp_path, last_backup=NOW - timedelta(hours=3))
        assert backup.check(_entries()).status == "too_soon"


class TestBackupUpload:
    @responses.activate
    def test_successful_upload(self, tmp_path):
        responses.add(responses.POST, ENDPOINT, json={"metadata": {}}, status=200)
        backup, store = _make_backup(tmp_path, last_backup=NOW - timedelta(days=2))
        store.save_rankings([{"title": "Arcane", "rank": 1}])

        outcome = backup.check(_entries())

        assert outcome.uploaded is True
        assert store.is_dirty() is False
        assert store.last_backup() == NOW

        request = responses.calls[0].request
        assert request.headers["X-Master-Key"] == "secret-key"
        body = json.loads(request.body)
        assert body["watchlistData"][0]["title"] == "Arcane"
        assert body["rankings"] == [{"title": "Arcane", "rank": 1}]
        assert body["timestamp"] == "2024-01-05T12:00:00Z"

    @responses.activate
    def test_first_backup_runs_immediately(self, tmp_path):
        responses.add(responses.POST, ENDPOINT, json={}, status=200)
        backup, _ = _make_backup(tmp_path)
        assert backup.check(_entries()).uploaded is True

    @responses.activate
    def test_server_error_keeps_dirty_flag(self, tmp_path):
        responses.add(responses.POST, ENDPOINT, status=401)
        backup, store = _make_backup(tmp_path)

        outcome = backup.check(_entries())

        assert outcome.status == "failed"
        assert "401" in outcome.detail
        assert store.is_dirty() is True
        assert store.last_backup() is None

    @responses.activate
    def test_network_error_swallowed(self, tmp_path):
        responses.add(responses.POST, ENDPOINT, body=ConnectionError("offline"))
        backup, store = _make_backup(tmp_path)

        outcome = backup.check(_entries())

        assert outcome.status == "failed"
        assert store.is_dirty() is True
