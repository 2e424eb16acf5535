"""Tests for the leaderboard stores."""

from __future__ import annotations

import json
import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from arcade_snake.leaderboard import (
    STORAGE_KEY,
    JsonLeaderboard,
    LeaderboardEntry,
    LeaderboardError,
    SqliteLeaderboard,
    normalize_name,
    rank_entries,
)


@pytest.fixture()
def sqlite_store(tmp_path):
    store = SqliteLeaderboard(tmp_path / "scores" / "db.sqlite3")
    yield store
    store.close()


@pytest.fixture()
def json_store(tmp_path):
    return JsonLeaderboard(tmp_path / "storage.json")


@pytest.fixture(params=["sqlite", "json"])
def store(request, sqlite_store, json_store):
    return sqlite_store if request.param == "sqlite" else json_store


class TestEntries:
    def test_empty_name_becomes_anonymous(self):
        assert normalize_name("") == "Anonymous"
        assert normalize_name("   ") == "Anonymous"
        assert normalize_name(None) == "Anonymous"
        assert normalize_name(" ada ") == "ada"

    def test_default_date_is_iso(self):
        entry = LeaderboardEntry(name="ada", score=3)
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", entry.date)

    def test_negative_score_rejected(self):
        with pytest.raises(ValueError, match=">= 0"):
            LeaderboardEntry(name="ada", score=-1)

    def test_rank_is_stable(self):
        entries = [
            LeaderboardEntry("a", 10, "d"),
            LeaderboardEntry("b", 20, "d"),
            LeaderboardEntry("c", 10, "d"),
        ]
        assert [e.name for e in rank_entries(entries)] == ["b", "a", "c"]

    def test_rank_truncates(self):
        entries = [LeaderboardEntry(str(i), i, "d") for i in range(8)]
        assert [e.score for e in rank_entries(entries)] == [7, 6, 5, 4, 3]


class TestStoreContract:
    def test_submit_returns_increasing_ids(self, store):
        first = store.submit("a", 1)
        second = store.submit("b", 2)
        assert isinstance(first, int)
        assert second > first

    def test_concurrent_submissions_from_threads(self, store):
        with ThreadPoolExecutor(max_workers=4) as pool:
            ids = list(pool.map(lambda s: store.submit("p", s), range(20)))
        assert len(set(ids)) == 20
        assert [e.score for e in store.fetch_top()] == [19, 18, 17, 16, 15]

    def test_empty(self, store):
        assert store.fetch_top() == []

    def test_anonymous_submission(self, store):
        store.submit("", 42)
        [entry] = store.fetch_top()
        assert entry.name == "Anonymous"
        assert entry.score == 42

    def test_keeps_given_date(self, store):
        store.submit("ada", 5, "2024-01-02")
        assert store.fetch_top()[0].date == "2024-01-02"

    def test_evicts_lowest(self, store):
        for score in (100, 90, 80, 70, 60):
            store.submit("p", score)
        store.submit("new", 85)
        assert [e.score for e in store.fetch_top()] == [100, 90, 85, 80, 70]

    def test_low_score_not_retained(self, store):
        for score in (100, 90, 80, 70, 60):
            store.submit("p", score)
        store.submit("late", 10)
        assert [e.score for e in store.fetch_top()] == [100, 90, 80, 70, 60]

    def test_ties_keep_submission_order(self, store):
        for name in ("first", "second", "third"):
            store.submit(name, 50)
        assert [e.name for e in store.fetch_top()] == ["first", "second", "third"]

    def test_tie_at_cutoff_keeps_earlier(self, store):
        for i in range(5):
            store.submit(f"p{i}", 10)
        store.submit("late", 10)
        names = [e.name for e in store.fetch_top()]
        assert "late" not in names
        assert len(names) == 5


class TestSqliteLeaderboard:
    def test_table_is_trimmed(self, sqlite_store):
        for score in range(10):
            sqlite_store.submit("p", score)
        count = sqlite_store._conn.execute(
            "SELECT COUNT(*) FROM leaderboard",
        ).fetchone()[0]
        assert count == 5

    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "db.sqlite3"
        store = SqliteLeaderboard(path)
        store.submit("ada", 7)
        store.close()
        reopened = SqliteLeaderboard(path)
        assert [e.name for e in reopened.fetch_top()] == ["ada"]
        reopened.close()

    def test_closed_connection_reports_error(self, tmp_path):
        store = SqliteLeaderboard(tmp_path / "db.sqlite3")
        store.close()
        with pytest.raises(LeaderboardError):
            store.submit("ada", 1)
        with pytest.raises(LeaderboardError):
            store.fetch_top()

    def test_in_memory(self):
        store = SqliteLeaderboard(":memory:")
        store.submit("ada", 1)
        assert len(store.fetch_top()) == 1
        store.close()


class TestJsonLeaderboard:
    def test_stored_under_fixed_key(self, json_store):
        json_store.submit("ada", 3)
        doc = json.loads(json_store.path.read_text())
        assert doc[STORAGE_KEY][0]["name"] == "ada"

    def test_other_keys_untouched(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({"volume": 0.5}))
        JsonLeaderboard(path).submit("ada", 3)
        assert json.loads(path.read_text())["volume"] == 0.5

    def test_id_counter_stored_next_to_entries(self, json_store):
        assert json_store.submit("a", 10) == 1
        assert json_store.submit("b", 20) == 2
        doc = json.loads(json_store.path.read_text())
        assert doc[f"{STORAGE_KEY}:last_id"] == 2

    def test_id_issued_when_not_retained(self, json_store):
        for score in (100, 90, 80, 70, 60):
            json_store.submit("p", score)
        assert json_store.submit("late", 1) == 6
        assert "late" not in [e.name for e in json_store.fetch_top()]

    def test_malformed_id_counter(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({f"{STORAGE_KEY}:last_id": "x"}))
        with pytest.raises(LeaderboardError):
            JsonLeaderboard(path).submit("ada", 1)

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json")
        with pytest.raises(LeaderboardError):
            JsonLeaderboard(path).fetch_top()

    def test_non_object_document(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[]")
        with pytest.raises(LeaderboardError):
            JsonLeaderboard(path).fetch_top()
