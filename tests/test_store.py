"""Tests for store module."""

import sqlite3

import pytest

from attune.config import get_config
from attune.contracts import HabitState, SessionSnapshot
from attune.personalization import record_focus_session
from attune.store import InMemoryStateStore, SqliteStateStore
from attune.store.state_store import SCHEMA_VERSION


class TestInMemoryStateStore:
    def test_get_set_delete(self, state):
        store = InMemoryStateStore()
        assert store.get("alice") is None

        store.set("alice", state)
        assert store.get("alice") is state
        assert len(store) == 1

        store.delete("alice")
        assert store.get("alice") is None
        store.delete("alice")  # missing is fine


class TestSqliteStateStore:
    def test_round_trip(self, tmp_path, state, now):
        store = SqliteStateStore(tmp_path)
        state = record_focus_session(state, SessionSnapshot(timestamp=now, duration_minutes=30), now=now)

        store.set("alice", state)
        loaded = store.get("alice")

        assert loaded == state
        assert loaded.habits.last_focus_date == now.date()
        assert loaded.attention.session_history[0].duration_minutes == 30

    def test_missing_user(self, tmp_path):
        assert SqliteStateStore(tmp_path).get("nobody") is None

    def test_set_replaces(self, tmp_path, state):
        store = SqliteStateStore(tmp_path)
        store.set("alice", state)
        store.set("alice", state.model_copy(update={"habits": HabitState(current_streak=9)}))

        assert store.get("alice").habits.current_streak == 9
        assert store.list_users() == ["alice"]

    def test_persists_across_instances(self, tmp_path, state):
        SqliteStateStore(tmp_path).set("bob", state)
        SqliteStateStore(tmp_path).set("alice", state)

        reopened = SqliteStateStore(tmp_path)
        assert reopened.list_users() == ["alice", "bob"]
        assert reopened.get("bob") == state

    def test_delete(self, tmp_path, state):
        store = SqliteStateStore(tmp_path)
        store.set("alice", state)
        store.delete("alice")
        assert store.get("alice") is None

    def test_records_schema_version(self, tmp_path, state):
        store = SqliteStateStore(tmp_path)
        store.set("alice", state)

        conn = sqlite3.connect(store.db_path)
        try:
            version = conn.execute(
                "SELECT schema_version FROM personalization_state WHERE user_id = ?", ("alice",)
            ).fetchone()[0]
        finally:
            conn.close()
        assert version == SCHEMA_VERSION

    def test_creates_data_dir(self, tmp_path):
        store = SqliteStateStore(tmp_path / "nested" / "dir")
        assert store.db_path.exists()

    def test_defaults_to_configured_data_dir(self, tmp_path, monkeypatch, state):
        monkeypatch.setattr(get_config(), "DATA_DIR", str(tmp_path / "configured"))

        store = SqliteStateStore()
        store.set("alice", state)

        assert store.db_path == tmp_path / "configured" / "personalization.db"
        assert SqliteStateStore(tmp_path / "configured").get("alice") == state


@pytest.fixture
def stores(tmp_path):
    return [InMemoryStateStore(), SqliteStateStore(tmp_path)]


def test_stores_share_interface(stores, state):
    for store in stores:
        store.set("carol", state)
        assert store.get("carol") == state
