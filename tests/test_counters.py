"""
Tests for counter store backends.

The SQL store runs against a throwaway SQLite database per test.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from faktur.infrastructure.counters import InMemoryCounterStore, SqlCounterStore
from faktur.infrastructure.database import init_db


@pytest.fixture
def sql_store(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'counters.db'}")
    init_db(engine)
    yield SqlCounterStore(sessionmaker(engine, expire_on_commit=False))
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def any_store(request, sql_store):
    if request.param == "memory":
        return InMemoryCounterStore()
    return sql_store


class TestCounterStore:
    """Behavior shared by every backend."""

    def test_missing_key(self, any_store):
        assert any_store.get("sequence_20240305") is None

    def test_set_and_get(self, any_store):
        any_store.set("sequence_20240305", "4")
        any_store.set("sequence_20240305", "5")
        assert any_store.get("sequence_20240305") == "5"

    def test_increment_starts_at_one(self, any_store):
        assert any_store.increment("sequence_20240305") == 1
        assert any_store.increment("sequence_20240305") == 2
        assert any_store.get("sequence_20240305") == "2"

    def test_delete(self, any_store):
        any_store.set("sequence_20240305", "1")

        assert any_store.delete("sequence_20240305") is True
        assert any_store.delete("sequence_20240305") is False
        assert any_store.get("sequence_20240305") is None

    def test_keys_by_prefix(self, any_store):
        any_store.set("sequence_20240304", "1")
        any_store.set("sequence_20240305", "1")
        any_store.set("settings", "x")

        assert sorted(any_store.keys("sequence_")) == ["sequence_20240304", "sequence_20240305"]
        assert len(any_store.keys()) == 3

    def test_delete_prefix(self, any_store):
        any_store.set("sequence_20240304", "1")
        any_store.set("sequence_20240305", "1")
        any_store.set("settings", "x")

        assert any_store.delete_prefix("sequence_") == 2
        assert any_store.keys() == ["settings"]


def test_sql_prefix_treats_underscore_literally(sql_store):
    sql_store.set("sequenceX20240305", "1")
    sql_store.set("sequence_20240305", "1")
    assert sql_store.keys("sequence_") == ["sequence_20240305"]


def test_sql_counters_survive_new_store_instance(sql_store):
    sql_store.increment("sequence_20240305")
    reopened = SqlCounterStore(sql_store.session_factory)
    assert reopened.increment("sequence_20240305") == 2
