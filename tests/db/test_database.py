"""
Tests for the database handle and transactional scope.

Covers:
- Database.from_url builds an engine and session factory
- session_scope commits on success and rolls back on error
- timestamps come back timezone-aware in UTC
"""

from datetime import datetime, timedelta, timezone

import pytest

from inventory_kernel.db.engine import Database, create_tables, session_scope
from inventory_kernel.models.inventory import Inventory

from tests.conftest import START, TEST_ACTOR_ID


@pytest.fixture
def database():
    db = Database.from_url("sqlite://")
    create_tables(db.engine)
    yield db
    db.dispose()


def _new_inventory(store_id: int) -> Inventory:
    return Inventory(
        store_id=store_id,
        company_id=1,
        started_at=START,
        min_counts=1,
        active=True,
        created_by_id=TEST_ACTOR_ID,
    )


class TestSessionScope:

    def test_commits_on_success(self, database):
        with session_scope(database.session_factory) as session:
            session.add(_new_inventory(1))

        with database.session() as session:
            assert session.query(Inventory).count() == 1

    def test_rolls_back_on_error(self, database, captured_logs):
        with pytest.raises(RuntimeError):
            with session_scope(database.session_factory) as session:
                session.add(_new_inventory(2))
                session.flush()
                raise RuntimeError("boom")

        with database.session() as session:
            assert session.query(Inventory).count() == 0
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())

    def test_objects_usable_after_commit(self, database):
        with session_scope(database.session_factory) as session:
            inventory = _new_inventory(3)
            session.add(inventory)

        assert inventory.store_id == 3
        assert inventory.id is not None


class TestUTCDateTime:

    def test_reloaded_timestamps_are_utc(self, database):
        with session_scope(database.session_factory) as session:
            inventory = _new_inventory(4)
            session.add(inventory)
        inventory_id = inventory.id

        with database.session() as session:
            loaded = session.get(Inventory, inventory_id)

            assert loaded.started_at == START
            assert loaded.started_at.tzinfo == timezone.utc
            assert loaded.created_at.tzinfo == timezone.utc
            assert loaded.closed_at is None

    def test_offset_converted_on_store(self, database):
        brasilia = timezone(timedelta(hours=-3))
        with session_scope(database.session_factory) as session:
            inventory = _new_inventory(5)
            inventory.started_at = datetime(2024, 1, 1, 5, 0, tzinfo=brasilia)
            session.add(inventory)
        inventory_id = inventory.id

        with database.session() as session:
            loaded = session.get(Inventory, inventory_id)

            assert loaded.started_at == datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
            assert loaded.started_at.utcoffset() == timedelta(0)
