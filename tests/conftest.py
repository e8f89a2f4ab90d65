"""Shared fixtures for all test modules."""
import sqlite3

import pytest

from kinship.database import create_database, store_members
from kinship.engine import RelationshipEngine
from kinship.models import Member


@pytest.fixture
def conn():
    """In-memory database with the full schema."""
    conn = sqlite3.connect(":memory:")
    create_database(conn)
    yield conn
    conn.close()


@pytest.fixture
def engine(conn):
    return RelationshipEngine(conn)


@pytest.fixture
def seed(conn):
    """Insert members given as (id, birth_date[, gender]) tuples.

    Usage::

        seed(("john", "1990-01-01", "male"), ("mary", "1992-05-03"))
    """
    def _seed(*rows):
        members = []
        for row in rows:
            member_id, birth_date, *rest = row
            members.append(
                Member(
                    id=member_id,
                    first_name=member_id.capitalize(),
                    last_name="Doe",
                    birth_date=birth_date,
                    gender=rest[0] if rest else None,
                )
            )
        store_members(conn, members)
        return members
    return _seed


@pytest.fixture
def edges(engine):
    """Callable returning every stored edge as a (from, to, type) tuple."""
    def _edges():
        return {
            (e.from_member_id, e.to_member_id, e.relation_type.value)
            for e in engine.store.all()
        }
    return _edges
