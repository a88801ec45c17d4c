from datetime import date

import pytest

from nebula_planner.db import init_db
from nebula_planner.ledger import Ledger
from nebula_planner.repository import SqliteRepository


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_planner.db")
    return db_path


@pytest.fixture
def ledger(tmp_db):
    """A persisted ledger for 'student@example.com' with today pinned to Wed 2024-01-10."""
    init_db(tmp_db)
    return Ledger(SqliteRepository(tmp_db, "student@example.com"), clock=lambda: date(2024, 1, 10))
