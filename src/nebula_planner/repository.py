"""Per-user key/value persistence for the planner ledger."""
import json
import logging
from datetime import datetime

from nebula_planner.db import get_connection

GUEST_USER = "guest"
ACTIVE_USER_KEY = "active-user-key"

logger = logging.getLogger(__name__)


def read_value(db_path: str, key: str, default=None):
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    conn.close()
    if row is None:
        return default
    try:
        return json.loads(row["value"])
    except json.JSONDecodeError:
        logger.warning("Discarding unreadable value stored under %r", key)
        return default


def write_value(db_path: str, key: str, value) -> None:
    payload = json.dumps(value)
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
        (key, payload, datetime.now().isoformat()),
    )
    conn.commit()
    conn.close()


def delete_value(db_path: str, key: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
    conn.commit()
    conn.close()


def get_active_user(db_path: str) -> str | None:
    return read_value(db_path, ACTIVE_USER_KEY)


def set_active_user(db_path: str, user: str | None) -> None:
    if user is None:
        delete_value(db_path, ACTIVE_USER_KEY)
    else:
        write_value(db_path, ACTIVE_USER_KEY, user)


class SqliteRepository:
    """Loads and saves JSON values under keys namespaced by user."""

    persist_enabled = True

    def __init__(self, db_path: str, user: str):
        self.db_path = db_path
        self.user = user

    def key_for(self, name: str) -> str:
        return f"{name}-{self.user}"

    def load(self, name: str, initial):
        return read_value(self.db_path, self.key_for(name), initial)

    def save(self, name: str, value) -> None:
        write_value(self.db_path, self.key_for(name), value)


class MemoryRepository:
    """Guest sessions: nothing is read back and every save is dropped."""

    persist_enabled = False

    def __init__(self, user: str = GUEST_USER):
        self.user = user

    def load(self, name: str, initial):
        return initial

    def save(self, name: str, value) -> None:
        pass


def open_repository(db_path: str, user: str | None):
    if not user or user == GUEST_USER:
        return MemoryRepository()
    return SqliteRepository(db_path, user)
