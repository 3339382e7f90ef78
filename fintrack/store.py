"""SQLite-backed per-user collections of expenses and categories.

Every row carries the owning ``user_id``; a store handle only ever sees its
own user's rows.  Writes publish a fresh :class:`fintrack.live.Snapshot` to
the collection's channel so open subscriptions stay current.
"""

from __future__ import annotations

import logging
import numbers
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .config import DB_PATH
from .errors import StoreError
from .live import Listener, Snapshot, Subscription, publish_channel, subscribe_channel
from .models import CUSTOM_CATEGORY_ICON, DEFAULT_CATEGORY_NAMES, iso_date_string
from .validation import Clock, validate_expense

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS users (
    uid TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    salt TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    amount REAL NOT NULL,
    category TEXT,
    date TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    icon TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_expenses_user ON expenses (user_id, created_at);
CREATE INDEX IF NOT EXISTS ix_categories_user ON categories (user_id, created_at);
"""


def _db_path(db_path: Optional[Path] = None) -> Path:
    return Path(db_path) if db_path is not None else Path(DB_PATH)


@contextmanager
def connect(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    path = _db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[Path] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='microseconds')


def new_id() -> str:
    return uuid.uuid4().hex


def _parse_stored_date(value: Optional[str]) -> date:
    return datetime.strptime(value or '', '%Y-%m-%d').date()


class _UserCollection:
    """Shared CRUD and subscription plumbing for one per-user table."""

    table = ''
    label = ''
    fields: Tuple[str, ...] = ()

    def __init__(self, user_id: Optional[str], db_path: Optional[Path] = None):
        self.user_id = user_id
        self.db_path = _db_path(db_path)

    @property
    def channel_key(self) -> Tuple[str, str, Optional[str]]:
        return (str(self.db_path), self.table, self.user_id)

    def _require(self, *values: Any) -> None:
        if not self.user_id or not all(values):
            raise StoreError("Missing required parameters")

    def _prepare(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {name: data[name] for name in self.fields if name in data}

    def _validate_new(self, values: Dict[str, Any]) -> Optional[str]:
        return None

    def _validate_merged(self, values: Dict[str, Any]) -> Optional[str]:
        return None

    # -- reads ------------------------------------------------------------

    def list(self) -> List[Dict[str, Any]]:
        """All of this user's rows, newest first."""
        self._require()
        columns = ', '.join(('id',) + self.fields + ('created_at', 'updated_at'))
        sql = (
            f"SELECT {columns} FROM {self.table} WHERE user_id = ? "
            "ORDER BY created_at DESC, id DESC"
        )
        try:
            with connect(self.db_path) as conn:
                rows = conn.execute(sql, (self.user_id,)).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error reading %s for %s: %s", self.table, self.user_id, exc)
            raise StoreError(f"Failed to load {self.table}: {exc}") from exc
        return [dict(row) for row in rows]

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        self._require(record_id)
        for row in self.list():
            if row['id'] == record_id:
                return row
        return None

    def snapshot(self) -> Snapshot:
        try:
            return Snapshot(self.list())
        except StoreError as exc:
            return Snapshot([], exc)

    # -- writes -----------------------------------------------------------

    def add(self, data: Mapping[str, Any]) -> str:
        """Insert a new row and return its generated id."""
        self._require()
        values = self._prepare(data)
        problem = self._validate_new(values)
        if problem:
            raise StoreError(f"Failed to add {self.label}: {problem}")

        record_id = new_id()
        now = utc_timestamp()
        row = dict(values, id=record_id, user_id=self.user_id, created_at=now, updated_at=now)
        columns = ', '.join(row)
        placeholders = ', '.join('?' for _ in row)
        try:
            with connect(self.db_path) as conn:
                conn.execute(
                    f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})",
                    list(row.values()),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error("Error adding %s: %s", self.label, exc)
            raise StoreError(f"Failed to add {self.label}: {exc}") from exc

        logger.debug("Added %s %s for %s", self.label, record_id, self.user_id)
        self._publish()
        return record_id

    def update(self, record_id: str, partial: Mapping[str, Any]) -> None:
        """Apply ``partial`` to an existing row and refresh ``updated_at``."""
        self._require(record_id)
        changes = self._prepare(partial)
        current = self.get(record_id)
        if current is None:
            raise StoreError(f"Failed to update {self.label}: {self.label.capitalize()} not found")
        problem = self._validate_merged(dict(current, **changes))
        if problem:
            raise StoreError(f"Failed to update {self.label}: {problem}")

        changes['updated_at'] = utc_timestamp()
        assignments = ', '.join(f"{name} = ?" for name in changes)
        try:
            with connect(self.db_path) as conn:
                conn.execute(
                    f"UPDATE {self.table} SET {assignments} WHERE id = ? AND user_id = ?",
                    list(changes.values()) + [record_id, self.user_id],
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error("Error updating %s %s: %s", self.label, record_id, exc)
            raise StoreError(f"Failed to update {self.label}: {exc}") from exc

        logger.debug("Updated %s %s", self.label, record_id)
        self._publish()

    def delete(self, record_id: str) -> None:
        """Remove a row; deleting an id that does not exist is a no-op."""
        self._require(record_id)
        try:
            with connect(self.db_path) as conn:
                cursor = conn.execute(
                    f"DELETE FROM {self.table} WHERE id = ? AND user_id = ?",
                    (record_id, self.user_id),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error("Error deleting %s %s: %s", self.label, record_id, exc)
            raise StoreError(f"Failed to delete {self.label}: {exc}") from exc

        if cursor.rowcount == 0:
            logger.debug("No %s %s to delete", self.label, record_id)
        self._publish()

    # -- live updates -----------------------------------------------------

    def subscribe(self, listener: Listener) -> Subscription:
        """Deliver the current snapshot now and a fresh one after every write."""
        if not callable(listener):
            raise StoreError(f"Failed to subscribe to {self.table}: Invalid parameters for subscription")
        self._require()
        return subscribe_channel(self.channel_key, listener, initial=self.snapshot())

    def _publish(self) -> None:
        snapshot = self.snapshot()
        if snapshot.error is not None:
            logger.warning("Publishing empty %s snapshot after read error: %s", self.table, snapshot.error)
        publish_channel(self.channel_key, snapshot)


class ExpenseStore(_UserCollection):
    """The signed-in user's expenses."""

    table = 'expenses'
    label = 'expense'
    fields = ('title', 'amount', 'category', 'date')

    def __init__(self, user_id: Optional[str], db_path: Optional[Path] = None, clock: Optional[Clock] = None):
        super().__init__(user_id, db_path)
        self.clock = clock or date.today

    def _prepare(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        values = super()._prepare(data)
        if isinstance(values.get('title'), str):
            values['title'] = values['title'].strip()
        amount = values.get('amount')
        if isinstance(amount, numbers.Real) and not isinstance(amount, bool):
            values['amount'] = float(amount)
        if 'date' in values:
            values['date'] = iso_date_string(values['date'])
        return values

    def _validate_new(self, values: Dict[str, Any]) -> Optional[str]:
        if not values.get('category') or not values.get('date'):
            return "Missing required expense data"
        problem = self._validate_merged(values)
        if problem:
            return problem
        if _parse_stored_date(values['date']) > self.clock():
            return "Date cannot be in the future"
        return None

    def _validate_merged(self, values: Dict[str, Any]) -> Optional[str]:
        result = validate_expense(values)
        if not result.is_valid:
            return result.error
        try:
            _parse_stored_date(values.get('date'))
        except (TypeError, ValueError):
            return f"Invalid date '{values.get('date')}', expected YYYY-MM-DD"
        return None


class CategoryStore(_UserCollection):
    """The signed-in user's custom categories."""

    table = 'categories'
    label = 'category'
    fields = ('name', 'icon')

    def _prepare(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        values = super()._prepare(data)
        if isinstance(values.get('name'), str):
            values['name'] = values['name'].strip()
        return values

    def _validate_new(self, values: Dict[str, Any]) -> Optional[str]:
        name = values.get('name')
        if not name:
            return "Missing required category data"
        if name in DEFAULT_CATEGORY_NAMES or any(row['name'] == name for row in self.list()):
            return f"Category '{name}' already exists"
        values.setdefault('icon', CUSTOM_CATEGORY_ICON)
        return None

    def _validate_merged(self, values: Dict[str, Any]) -> Optional[str]:
        if not values.get('name'):
            return "Missing required category data"
        return None
