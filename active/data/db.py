"""
Active — SQLite store.

One repository per entity type, all bound to a single connection through a
Transaction. A Transaction is only ever handed out by a context manager that
closes its connection on exit, so anything not saved is rolled back.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import AbstractContextManager, contextmanager
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, TypeVar

from active.data.models import (
    Day,
    DaySequence,
    FireTime,
    Habit,
    HabitDay,
    Notification,
    User,
)
from active.ports.store_port import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BUSY_TIMEOUT_SECONDS = 10.0

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    created_at  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS habits (
    id          TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name        TEXT NOT NULL,
    color       INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS days (
    id    TEXT PRIMARY KEY,
    date  TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS day_sequences (
    id          TEXT PRIMARY KEY,
    habit_id    TEXT NOT NULL REFERENCES habits(id) ON DELETE CASCADE,
    from_date   TEXT NOT NULL,
    to_date     TEXT NOT NULL,
    created_at  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS habit_days (
    id            TEXT PRIMARY KEY,
    habit_id      TEXT NOT NULL REFERENCES habits(id) ON DELETE CASCADE,
    sequence_id   TEXT NOT NULL REFERENCES day_sequences(id) ON DELETE CASCADE,
    day_id        TEXT NOT NULL REFERENCES days(id) ON DELETE CASCADE,
    was_executed  INTEGER,
    updated_at    TEXT
);

CREATE TABLE IF NOT EXISTS notifications (
    id                    TEXT PRIMARY KEY,
    habit_id              TEXT NOT NULL REFERENCES habits(id) ON DELETE CASCADE,
    fire_date             TEXT NOT NULL,
    user_notification_id  TEXT NOT NULL,
    was_scheduled         INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS fire_times (
    id          TEXT PRIMARY KEY,
    habit_id    TEXT REFERENCES habits(id) ON DELETE CASCADE,
    created_at  TEXT NOT NULL,
    hour        INTEGER NOT NULL CHECK (hour BETWEEN 0 AND 23),
    minute      INTEGER NOT NULL CHECK (minute BETWEEN 0 AND 59)
);
"""


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class _Repository:
    """Shared fetch/count/delete plumbing. Subclasses set ``table``."""

    table: str = ""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _execute(self, query: str, params: tuple | list = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(query, params)
        except sqlite3.Error as exc:
            raise StoreError(f"{self.table}: {exc}") from exc

    def count(self) -> int:
        """Return the number of records of this type."""
        row = self._execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()
        return int(row[0])

    def exists(self) -> bool:
        row = self._execute(f"SELECT 1 FROM {self.table} LIMIT 1").fetchone()
        return row is not None

    def delete(self, record_id: str) -> bool:
        """Mark a record for deletion. Returns False if it didn't exist."""
        cursor = self._execute(f"DELETE FROM {self.table} WHERE id = ?", (record_id,))
        return cursor.rowcount > 0


class UserRepository(_Repository):
    table = "users"

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(id=row["id"], name=row["name"], created_at=row["created_at"])

    def insert(self, user: User) -> User:
        if not user.created_at:
            user.created_at = datetime.now().isoformat()
        self._execute(
            "INSERT INTO users (id, name, created_at) VALUES (?, ?, ?)",
            (user.id, user.name, user.created_at),
        )
        logger.debug("User inserted: %s '%s'", user.id, user.name)
        return user

    def fetch_all(self) -> list[User]:
        rows = self._execute("SELECT * FROM users ORDER BY created_at").fetchall()
        return [self._row_to_user(r) for r in rows]


class HabitRepository(_Repository):
    table = "habits"

    @staticmethod
    def _row_to_habit(row: sqlite3.Row) -> Habit:
        return Habit(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            color=row["color"],
            created_at=row["created_at"],
        )

    def insert(self, habit: Habit) -> Habit:
        if not habit.created_at:
            habit.created_at = datetime.now().isoformat()
        self._execute(
            """
            INSERT INTO habits (id, user_id, name, color, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (habit.id, habit.user_id, habit.name, habit.color, habit.created_at),
        )
        logger.debug("Habit inserted: %s '%s'", habit.id, habit.name)
        return habit

    def fetch(self, habit_id: str) -> Habit | None:
        row = self._execute("SELECT * FROM habits WHERE id = ?", (habit_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_habit(row)

    def fetch_all(self, user_id: str | None = None) -> list[Habit]:
        query = "SELECT * FROM habits"
        params: list = []
        if user_id is not None:
            query += " WHERE user_id = ?"
            params.append(user_id)
        query += " ORDER BY created_at"
        rows = self._execute(query, params).fetchall()
        return [self._row_to_habit(r) for r in rows]


class DayRepository(_Repository):
    table = "days"

    @staticmethod
    def _row_to_day(row: sqlite3.Row) -> Day:
        return Day(id=row["id"], date=row["date"])

    def insert(self, day: Day) -> Day:
        self._execute("INSERT INTO days (id, date) VALUES (?, ?)", (day.id, day.date))
        return day

    def fetch_by_date(self, day_date: str) -> Day | None:
        row = self._execute("SELECT * FROM days WHERE date = ?", (day_date,)).fetchone()
        if row is None:
            return None
        return self._row_to_day(row)

    def fetch_all(self) -> list[Day]:
        rows = self._execute("SELECT * FROM days ORDER BY date").fetchall()
        return [self._row_to_day(r) for r in rows]


class HabitDayRepository(_Repository):
    table = "habit_days"

    _SELECT = """
        SELECT hd.*, d.date AS date
        FROM habit_days hd
        JOIN days d ON d.id = hd.day_id
    """

    @staticmethod
    def _row_to_habit_day(row: sqlite3.Row) -> HabitDay:
        was_executed = row["was_executed"]
        return HabitDay(
            id=row["id"],
            habit_id=row["habit_id"],
            sequence_id=row["sequence_id"],
            day_id=row["day_id"],
            date=row["date"],
            was_executed=None if was_executed is None else bool(was_executed),
            updated_at=row["updated_at"],
        )

    def insert(self, habit_day: HabitDay) -> HabitDay:
        was_executed = habit_day.was_executed
        self._execute(
            """
            INSERT INTO habit_days
                (id, habit_id, sequence_id, day_id, was_executed, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                habit_day.id, habit_day.habit_id, habit_day.sequence_id,
                habit_day.day_id,
                None if was_executed is None else int(was_executed),
                habit_day.updated_at,
            ),
        )
        return habit_day

    def fetch(self, habit_day_id: str) -> HabitDay | None:
        row = self._execute(self._SELECT + " WHERE hd.id = ?", (habit_day_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_habit_day(row)

    def fetch_for_sequence(self, sequence_id: str) -> list[HabitDay]:
        rows = self._execute(
            self._SELECT + " WHERE hd.sequence_id = ? ORDER BY d.date",
            (sequence_id,),
        ).fetchall()
        return [self._row_to_habit_day(r) for r in rows]

    def set_outcome(self, habit_day_id: str, was_executed: bool | None) -> HabitDay:
        """Record whether the habit was executed on that day."""
        habit_day = self.fetch(habit_day_id)
        if habit_day is None:
            raise ValueError(f"HabitDay {habit_day_id} not found")

        updated_at = datetime.now().isoformat()
        self._execute(
            "UPDATE habit_days SET was_executed = ?, updated_at = ? WHERE id = ?",
            (None if was_executed is None else int(was_executed), updated_at, habit_day_id),
        )
        return replace(habit_day, was_executed=was_executed, updated_at=updated_at)


class DaySequenceRepository(_Repository):
    table = "day_sequences"

    def __init__(self, conn: sqlite3.Connection, habit_days: HabitDayRepository) -> None:
        super().__init__(conn)
        self._habit_days = habit_days

    def _row_to_sequence(self, row: sqlite3.Row, with_days: bool) -> DaySequence:
        sequence = DaySequence(
            id=row["id"],
            habit_id=row["habit_id"],
            from_date=row["from_date"],
            to_date=row["to_date"],
            created_at=row["created_at"],
        )
        if with_days:
            sequence.days = set(self._habit_days.fetch_for_sequence(sequence.id))
        return sequence

    def insert(self, sequence: DaySequence) -> DaySequence:
        if not sequence.created_at:
            sequence.created_at = datetime.now().isoformat()
        self._execute(
            """
            INSERT INTO day_sequences (id, habit_id, from_date, to_date, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                sequence.id, sequence.habit_id, sequence.from_date,
                sequence.to_date, sequence.created_at,
            ),
        )
        return sequence

    def fetch(self, sequence_id: str, with_days: bool = True) -> DaySequence | None:
        """Fetch a sequence, with its day collection loaded unless told otherwise."""
        row = self._execute(
            "SELECT * FROM day_sequences WHERE id = ?", (sequence_id,)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_sequence(row, with_days)

    def fetch_for_habit(self, habit_id: str, with_days: bool = True) -> list[DaySequence]:
        rows = self._execute(
            "SELECT * FROM day_sequences WHERE habit_id = ? ORDER BY from_date",
            (habit_id,),
        ).fetchall()
        return [self._row_to_sequence(r, with_days) for r in rows]


class NotificationRepository(_Repository):
    table = "notifications"

    @staticmethod
    def _row_to_notification(row: sqlite3.Row) -> Notification:
        return Notification(
            id=row["id"],
            habit_id=row["habit_id"],
            fire_date=row["fire_date"],
            user_notification_id=row["user_notification_id"],
            was_scheduled=bool(row["was_scheduled"]),
        )

    def insert(self, notification: Notification) -> Notification:
        self._execute(
            """
            INSERT INTO notifications
                (id, habit_id, fire_date, user_notification_id, was_scheduled)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                notification.id, notification.habit_id, notification.fire_date,
                notification.user_notification_id, int(notification.was_scheduled),
            ),
        )
        return notification

    def fetch_for_habit(self, habit_id: str) -> list[Notification]:
        rows = self._execute(
            "SELECT * FROM notifications WHERE habit_id = ? ORDER BY fire_date",
            (habit_id,),
        ).fetchall()
        return [self._row_to_notification(r) for r in rows]


class FireTimeRepository(_Repository):
    table = "fire_times"

    @staticmethod
    def _row_to_fire_time(row: sqlite3.Row) -> FireTime:
        return FireTime(
            id=row["id"],
            created_at=row["created_at"],
            hour=row["hour"],
            minute=row["minute"],
            habit_id=row["habit_id"],
        )

    def insert(self, fire_time: FireTime) -> FireTime:
        self._execute(
            """
            INSERT INTO fire_times (id, habit_id, created_at, hour, minute)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                fire_time.id, fire_time.habit_id, fire_time.created_at,
                fire_time.hour, fire_time.minute,
            ),
        )
        return fire_time

    def fetch_all(self, habit_id: str | None = None) -> list[FireTime]:
        query = "SELECT * FROM fire_times"
        params: list = []
        if habit_id is not None:
            query += " WHERE habit_id = ?"
            params.append(habit_id)
        query += " ORDER BY hour, minute"
        rows = self._execute(query, params).fetchall()
        return [self._row_to_fire_time(r) for r in rows]


# ---------------------------------------------------------------------------
# Transaction + store
# ---------------------------------------------------------------------------


class Transaction:
    """A scoped handle for reads and writes, committed with save().

    Only obtain one through SQLiteStore.view_context() or
    SQLiteStore.background_context(); those close the connection on exit.
    """

    def __init__(self, conn: sqlite3.Connection, name: str = "view") -> None:
        self._conn = conn
        self.name = name
        self.users = UserRepository(conn)
        self.habits = HabitRepository(conn)
        self.days = DayRepository(conn)
        self.habit_days = HabitDayRepository(conn)
        self.day_sequences = DaySequenceRepository(conn, self.habit_days)
        self.notifications = NotificationRepository(conn)
        self.fire_times = FireTimeRepository(conn)

    def save(self) -> None:
        """Commit everything done through this transaction."""
        try:
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to save {self.name} context: {exc}") from exc
        logger.debug("%s context saved", self.name)


class SQLiteStore:
    """SQLite-backed implementation of PersistentStore.

    Every context gets its own connection, so the background context used
    by a seed and the view context used for reads never share state until
    one of them is saved.
    """

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from active.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @property
    def db_path(self) -> str:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=_BUSY_TIMEOUT_SECONDS)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_db(self) -> None:
        """Create all tables if they don't exist."""
        conn = self._connect()
        try:
            conn.executescript(_SCHEMA)
        finally:
            conn.close()
        logger.debug("Active schema initialized at %s", self._db_path)

    @contextmanager
    def _context(self, name: str) -> Iterator[Transaction]:
        conn = self._connect()
        try:
            yield Transaction(conn, name=name)
        finally:
            # Unsaved changes are discarded here.
            conn.close()

    def view_context(self) -> AbstractContextManager[Transaction]:
        """Main context, used for reads and for erasing the seed."""
        return self._context("view")

    def background_context(self) -> AbstractContextManager[Transaction]:
        return self._context("background")

    async def perform_background_task(self, work: Callable[[Transaction], T]) -> T:
        """Run ``work`` with a fresh background context on a worker thread."""

        def _run() -> T:
            with self.background_context() as transaction:
                return work(transaction)

        return await asyncio.to_thread(_run)


class UserStorage:
    """Looks up the app's single user."""

    def get_user(self, transaction: Transaction) -> User | None:
        """Return the current user, or None if none was created yet."""
        users = transaction.users.fetch_all()
        if not users:
            return None
        if len(users) > 1:
            logger.warning("Found %d users, expected at most one", len(users))
        return users[0]
