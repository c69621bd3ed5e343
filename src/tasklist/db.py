from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, Iterable, List, Optional

from .models import TaskEntity
from .repositories import DEFAULT_ORDER, TaskStore, parse_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    notes: str = "notes"
    is_done: str = "is_done"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()


def _fmt(value: datetime) -> str:
    # fixed-width so TEXT ordering matches chronological ordering
    return value.isoformat(timespec="microseconds")


class SQLiteTaskStore(TaskStore):
    """
    Lightweight SQLite store implementing the TaskStore contract.
    Each call opens its own connection and commits before returning.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()
        logger.info("SQLite task store ready at %s", db_path)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.title} TEXT NOT NULL CHECK (length(trim({_COLS.title})) > 0),
                    {_COLS.notes} TEXT NULL,
                    {_COLS.is_done} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_updated_at ON {_COLS.table}({_COLS.updated_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": str(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "notes": row[_COLS.notes] if row[_COLS.notes] is not None else None,
            "is_done": bool(row[_COLS.is_done]),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
            "updated_at": datetime.fromisoformat(row[_COLS.updated_at]),
        }

    def insert(self, task: TaskEntity) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.title}, {_COLS.notes}, {_COLS.is_done},
                    {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    task["id"],
                    task["title"],
                    task["notes"],
                    1 if task["is_done"] else 0,
                    _fmt(task["created_at"]),
                    _fmt(task["updated_at"]),
                ),
            )

    def save(self, task: TaskEntity) -> bool:
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.title} = ?, {_COLS.notes} = ?, {_COLS.is_done} = ?, {_COLS.updated_at} = ?
                WHERE {_COLS.id} = ?
                """,
                (
                    task["title"],
                    task["notes"],
                    1 if task["is_done"] else 0,
                    _fmt(task["updated_at"]),
                    task["id"],
                ),
            )
            return cur.rowcount > 0

    def delete(self, task_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return cur.rowcount > 0

    def delete_many(self, task_ids: Iterable[str]) -> int:
        # One statement per id; a failure part-way keeps the earlier deletions.
        removed = 0
        with self._conn() as conn:
            for task_id in task_ids:
                cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
                removed += cur.rowcount
                conn.commit()
        return removed

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)).fetchone()
            return self._row_to_entity(row) if row else None

    def all(self, order_by: str = DEFAULT_ORDER) -> List[TaskEntity]:
        field, descending = parse_order(order_by)
        # rowid keeps insertion order for equal timestamps
        order_sql = f"ORDER BY {field} {'DESC' if descending else 'ASC'}, rowid ASC"
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {_COLS.table} {order_sql}").fetchall()
            return [self._row_to_entity(r) for r in rows]

    def count(self) -> int:
        with self._conn() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS cnt FROM {_COLS.table}").fetchone()
            return int(row["cnt"]) if row else 0
