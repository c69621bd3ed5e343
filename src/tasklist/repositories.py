from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Iterable, List, Optional, Tuple

from .models import TaskEntity
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# allowed: created_at, -created_at, updated_at, -updated_at
DEFAULT_ORDER = "-created_at"
_ORDER_FIELDS = {"created_at", "updated_at"}


def parse_order(order_by: Optional[str]) -> Tuple[str, bool]:
    """
    Split an order key like '-created_at' into (field, descending).
    Unknown fields fall back to created_at.
    """
    key = order_by.strip().lower() if order_by else DEFAULT_ORDER
    descending = key.startswith("-")
    field = key[1:] if descending else key
    if field not in _ORDER_FIELDS:
        field = "created_at"
    return field, descending


# PUBLIC_INTERFACE
class TaskStore(ABC):
    """
    Abstract contract for durable task collections.

    Reads hand out copies; callers persist in-place mutations with save().
    A read that follows a write observes the write.
    """

    @abstractmethod
    def insert(self, task: TaskEntity) -> None:
        """Add a new task."""

    @abstractmethod
    def save(self, task: TaskEntity) -> bool:
        """Persist the current field values of an existing task. Return False if unknown."""

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        """Remove a task by id. Return True if it existed."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def all(self, order_by: str = DEFAULT_ORDER) -> List[TaskEntity]:
        """Return every task ordered by created_at/updated_at (asc, or desc with '-')."""

    def delete_many(self, task_ids: Iterable[str]) -> int:
        """
        Remove each task independently and return how many were removed.
        Not atomic: an exception part-way leaves earlier deletions applied.
        """
        removed = 0
        for task_id in task_ids:
            if self.delete(task_id):
                removed += 1
        return removed

    def count(self) -> int:
        return len(self.all())


class InMemoryTaskStore(TaskStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TaskEntity] = {}

    def insert(self, task: TaskEntity) -> None:
        with self._lock:
            self._items[task["id"]] = task.copy()

    def save(self, task: TaskEntity) -> bool:
        with self._lock:
            if task["id"] not in self._items:
                return False
            self._items[task["id"]] = task.copy()
            return True

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._items.pop(task_id, None) is not None

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def all(self, order_by: str = DEFAULT_ORDER) -> List[TaskEntity]:
        field, descending = parse_order(order_by)
        with self._lock:
            items = sorted(self._items.values(), key=lambda t: t[field], reverse=descending)
            # Return copies to avoid external mutation
            return [t.copy() for t in items]

    def count(self) -> int:
        with self._lock:
            return len(self._items)


# PUBLIC_INTERFACE
class TaskRepository:
    """
    Pass-through facade over a TaskStore. Performs no validation; callers
    (the view model) are responsible for only handing it valid tasks.
    """

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    @property
    def store(self) -> TaskStore:
        return self._store

    def insert(self, task: TaskEntity) -> None:
        self._store.insert(task)

    def save(self, task: TaskEntity) -> bool:
        return self._store.save(task)

    def delete(self, task: TaskEntity) -> bool:
        return self._store.delete(task["id"])

    def delete_many(self, tasks: Iterable[TaskEntity]) -> int:
        return self._store.delete_many(t["id"] for t in tasks)

    def get(self, task_id: str) -> Optional[TaskEntity]:
        return self._store.get(task_id)

    def all(self, order_by: str = DEFAULT_ORDER) -> List[TaskEntity]:
        return self._store.all(order_by)


# PUBLIC_INTERFACE
def get_store(settings: Optional[Settings] = None) -> TaskStore:
    """
    Factory to return the configured store based on settings.
    - memory: InMemoryTaskStore
    - sqlite: SQLiteTaskStore
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteTaskStore

        logger.info("Using SQLite task store at %s", settings.sqlite_db_path)
        return SQLiteTaskStore(settings.sqlite_db_path)
    logger.info("Using in-memory task store")
    return InMemoryTaskStore()
