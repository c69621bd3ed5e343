from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from .models import TaskEntity

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_TICK = timedelta(microseconds=1)


def _normalize_title(title: Optional[str]) -> Optional[str]:
    """Return the trimmed title, or None when nothing is left after trimming."""
    if title is None:
        return None
    s = title.strip()
    return s or None


def _normalize_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    s = notes.strip()
    return s or None


def _next_stamp(previous: datetime, clock: Clock) -> datetime:
    # updated_at must move forward even if the clock reads the same value twice
    now = clock()
    return now if now > previous else previous + _TICK


# PUBLIC_INTERFACE
def create_task(
    title: Optional[str],
    notes: Optional[str] = None,
    is_done: bool = False,
    *,
    clock: Clock = datetime.now,
    created_at: Optional[datetime] = None,
) -> Optional[TaskEntity]:
    """
    Build a new task from user input.

    The title is trimmed and must not be empty; otherwise the request is
    rejected and None is returned (no exception, nothing is created).
    Notes that are empty after trimming are stored as None.

    Args:
        title: Raw title as typed by the user.
        notes: Optional raw notes.
        is_done: Initial completion flag.
        clock: Source of the current time.
        created_at: Explicit creation time (used for seeding); defaults to clock().

    Returns:
        The new TaskEntity, or None when the title is rejected.
    """
    clean_title = _normalize_title(title)
    if clean_title is None:
        logger.debug("Rejected task creation: empty title")
        return None
    stamp = created_at if created_at is not None else clock()
    return {
        "id": uuid.uuid4().hex,
        "title": clean_title,
        "notes": _normalize_notes(notes),
        "is_done": bool(is_done),
        "created_at": stamp,
        "updated_at": stamp,
    }


# PUBLIC_INTERFACE
def update_task(
    task: TaskEntity,
    title: Optional[str],
    notes: Optional[str],
    is_done: bool,
    *,
    clock: Clock = datetime.now,
) -> bool:
    """
    Overwrite title, notes and is_done of a task in place.

    Returns False and leaves the task untouched when the trimmed title is empty.
    """
    clean_title = _normalize_title(title)
    if clean_title is None:
        logger.debug("Rejected update of task %s: empty title", task["id"])
        return False
    task["title"] = clean_title
    task["notes"] = _normalize_notes(notes)
    task["is_done"] = bool(is_done)
    task["updated_at"] = _next_stamp(task["updated_at"], clock)
    return True


# PUBLIC_INTERFACE
def toggle_done(task: TaskEntity, *, clock: Clock = datetime.now) -> bool:
    """Flip the completion flag, refresh updated_at, and return the new flag."""
    task["is_done"] = not task["is_done"]
    task["updated_at"] = _next_stamp(task["updated_at"], clock)
    return task["is_done"]
