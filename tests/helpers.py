from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from tasklist.feedback import ImpactStyle
from tasklist.models import TaskEntity
from tasklist.tasks import create_task

BASE = datetime(2025, 1, 1, 9, 0, 0)


class StepClock:
    """datetime clock that moves forward by `step` on every call."""

    def __init__(self, start: datetime = BASE, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class FrozenClock:
    def __init__(self, value: datetime = BASE) -> None:
        self.value = value

    def __call__(self) -> datetime:
        return self.value


class FakeMonotonic:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class RecordingFeedback:
    def __init__(self) -> None:
        self.events: List[str] = []

    def success(self) -> None:
        self.events.append("success")

    def impact(self, style: ImpactStyle) -> None:
        self.events.append(f"impact:{style.value}")


def make_task(
    title: str,
    notes: Optional[str] = None,
    is_done: bool = False,
    created_at: datetime = BASE,
) -> TaskEntity:
    task = create_task(title, notes, is_done, created_at=created_at)
    assert task is not None
    return task


def make_tasks(count: int, start: datetime = BASE) -> List[TaskEntity]:
    """Task 1..count, each one minute newer than the previous."""
    return [make_task(f"Task {i}", created_at=start + timedelta(minutes=i)) for i in range(1, count + 1)]
