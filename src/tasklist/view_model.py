from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from .feedback import FeedbackSink, ImpactStyle, LoggingFeedback
from .models import TaskEntity
from .repositories import TaskRepository
from .tasks import Clock, create_task, toggle_done, update_task

logger = logging.getLogger(__name__)

REFRESH_DELAY_SECONDS = 0.6


# PUBLIC_INTERFACE
class TaskListViewModel:
    """
    Validates and applies task mutations through the repository.

    Rejected writes (empty title after trimming) are silent no-ops: the
    methods return None/False and nothing reaches the store.
    """

    def __init__(
        self,
        repository: TaskRepository,
        feedback: Optional[FeedbackSink] = None,
        clock: Clock = datetime.now,
        refresh_delay: float = REFRESH_DELAY_SECONDS,
    ) -> None:
        self._repo = repository
        self._feedback = feedback or LoggingFeedback()
        self._clock = clock
        self._refresh_delay = refresh_delay

    @property
    def repository(self) -> TaskRepository:
        return self._repo

    def add_task(self, title: Optional[str], notes: Optional[str] = None, is_done: bool = False) -> Optional[TaskEntity]:
        task = create_task(title, notes, is_done, clock=self._clock)
        if task is None:
            return None
        self._repo.insert(task)
        logger.info("Created task %s", task["id"])
        self._feedback.success()
        return task

    def update_task(self, task: TaskEntity, title: Optional[str], notes: Optional[str], is_done: bool) -> bool:
        if not update_task(task, title, notes, is_done, clock=self._clock):
            return False
        self._repo.save(task)
        logger.info("Updated task %s", task["id"])
        return True

    def toggle_done(self, task: TaskEntity) -> bool:
        """Flip completion, persist it, and return the new value."""
        done = toggle_done(task, clock=self._clock)
        self._repo.save(task)
        logger.info("Task %s marked %s", task["id"], "done" if done else "not done")
        if done:
            self._feedback.success()
        else:
            self._feedback.impact(ImpactStyle.LIGHT)
        return done

    def delete_task(self, task: TaskEntity) -> bool:
        removed = self._repo.delete(task)
        logger.info("Deleted task %s", task["id"])
        self._feedback.impact(ImpactStyle.MEDIUM)
        return removed

    def delete_tasks(self, tasks: Iterable[TaskEntity]) -> int:
        targets = list(tasks)
        removed = self._repo.delete_many(targets)
        logger.info("Deleted %d of %d tasks", removed, len(targets))
        return removed

    def delete_tasks_at(self, offsets: Iterable[int], visible: Sequence[TaskEntity]) -> int:
        """
        Delete the rows at the given offsets of a visible-set snapshot.
        Offsets outside the snapshot raise IndexError before anything is deleted.
        """
        indices = sorted(set(offsets))
        if indices and (indices[0] < 0 or indices[-1] >= len(visible)):
            raise IndexError("offset out of range")
        targets: List[TaskEntity] = [visible[i] for i in indices]
        return self.delete_tasks(targets)

    async def refresh(self) -> None:
        """Pull-to-refresh placeholder; data is local, so this only waits."""
        await asyncio.sleep(self._refresh_delay)
