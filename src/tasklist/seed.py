from __future__ import annotations

import logging
from datetime import datetime, timedelta

from .preferences import SEEDED_KEY, PreferenceStore
from .repositories import TaskRepository
from .tasks import Clock, create_task

logger = logging.getLogger(__name__)

SAMPLE_COUNT = 100


# PUBLIC_INTERFACE
def seed_sample_tasks(
    repository: TaskRepository,
    preferences: PreferenceStore,
    count: int = SAMPLE_COUNT,
    clock: Clock = datetime.now,
) -> int:
    """
    Insert demo tasks on first launch.

    Runs only while the seeded flag is unset and the store is empty. Task i
    is titled "Task i" and created i hours before now. Returns the number of
    tasks inserted.
    """
    if preferences.get(SEEDED_KEY, False) or repository.store.count() > 0:
        return 0
    now = clock()
    inserted = 0
    for i in range(1, count + 1):
        task = create_task(f"Task {i}", created_at=now - timedelta(hours=i))
        if task is None:
            raise ValueError(f"sample title for task {i} was rejected")
        repository.insert(task)
        inserted += 1
    preferences.set(SEEDED_KEY, True)
    logger.info("Seeded %d sample tasks", inserted)
    return inserted
