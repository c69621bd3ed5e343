"""
Visible-set computation and incremental pagination.

compute_visible() is a pure function over a snapshot of tasks; Paginator is
the explicit {idle, loading} state machine that decides how much of the
visible set is currently revealed.
"""
from __future__ import annotations

import enum
import logging
import time
import unicodedata
from threading import RLock
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .models import TaskEntity

logger = logging.getLogger(__name__)

PAGE_SIZE = 15
SETTLE_DELAY_SECONDS = 0.2


# PUBLIC_INTERFACE
class StatusFilter(str, enum.Enum):
    """Completion-status filter for the task list."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


# PUBLIC_INTERFACE
class SortOption(str, enum.Enum):
    """Orderings offered by the task list."""

    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE_AZ = "titleAZ"
    TITLE_ZA = "titleZA"


def _title_key(task: TaskEntity) -> Tuple[str, str]:
    """
    Case-insensitive collation key: base letters first (accents stripped via
    NFKD), then the accented form to order "Eclair" before "Éclair".
    """
    folded = task["title"].casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base, unicodedata.normalize("NFC", folded)


def _matches(task: TaskEntity, needle: str) -> bool:
    if needle in task["title"].casefold():
        return True
    notes = task["notes"]
    return notes is not None and needle in notes.casefold()


def filter_by_status(tasks: Iterable[TaskEntity], status: StatusFilter) -> List[TaskEntity]:
    if status is StatusFilter.ACTIVE:
        return [t for t in tasks if not t["is_done"]]
    if status is StatusFilter.COMPLETED:
        return [t for t in tasks if t["is_done"]]
    return list(tasks)


def filter_by_query(tasks: Iterable[TaskEntity], query: Optional[str]) -> List[TaskEntity]:
    """Keep tasks whose title or notes contain the trimmed query, ignoring case."""
    needle = (query or "").strip().casefold()
    if not needle:
        return list(tasks)
    return [t for t in tasks if _matches(t, needle)]


def sort_tasks(tasks: Iterable[TaskEntity], option: SortOption) -> List[TaskEntity]:
    """Stable sort; tasks with equal keys keep their input order."""
    if option is SortOption.NEWEST:
        return sorted(tasks, key=lambda t: t["created_at"], reverse=True)
    if option is SortOption.OLDEST:
        return sorted(tasks, key=lambda t: t["created_at"])
    if option is SortOption.TITLE_AZ:
        return sorted(tasks, key=_title_key)
    return sorted(tasks, key=_title_key, reverse=True)


def _dedupe(tasks: Iterable[TaskEntity]) -> List[TaskEntity]:
    seen = set()
    out: List[TaskEntity] = []
    for t in tasks:
        if t["id"] in seen:
            continue
        seen.add(t["id"])
        out.append(t)
    return out


# PUBLIC_INTERFACE
def compute_visible(
    all_tasks: Iterable[TaskEntity],
    status: StatusFilter = StatusFilter.ALL,
    query: Optional[str] = None,
    sort: SortOption = SortOption.NEWEST,
) -> List[TaskEntity]:
    """
    Derive the visible set from a snapshot of tasks.

    Repeated ids are dropped first (first occurrence wins), then the status
    filter, search filter and stable sort apply. The input is never mutated.

    Args:
        all_tasks: Snapshot of every task in the store.
        status: Completion-status filter.
        query: Free-text search; blank means no search filtering.
        sort: Ordering of the result.

    Returns:
        A new list holding the visible tasks in display order.
    """
    status = StatusFilter(status)
    sort = SortOption(sort)
    tasks = filter_by_status(_dedupe(all_tasks), status)
    tasks = filter_by_query(tasks, query)
    return sort_tasks(tasks, sort)


# PUBLIC_INTERFACE
def current_page(visible: Sequence[TaskEntity], items_to_show: int) -> List[TaskEntity]:
    """Return the prefix of the visible set that is currently revealed."""
    return list(visible[: max(items_to_show, 0)])


# PUBLIC_INTERFACE
class PaginationState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"


# PUBLIC_INTERFACE
class Paginator:
    """
    Cursor over the visible set, revealed PAGE_SIZE items at a time.

    advance() moves idle -> loading and grows the cursor; while loading,
    further advances are ignored. Loading ends either through settle() or once
    the injected monotonic clock has moved past settle_delay. reset() puts the
    cursor back to one page without touching the loading state.

    The cursor passed out by items_to_show() is always clamped to the length
    of the sequence it is applied to.
    """

    def __init__(
        self,
        page_size: int = PAGE_SIZE,
        settle_delay: float = SETTLE_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.page_size = page_size
        self.settle_delay = settle_delay
        self._clock = clock
        self._lock = RLock()
        self._cursor = page_size
        self._loading_since: Optional[float] = None

    @property
    def state(self) -> PaginationState:
        with self._lock:
            if self._loading_since is not None and self._clock() - self._loading_since >= self.settle_delay:
                self._loading_since = None
            return PaginationState.IDLE if self._loading_since is None else PaginationState.LOADING

    @property
    def is_loading(self) -> bool:
        return self.state is PaginationState.LOADING

    def items_to_show(self, total: int) -> int:
        """Cursor clamped to [0, total]."""
        with self._lock:
            self._cursor = min(self._cursor, max(total, self.page_size))
            return max(0, min(self._cursor, total))

    def has_more(self, total: int) -> bool:
        return self.items_to_show(total) < total

    def advance(self, total: int) -> bool:
        """
        Reveal one more page of a sequence of the given length.

        Returns True when the cursor moved; False when already loading or
        when everything is shown. The check and the move happen under one lock.
        """
        with self._lock:
            if self.is_loading:
                logger.debug("Ignoring page advance while loading")
                return False
            shown = self.items_to_show(total)
            if shown >= total:
                return False
            self._cursor = min(shown + self.page_size, total)
            self._loading_since = self._clock()
            logger.debug("Advanced page cursor to %d of %d", self._cursor, total)
            return True

    def on_item_appeared(self, task_id: str, visible: Sequence[TaskEntity]) -> bool:
        """Advance when the given task is the last row of the current page."""
        with self._lock:
            page = current_page(visible, self.items_to_show(len(visible)))
            if not page or page[-1]["id"] != task_id:
                return False
            return self.advance(len(visible))

    def settle(self) -> None:
        """Finish loading. Calling it when idle is a no-op."""
        with self._lock:
            self._loading_since = None

    def reset(self) -> None:
        with self._lock:
            self._cursor = self.page_size
