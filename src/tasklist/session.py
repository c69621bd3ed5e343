from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import List, Optional

from .models import TaskEntity
from .preferences import PreferenceStore, ViewPreferences
from .repositories import TaskRepository
from .visible import Paginator, SortOption, StatusFilter, compute_visible, current_page

logger = logging.getLogger(__name__)


@dataclass
class PagedView:
    """One render of the task list."""

    items: List[TaskEntity]
    total: int
    items_to_show: int
    has_more: bool
    is_loading: bool
    preferences: ViewPreferences = field(default_factory=ViewPreferences)

    @property
    def empty(self) -> bool:
        return self.total == 0


# PUBLIC_INTERFACE
class TaskListSession:
    """
    Ties the stored tasks, the user's view preferences and the paginator
    together. Every read recomputes the visible set from a fresh snapshot.
    """

    def __init__(
        self,
        repository: TaskRepository,
        preferences: Optional[PreferenceStore] = None,
        paginator: Optional[Paginator] = None,
    ) -> None:
        self._repo = repository
        self._lock = RLock()
        self._prefs_store = preferences or PreferenceStore()
        self._prefs = self._prefs_store.load_view()
        self.paginator = paginator or Paginator()

    @property
    def preferences(self) -> ViewPreferences:
        with self._lock:
            return self._prefs

    def set_preferences(
        self,
        status: Optional[StatusFilter] = None,
        sort: Optional[SortOption] = None,
        query: Optional[str] = None,
    ) -> bool:
        """Apply preference changes; any actual change resets pagination. Returns True on change."""
        with self._lock:
            updated = self._prefs.with_changes(status=status, sort=sort, query=query)
            if updated == self._prefs:
                return False
            self._prefs = updated
            self._prefs_store.save_view(updated)
            self.paginator.reset()
        logger.debug("View preferences changed to %s; pagination reset", updated)
        return True

    def visible(self) -> List[TaskEntity]:
        prefs = self.preferences
        return compute_visible(
            self._repo.all(),
            status=prefs.status,
            query=prefs.query,
            sort=prefs.sort,
        )

    def view(self) -> PagedView:
        with self._lock:
            visible = self.visible()
            total = len(visible)
            shown = self.paginator.items_to_show(total)
            return PagedView(
                items=current_page(visible, shown),
                total=total,
                items_to_show=shown,
                has_more=shown < total,
                is_loading=self.paginator.is_loading,
                preferences=self._prefs,
            )

    def load_more(self) -> bool:
        with self._lock:
            return self.paginator.advance(len(self.visible()))

    def item_appeared(self, task_id: str) -> bool:
        with self._lock:
            return self.paginator.on_item_appeared(task_id, self.visible())
