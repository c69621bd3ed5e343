from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from threading import RLock
from typing import Any, Dict, Optional

from .visible import SortOption, StatusFilter

logger = logging.getLogger(__name__)

FILTER_KEY = "todo.selectedFilter"
SORT_KEY = "todo.sortOption"
SEARCH_KEY = "todo.searchText"
SEEDED_KEY = "todo.seeded100"


@dataclass(frozen=True)
class ViewPreferences:
    """Inputs of the visible-set computation chosen by the user."""

    status: StatusFilter = StatusFilter.ALL
    sort: SortOption = SortOption.NEWEST
    query: str = ""

    def with_changes(
        self,
        status: Optional[StatusFilter] = None,
        sort: Optional[SortOption] = None,
        query: Optional[str] = None,
    ) -> "ViewPreferences":
        changes: Dict[str, Any] = {}
        if status is not None:
            changes["status"] = StatusFilter(status)
        if sort is not None:
            changes["sort"] = SortOption(sort)
        if query is not None:
            changes["query"] = query
        return replace(self, **changes)


# PUBLIC_INTERFACE
class PreferenceStore:
    """
    Small key-value settings store.

    With a path, values are kept in a JSON object on disk and rewritten on
    every set(); without one they only live in memory.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = path
        self._lock = RLock()
        self._values: Dict[str, Any] = self._read() if path else {}

    def _read(self) -> Dict[str, Any]:
        assert self._path is not None
        if not os.path.exists(self._path):
            return {}
        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Preferences file {self._path} must contain a JSON object")
        return data

    def _write(self) -> None:
        assert self._path is not None
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        tmp = f"{self._path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._values, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self._path)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value
            if self._path:
                self._write()

    def load_view(self) -> ViewPreferences:
        """Read view preferences; unknown stored values fall back to defaults."""
        status = self.get(FILTER_KEY, StatusFilter.ALL.value)
        sort = self.get(SORT_KEY, SortOption.NEWEST.value)
        query = self.get(SEARCH_KEY, "")
        try:
            status_value = StatusFilter(status)
        except ValueError:
            logger.warning("Ignoring unknown stored filter %r", status)
            status_value = StatusFilter.ALL
        try:
            sort_value = SortOption(sort)
        except ValueError:
            logger.warning("Ignoring unknown stored sort option %r", sort)
            sort_value = SortOption.NEWEST
        return ViewPreferences(
            status=status_value,
            sort=sort_value,
            query=query if isinstance(query, str) else "",
        )

    def save_view(self, prefs: ViewPreferences) -> None:
        with self._lock:
            self._values[FILTER_KEY] = prefs.status.value
            self._values[SORT_KEY] = prefs.sort.value
            self._values[SEARCH_KEY] = prefs.query
            if self._path:
                self._write()
