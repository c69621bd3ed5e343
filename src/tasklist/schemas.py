from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .visible import SortOption, StatusFilter


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new task.

    Titles are not length-checked here: a title that is blank after trimming
    is rejected by the task rules and answered with 422 by the router.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "notes": "2 litres, semi-skimmed",
                "is_done": False,
            }
        }
    )

    title: str = Field(..., description="Task title; must not be blank after trimming")
    notes: Optional[str] = Field(default=None, description="Optional notes; blank is stored as null")
    is_done: bool = Field(default=False, description="Completion status flag")


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for replacing the editable fields of a task.
    Omitted notes become null and omitted is_done becomes false.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk and bread",
                "notes": None,
                "is_done": True,
            }
        }
    )

    title: str = Field(..., description="Task title; must not be blank after trimming")
    notes: Optional[str] = Field(default=None, description="Optional notes; blank is stored as null")
    is_done: bool = Field(default=False, description="Completion status flag")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f2b9c6d0e8a4c1b9a7d5e4f3c2b1a09",
                "title": "Buy milk",
                "notes": None,
                "is_done": False,
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-26T09:00:00.000001",
            }
        }
    )

    id: str = Field(..., description="Opaque unique identifier of the task")
    title: str = Field(..., description="Task title")
    notes: Optional[str] = Field(default=None, description="Optional notes")
    is_done: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# PUBLIC_INTERFACE
class TaskPage(BaseModel):
    """
    The currently revealed prefix of the visible set plus pagination state.
    """

    items: List[TaskOut] = Field(..., description="Tasks on the revealed page(s)")
    total: int = Field(..., description="Number of tasks in the visible set")
    items_to_show: int = Field(..., description="Pagination cursor, clamped to total")
    has_more: bool = Field(..., description="True when more tasks can be revealed")
    is_loading: bool = Field(..., description="True while a page advance is settling")
    empty: bool = Field(..., description="True when nothing matches the current view")
    filter: StatusFilter = Field(..., description="Active status filter")
    sort: SortOption = Field(..., description="Active sort option")
    query: str = Field(..., description="Active search text")


class LoadMoreResult(BaseModel):
    advanced: bool = Field(..., description="Whether the cursor moved")
    page: TaskPage


# PUBLIC_INTERFACE
class BulkDelete(BaseModel):
    """
    Delete several tasks, addressed either by id or by row offset in the
    current visible set (exactly one of the two).
    """

    ids: Optional[List[str]] = Field(default=None, description="Task ids to delete")
    offsets: Optional[List[int]] = Field(default=None, description="Row offsets into the visible set")

    @model_validator(mode="after")
    def check_one_target(self) -> "BulkDelete":
        if (self.ids is None) == (self.offsets is None):
            raise ValueError("provide exactly one of 'ids' or 'offsets'")
        return self


class BulkDeleteResult(BaseModel):
    deleted: int = Field(..., description="Number of tasks removed")


# PUBLIC_INTERFACE
class PreferencesIn(BaseModel):
    """Partial update of the persisted view preferences."""

    filter: Optional[StatusFilter] = None
    sort: Optional[SortOption] = None
    query: Optional[str] = None


class PreferencesOut(BaseModel):
    filter: StatusFilter
    sort: SortOption
    query: str
