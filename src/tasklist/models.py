from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a single to-do item.

    Fields:
    - id: Opaque unique identifier (UUID4 hex), assigned at creation
    - title: Non-empty title, trimmed on every write
    - notes: Optional notes; empty input is stored as None
    - is_done: Completion flag
    - created_at: Creation timestamp, never changed afterwards
    - updated_at: Last mutation timestamp (>= created_at)
    """

    id: str
    title: str
    notes: Optional[str]
    is_done: bool
    created_at: datetime
    updated_at: datetime
