from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse

from .session import PagedView


# PUBLIC_INTERFACE
def page_envelope(view: PagedView) -> Dict[str, Any]:
    """
    Build the standard envelope for the task list endpoint.

    Args:
        view: One render of the task list.

    Returns:
        Dict with keys: items, total, items_to_show, has_more, is_loading,
        empty, filter, sort, query.
    """
    items: List[Any] = list(view.items)
    return {
        "items": items,
        "total": int(view.total),
        "items_to_show": int(view.items_to_show),
        "has_more": view.has_more,
        "is_loading": view.is_loading,
        "empty": view.empty,
        "filter": view.preferences.status,
        "sort": view.preferences.sort,
        "query": view.preferences.query,
    }


# PUBLIC_INTERFACE
def error_response(
    message: str,
    detail: Optional[List[Any]] = None,
    status_code: int = 422,
) -> JSONResponse:
    """Return the app's standard validation error body."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": "ValidationError",
            "message": message,
            "detail": detail or [],
        },
    )


def title_rejected() -> JSONResponse:
    return error_response(
        "Title must not be empty",
        detail=[{"loc": ["body", "title"], "msg": "title is blank after trimming", "type": "value_error"}],
    )
