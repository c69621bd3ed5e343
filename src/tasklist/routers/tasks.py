from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse

from ..models import TaskEntity
from ..schemas import (
    BulkDelete,
    BulkDeleteResult,
    LoadMoreResult,
    PreferencesIn,
    PreferencesOut,
    TaskCreate,
    TaskOut,
    TaskPage,
    TaskUpdate,
)
from ..session import TaskListSession
from ..utils import error_response, page_envelope, title_rejected
from ..view_model import TaskListViewModel
from ..visible import SortOption, StatusFilter

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)

preferences_router = APIRouter(
    prefix="/api/v1/preferences",
    tags=["preferences"],
)


def _get_session(request: Request) -> TaskListSession:
    """
    Dependency returning the app-wide task list session.
    """
    return request.app.state.session


def _get_view_model(request: Request) -> TaskListViewModel:
    return request.app.state.view_model


def _require_task(view_model: TaskListViewModel, task_id: str) -> TaskEntity:
    task = view_model.repository.get(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


def _page(session: TaskListSession) -> TaskPage:
    return TaskPage(**page_envelope(session.view()))


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TaskPage,
    summary="List Tasks",
    description=(
        "Return the revealed page(s) of the visible task set.\n\n"
        "Query parameters (each optional; a changed value is persisted and resets pagination):\n"
        "- filter: all, active or completed\n"
        "- sort: newest, oldest, titleAZ or titleZA\n"
        "- q: search text matched against title and notes (case-insensitive)"
    ),
    responses={
        200: {"description": "Page retrieved successfully"},
        422: {"description": "Invalid filter or sort"},
    },
)
def list_tasks(
    status_filter: Optional[StatusFilter] = Query(None, alias="filter", description="Status filter"),
    sort: Optional[SortOption] = Query(None, description="Sort option"),
    q: Optional[str] = Query(None, description="Search text for title/notes"),
    session: TaskListSession = Depends(_get_session),
) -> TaskPage:
    """
    Current paged view of the task list.
    """
    session.set_preferences(status=status_filter, sort=sort, query=q)
    return _page(session)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    responses={
        201: {"description": "Task created"},
        422: {"description": "Title blank after trimming"},
    },
)
def create_task(
    payload: TaskCreate, view_model: TaskListViewModel = Depends(_get_view_model)
) -> Union[TaskOut, JSONResponse]:
    """
    Create a new task. A blank title creates nothing and returns 422.
    """
    created = view_model.add_task(payload.title, payload.notes, payload.is_done)
    if created is None:
        return title_rejected()
    return TaskOut(**created)


# PUBLIC_INTERFACE
@router.post("/load-more", response_model=LoadMoreResult, summary="Load More")
def load_more(session: TaskListSession = Depends(_get_session)) -> LoadMoreResult:
    """
    Reveal the next page. Ignored while a previous advance is settling or when
    everything is already shown.
    """
    advanced = session.load_more()
    return LoadMoreResult(advanced=advanced, page=_page(session))


# PUBLIC_INTERFACE
@router.post("/refresh", response_model=TaskPage, summary="Refresh")
async def refresh(
    session: TaskListSession = Depends(_get_session),
    view_model: TaskListViewModel = Depends(_get_view_model),
) -> TaskPage:
    """
    Pull-to-refresh. Data is local, so this waits briefly and returns the current page.
    """
    await view_model.refresh()
    return _page(session)


# PUBLIC_INTERFACE
@router.post(
    "/bulk-delete",
    response_model=BulkDeleteResult,
    summary="Delete Tasks",
    responses={422: {"description": "Offset outside the visible set"}},
)
def bulk_delete(
    payload: BulkDelete,
    session: TaskListSession = Depends(_get_session),
    view_model: TaskListViewModel = Depends(_get_view_model),
) -> Union[BulkDeleteResult, JSONResponse]:
    """
    Delete by ids (unknown ids are skipped) or by offsets into the visible set.
    """
    if payload.offsets is not None:
        try:
            deleted = view_model.delete_tasks_at(payload.offsets, session.visible())
        except IndexError:
            return error_response("offset out of range")
        return BulkDeleteResult(deleted=deleted)

    repo = view_model.repository
    targets = [t for t in (repo.get(i) for i in payload.ids or []) if t is not None]
    return BulkDeleteResult(deleted=view_model.delete_tasks(targets))


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    responses={404: {"description": "Task not found"}},
)
def get_task(task_id: str, view_model: TaskListViewModel = Depends(_get_view_model)) -> TaskOut:
    return TaskOut(**_require_task(view_model, task_id))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    responses={
        404: {"description": "Task not found"},
        422: {"description": "Title blank after trimming; task left unchanged"},
    },
)
def update_task(
    task_id: str, payload: TaskUpdate, view_model: TaskListViewModel = Depends(_get_view_model)
) -> Union[TaskOut, JSONResponse]:
    """
    Replace title, notes and is_done of a task.
    """
    task = _require_task(view_model, task_id)
    if not view_model.update_task(task, payload.title, payload.notes, payload.is_done):
        return title_rejected()
    return TaskOut(**task)


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=TaskOut,
    summary="Toggle Task",
    responses={404: {"description": "Task not found"}},
)
def toggle_task(task_id: str, view_model: TaskListViewModel = Depends(_get_view_model)) -> TaskOut:
    task = _require_task(view_model, task_id)
    view_model.toggle_done(task)
    return TaskOut(**task)


# PUBLIC_INTERFACE
@router.post("/{task_id}/appeared", response_model=LoadMoreResult, summary="Row Appeared")
def task_appeared(task_id: str, session: TaskListSession = Depends(_get_session)) -> LoadMoreResult:
    """
    Report that a row became visible; reaching the last row of the page
    reveals the next page.
    """
    advanced = session.item_appeared(task_id)
    return LoadMoreResult(advanced=advanced, page=_page(session))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    responses={
        204: {"description": "Task deleted"},
        404: {"description": "Task not found"},
    },
)
def delete_task(task_id: str, view_model: TaskListViewModel = Depends(_get_view_model)) -> Response:
    task = _require_task(view_model, task_id)
    view_model.delete_task(task)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@preferences_router.get("/", response_model=PreferencesOut, summary="Get Preferences")
def get_preferences(session: TaskListSession = Depends(_get_session)) -> PreferencesOut:
    prefs = session.preferences
    return PreferencesOut(filter=prefs.status, sort=prefs.sort, query=prefs.query)


# PUBLIC_INTERFACE
@preferences_router.put("/", response_model=PreferencesOut, summary="Update Preferences")
def put_preferences(payload: PreferencesIn, session: TaskListSession = Depends(_get_session)) -> PreferencesOut:
    """
    Change any of filter, sort and query. A change resets pagination.
    """
    session.set_preferences(status=payload.filter, sort=payload.sort, query=payload.query)
    prefs = session.preferences
    return PreferencesOut(filter=prefs.status, sort=prefs.sort, query=prefs.query)
