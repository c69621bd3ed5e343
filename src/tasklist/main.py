from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .feedback import FeedbackSink
from .logging_setup import setup_logging
from .preferences import PreferenceStore
from .repositories import TaskRepository, TaskStore, get_store
from .routers import tasks as tasks_router
from .seed import seed_sample_tasks
from .session import TaskListSession
from .settings import Settings, get_settings
from .utils import error_response
from .view_model import TaskListViewModel
from .visible import Paginator

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, edit, toggle and delete tasks; filtered, searched, sorted and paginated listing.",
    },
    {"name": "preferences", "description": "Persisted filter, sort and search choices."},
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TaskStore] = None,
    preferences: Optional[PreferenceStore] = None,
    paginator: Optional[Paginator] = None,
    feedback: Optional[FeedbackSink] = None,
) -> FastAPI:
    """
    Build the FastAPI application and wire its collaborators.

    Anything not passed in is built from settings (environment by default).
    """
    settings = settings or get_settings()
    store = store if store is not None else get_store(settings)
    preferences = preferences if preferences is not None else PreferenceStore(settings.preferences_path)
    paginator = paginator or Paginator(
        page_size=settings.page_size,
        settle_delay=settings.settle_delay_seconds,
    )

    repository = TaskRepository(store)
    view_model = TaskListViewModel(
        repository,
        feedback=feedback,
        refresh_delay=settings.refresh_delay_seconds,
    )
    session = TaskListSession(repository, preferences=preferences, paginator=paginator)

    if settings.seed_sample_data:
        seed_sample_tasks(repository, preferences)

    app = FastAPI(
        title="Task List",
        description="Single-user task list with filtering, search, sorting and incremental pagination.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.view_model = view_model
    app.state.session = session

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return error_response("Request validation failed", detail=jsonable_encoder(exc.errors()))

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(tasks_router.router)
    app.include_router(tasks_router.preferences_router)

    logger.info("Task list app ready (backend=%s)", settings.persistence_backend)
    return app


_settings = get_settings()
setup_logging(level=_settings.log_level, log_dir=_settings.log_dir)
app = create_app(_settings)
