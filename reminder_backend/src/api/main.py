import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import IncompleteReminderError, StoreError, UnsavedChangesError
from .periodic import start_periodic_task, stop_periodic_tasks
from .repositories import ReminderStore, get_store
from .routers import reminders as reminders_router
from .scheduler import get_scheduler
from .settings import get_settings

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "reminders",
        "description": "Create, list and delete reminders; check and deliver due notifications.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the reminder store at startup and poll for due reminders while the
    app runs.
    """
    store = get_store()
    scheduler = get_scheduler()
    if _settings.notify_poll_seconds > 0:

        async def _tick() -> None:
            # Store and notifier calls block; keep them off the event loop
            await asyncio.to_thread(scheduler.tick, store)

        start_periodic_task(
            app,
            name="reminder-tick",
            interval_seconds=_settings.notify_poll_seconds,
            func=_tick,
            logger=logger,
        )
    try:
        yield
    finally:
        await stop_periodic_tasks(app, logger=logger)


app = FastAPI(
    title="Reminder Backend",
    description="Backend service that stores reminders and notifies once before each one is due.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers for consistent JSON on validation errors
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
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(IncompleteReminderError)
async def incomplete_reminder_handler(request: Request, exc: IncompleteReminderError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "IncompleteReminder", "message": str(exc)},
    )


@app.exception_handler(UnsavedChangesError)
async def unsaved_changes_handler(request: Request, exc: UnsavedChangesError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"error": "UnsavedChangesError", "message": str(exc)},
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """
    Report store failures without losing in-memory state.

    Response format:
        {"error": "<StoreCorruptError|StoreIOError>", "message": "..."}
    """
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"error": type(exc).__name__, "message": str(exc)},
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(store: ReminderStore = Depends(get_store)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the state of the reminder file.
    """
    return {
        "message": "Healthy",
        "reminders_file": store.path,
        "writes_halted": store.writes_halted,
        "unsaved_changes": store.dirty,
    }


# Include routers
app.include_router(reminders_router.router)
