"""FastAPI application — entry point for the task service."""

from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from todoai.config import Settings, get_settings
from todoai.domain.bus import EventBus
from todoai.domain.errors import (
    DuplicateTask,
    EmailTaken,
    GenerationError,
    InvalidCredentials,
    NotFoundError,
    TaskOverlapError,
)
from todoai.domain.handlers import HandlerRegistry
from todoai.domain.models import (
    AddAITasksRequest,
    AddTaskRequest,
    DeleteTaskRequest,
    GenerateTasksRequest,
    GenerateTasksResponse,
    SigninRequest,
    SignupRequest,
    Task,
    TimelineEntry,
    UpdateTaskFullyRequest,
    UpdateTaskRequest,
    UserResponse,
)
from todoai.logging_setup import setup_logging
from todoai.repos.memory import TimelineRepository, UserRepository
from todoai.services import accounts, tasks
from todoai.services.conflicts import find_conflicts
from todoai.services.generator import generate_tasks as _generate
from todoai.services.timeparse import InvalidTimeFormat

setup_logging(get_settings().log_level)

app = FastAPI(title=get_settings().app_name)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
user_repo = UserRepository()
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    user_repo=user_repo,
    timeline_repo=timeline_repo,
)


# ── Error mapping ─────────────────────────────────────────────────────


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": getattr(exc, "code", None)},
    )


@app.exception_handler(TaskOverlapError)
async def _on_overlap(request: Request, exc: TaskOverlapError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "message": str(exc),
            "error": exc.code,
            "conflictingTaskId": exc.conflicting.id,
        },
    )


@app.exception_handler(NotFoundError)
async def _on_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, exc)


@app.exception_handler(InvalidCredentials)
async def _on_invalid_credentials(request: Request, exc: InvalidCredentials) -> JSONResponse:
    return _error(401, exc)


@app.exception_handler(EmailTaken)
@app.exception_handler(DuplicateTask)
async def _on_duplicate(request: Request, exc: Exception) -> JSONResponse:
    return _error(409, exc)


@app.exception_handler(GenerationError)
async def _on_generation_error(request: Request, exc: GenerationError) -> JSONResponse:
    return _error(502, exc)


@app.exception_handler(InvalidTimeFormat)
async def _on_invalid_time(request: Request, exc: InvalidTimeFormat) -> JSONResponse:
    return _error(422, exc)


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Hello World!"


@app.put("/signup", response_model=UserResponse)
def signup(body: SignupRequest) -> UserResponse:
    user = accounts.signup(user_repo, body.name, body.email, body.password)
    return UserResponse.from_user(user)


@app.put("/signin", response_model=UserResponse)
def signin(body: SigninRequest) -> UserResponse:
    user = accounts.signin(user_repo, body.email, body.password)
    return UserResponse.from_user(user)


@app.put("/addtask", response_model=UserResponse)
def add_task(
    body: AddTaskRequest, settings: Settings = Depends(get_settings)
) -> UserResponse:
    """Append one task. Overlaps are only checked when validate-on-add is enabled."""
    user = tasks.add_task(
        user_repo,
        event_bus,
        body.user_id,
        body.new_task,
        validate=settings.validate_on_add,
    )
    return UserResponse.from_user(user)


@app.put("/addaitasks", response_model=UserResponse)
def add_ai_tasks(
    body: AddAITasksRequest, settings: Settings = Depends(get_settings)
) -> UserResponse:
    """Save a batch of generated tasks."""
    user = tasks.add_tasks(
        user_repo,
        event_bus,
        body.user_id,
        body.tasks,
        validate=settings.validate_on_add,
    )
    return UserResponse.from_user(user)


@app.delete("/deletetask", response_model=UserResponse)
def delete_task(body: DeleteTaskRequest) -> UserResponse:
    user = tasks.delete_task(user_repo, event_bus, body.user_id, body.task_id)
    return UserResponse.from_user(user)


@app.put("/updatetask", response_model=UserResponse)
def update_task(body: UpdateTaskRequest) -> UserResponse:
    """Toggle a task's completed flag."""
    user = tasks.set_completed(
        user_repo, event_bus, body.user_id, body.task_id, body.completed
    )
    return UserResponse.from_user(user)


@app.put("/updatetaskfully", response_model=UserResponse)
def update_task_fully(body: UpdateTaskFullyRequest) -> UserResponse:
    """Reschedule a task, refusing any same-day time overlap (400 TASK_OVERLAP)."""
    user = tasks.update_task_fully(
        user_repo, event_bus, body.user_id, body.task_id, body.task
    )
    return UserResponse.from_user(user)


@app.get("/users/{user_id}/tasks", response_model=list[Task])
def list_tasks(user_id: str, date: str | None = None) -> list[Task]:
    """Return a user's tasks ordered by start time, optionally for one date."""
    return tasks.list_tasks(user_repo, user_id, date)


@app.get("/users/{user_id}/timeline", response_model=list[TimelineEntry])
def get_timeline(user_id: str) -> list[TimelineEntry]:
    if user_repo.get(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return timeline_repo.list_for_user(user_id)


@app.post("/ai/generate-tasks", response_model=GenerateTasksResponse)
def generate_tasks(
    body: GenerateTasksRequest, settings: Settings = Depends(get_settings)
) -> GenerateTasksResponse:
    """Propose tasks for a day from free text. Nothing is saved."""
    user = None
    if body.user_id is not None:
        user = user_repo.get(body.user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
    elif body.use_history:
        raise HTTPException(status_code=400, detail="useHistory requires userID")

    history = user.tasks if (user is not None and body.use_history) else None
    proposed = _generate(body.prompt, body.date, history=history, model=settings.openai_model)

    # Report clashes with what the user already has on that day.
    conflicts: list[str] = []
    if user is not None:
        for task in proposed:
            for existing in find_conflicts(user.tasks, task):
                conflicts.append(f"{task.text} overlaps {existing.text} ({existing.id})")

    return GenerateTasksResponse(tasks=proposed, conflicts=conflicts)
