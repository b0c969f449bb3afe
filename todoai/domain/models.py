"""Domain models for the task service."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from todoai.services.timeparse import is_iso_date, to_minutes


class TimelineEntryType(StrEnum):
    TASK_ADDED = "task_added"
    TASKS_IMPORTED = "tasks_imported"
    TASK_UPDATED = "task_updated"
    TASK_COMPLETION_CHANGED = "task_completion_changed"
    TASK_DELETED = "task_deleted"
    OVERLAP_REJECTED = "overlap_rejected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _check_date(value: str) -> str:
    if not is_iso_date(value):
        raise ValueError(f"Invalid date {value!r}: expected YYYY-MM-DD")
    return value


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Task(BaseModel):
    """A scheduled block of time on one calendar day.

    Serialized with the mobile client's field names (``startTime``); either
    spelling is accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_id)
    text: str = ""
    date: str
    start_time: str = Field(alias="startTime")
    duration: int = Field(gt=0)
    completed: bool = False

    @field_validator("date")
    @classmethod
    def _valid_date(cls, value: str) -> str:
        return _check_date(value)

    @field_validator("start_time")
    @classmethod
    def _valid_start_time(cls, value: str) -> str:
        to_minutes(value)
        return value

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration


class User(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    email: str
    # Stored as given; credential hardening is out of scope.
    password: str
    tasks: list[Task] = Field(default_factory=list)
    version: int = 0

    def find_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    task_id: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """A user as returned to clients (never includes the password)."""

    id: str
    name: str
    email: str
    tasks: list[Task]
    version: int

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            tasks=user.tasks,
            version=user.version,
        )


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SignupRequest(_Request):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class SigninRequest(_Request):
    email: str
    password: str


class AddTaskRequest(_Request):
    user_id: str = Field(alias="userID")
    new_task: Task = Field(alias="newTask")


class AddAITasksRequest(_Request):
    user_id: str = Field(alias="userID")
    tasks: list[Task]


class DeleteTaskRequest(_Request):
    user_id: str = Field(alias="userID")
    task_id: str = Field(alias="taskId")


class UpdateTaskRequest(_Request):
    user_id: str = Field(alias="userID")
    task_id: str = Field(alias="taskId")
    completed: bool


class UpdateTaskFullyRequest(_Request):
    user_id: str = Field(alias="userID")
    task_id: str = Field(alias="taskId")
    task: Task


class GenerateTasksRequest(_Request):
    user_id: str | None = Field(default=None, alias="userID")
    prompt: str = Field(min_length=1)
    date: str
    use_history: bool = Field(default=False, alias="useHistory")

    @field_validator("date")
    @classmethod
    def _valid_date(cls, value: str) -> str:
        return _check_date(value)


class GenerateTasksResponse(BaseModel):
    tasks: list[Task]
    conflicts: list[str] = Field(default_factory=list)
