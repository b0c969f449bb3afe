"""Domain events emitted when a user's tasks change."""

from __future__ import annotations

from pydantic import BaseModel


class TaskEvent(BaseModel):
    """Base for every event about one user's task list."""

    user_id: str


class TaskAdded(TaskEvent):
    """Fired when a single task is appended to a user's list."""

    task_id: str


class TasksImported(TaskEvent):
    """Fired after a batch of generated tasks has been saved."""

    task_ids: list[str]


class TaskUpdated(TaskEvent):
    """Fired when a task's schedule or text was replaced."""

    task_id: str


class TaskCompletionChanged(TaskEvent):
    task_id: str
    completed: bool


class TaskDeleted(TaskEvent):
    task_id: str


class TaskOverlapRejected(TaskEvent):
    """Fired when a write was refused because of a same-day time conflict."""

    task_id: str | None
    conflicting_task_id: str
    date: str
    start_time: str
    duration: int
