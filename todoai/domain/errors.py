"""Errors raised by the task services and translated to HTTP responses in main."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from todoai.domain.models import Task


class TaskServiceError(Exception):
    """Base class for task-service failures."""

    code = "TASK_SERVICE_ERROR"


class NotFoundError(TaskServiceError):
    code = "NOT_FOUND"


class UserNotFound(NotFoundError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__("User not found")


class TaskNotFound(NotFoundError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__("Task not found")


class TaskOverlapError(TaskServiceError):
    """The candidate interval intersects another task on the same day."""

    code = "TASK_OVERLAP"

    def __init__(self, conflicting: Task) -> None:
        self.conflicting = conflicting
        super().__init__(
            "Cannot update task: The new time overlaps with another task on the same day"
        )


class DuplicateTask(TaskServiceError):
    code = "DUPLICATE_TASK"

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} already exists")


class EmailTaken(TaskServiceError):
    code = "EMAIL_TAKEN"

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("Email is already registered")


class InvalidCredentials(TaskServiceError):
    code = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class GenerationError(TaskServiceError):
    """The language model reply could not be turned into tasks."""

    code = "GENERATION_FAILED"
