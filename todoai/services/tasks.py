"""Task write paths: load a user's tasks, validate, then persist.

Every write holds the user's repository lock for the whole
read-validate-write cycle, so two concurrent updates for the same user
cannot both pass the overlap check against stale data.
"""

from __future__ import annotations

import logging
import threading

from todoai.domain.bus import EventBus
from todoai.domain.errors import DuplicateTask, TaskNotFound, TaskOverlapError, UserNotFound
from todoai.domain.events import (
    TaskAdded,
    TaskCompletionChanged,
    TaskDeleted,
    TaskOverlapRejected,
    TasksImported,
    TaskUpdated,
)
from todoai.domain.models import Task, User
from todoai.repos.memory import UserRepository
from todoai.services.conflicts import Conflict, check_overlap

logger = logging.getLogger(__name__)


def _require_user(user_repo: UserRepository, user_id: str) -> User:
    user = user_repo.get(user_id)
    if user is None:
        raise UserNotFound(user_id)
    return user


def _user_lock(user_repo: UserRepository, user_id: str) -> threading.Lock:
    lock = user_repo.lock_for(user_id)
    if lock is None:
        raise UserNotFound(user_id)
    return lock


def _reject_overlap(
    bus: EventBus, user_id: str, task_id: str | None, task: Task, result: Conflict
) -> TaskOverlapError:
    bus.publish(
        TaskOverlapRejected(
            user_id=user_id,
            task_id=task_id,
            conflicting_task_id=result.task.id,
            date=task.date,
            start_time=task.start_time,
            duration=task.duration,
        )
    )
    return TaskOverlapError(result.task)


def add_task(
    user_repo: UserRepository,
    bus: EventBus,
    user_id: str,
    task: Task,
    validate: bool = False,
) -> User:
    """Append *task* to the user's list.

    With *validate* off (the default) no overlap check is made, matching the
    behaviour clients already rely on for quick-add.
    """
    with _user_lock(user_repo, user_id):
        user = _require_user(user_repo, user_id)
        if user.find_task(task.id) is not None:
            raise DuplicateTask(task.id)
        if validate:
            result = check_overlap(user.tasks, task)
            if isinstance(result, Conflict):
                raise _reject_overlap(bus, user_id, None, task, result)
        user.tasks.append(task)
        user.version += 1

    bus.publish(TaskAdded(user_id=user_id, task_id=task.id))
    return user


def add_tasks(
    user_repo: UserRepository,
    bus: EventBus,
    user_id: str,
    tasks: list[Task],
    validate: bool = False,
) -> User:
    """Append a batch of tasks (typically generated ones) all-or-nothing."""
    with _user_lock(user_repo, user_id):
        user = _require_user(user_repo, user_id)
        accepted: list[Task] = []
        seen = {t.id for t in user.tasks}
        for task in tasks:
            if task.id in seen:
                raise DuplicateTask(task.id)
            seen.add(task.id)
            if validate:
                result = check_overlap([*user.tasks, *accepted], task)
                if isinstance(result, Conflict):
                    raise _reject_overlap(bus, user_id, None, task, result)
            accepted.append(task)
        user.tasks.extend(accepted)
        user.version += 1

    bus.publish(TasksImported(user_id=user_id, task_ids=[t.id for t in accepted]))
    return user


def delete_task(
    user_repo: UserRepository, bus: EventBus, user_id: str, task_id: str
) -> User:
    with _user_lock(user_repo, user_id):
        user = _require_user(user_repo, user_id)
        remaining = [t for t in user.tasks if t.id != task_id]
        if len(remaining) == len(user.tasks):
            raise TaskNotFound(task_id)
        user.tasks = remaining
        user.version += 1

    bus.publish(TaskDeleted(user_id=user_id, task_id=task_id))
    return user


def set_completed(
    user_repo: UserRepository,
    bus: EventBus,
    user_id: str,
    task_id: str,
    completed: bool,
) -> User:
    with _user_lock(user_repo, user_id):
        user = _require_user(user_repo, user_id)
        task = user.find_task(task_id)
        if task is None:
            raise TaskNotFound(task_id)
        task.completed = completed
        user.version += 1

    bus.publish(TaskCompletionChanged(user_id=user_id, task_id=task_id, completed=completed))
    return user


def update_task_fully(
    user_repo: UserRepository,
    bus: EventBus,
    user_id: str,
    task_id: str,
    task: Task,
) -> User:
    """Replace the task *task_id* with *task* if its new slot is free.

    The overlap check excludes the task's own stored version. On conflict
    ``TaskOverlapError`` is raised and nothing is written. The stored task
    always keeps the id *task_id*.
    """
    replacement = task.model_copy(update={"id": task_id})

    with _user_lock(user_repo, user_id):
        user = _require_user(user_repo, user_id)

        result = check_overlap(user.tasks, replacement, exclude_id=task_id)
        if isinstance(result, Conflict):
            raise _reject_overlap(bus, user_id, task_id, replacement, result)

        updated = user_repo.replace_task(user_id, task_id, replacement)
        if updated is None:
            raise TaskNotFound(task_id)

    bus.publish(TaskUpdated(user_id=user_id, task_id=task_id))
    return updated


def list_tasks(user_repo: UserRepository, user_id: str, date: str | None = None) -> list[Task]:
    """Return the user's tasks (optionally for one day) ordered by start time."""
    user = _require_user(user_repo, user_id)
    tasks = [t for t in user.tasks if date is None or t.date == date]
    return sorted(tasks, key=lambda t: (t.date, t.start_minutes))
