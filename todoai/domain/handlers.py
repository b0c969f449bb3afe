"""Domain event handlers — wired up at application startup."""

from __future__ import annotations

import logging

from todoai.domain.bus import EventBus
from todoai.domain.events import (
    TaskAdded,
    TaskCompletionChanged,
    TaskDeleted,
    TaskEvent,
    TaskOverlapRejected,
    TasksImported,
    TaskUpdated,
)
from todoai.domain.models import TimelineEntry, TimelineEntryType
from todoai.repos.memory import TimelineRepository, UserRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        user_repo: UserRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.user_repo = user_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(TaskAdded, self.on_task_added)
        self.bus.subscribe(TasksImported, self.on_tasks_imported)
        self.bus.subscribe(TaskUpdated, self.on_task_updated)
        self.bus.subscribe(TaskCompletionChanged, self.on_task_completion_changed)
        self.bus.subscribe(TaskDeleted, self.on_task_deleted)
        self.bus.subscribe(TaskOverlapRejected, self.on_task_overlap_rejected)
        self.bus.subscribe(TaskEvent, self.on_any_task_event)

    def _task_snapshot(self, user_id: str, task_id: str) -> dict:
        user = self.user_repo.get(user_id)
        task = user.find_task(task_id) if user else None
        if task is None:
            return {}
        return {"date": task.date, "startTime": task.start_time, "duration": task.duration}

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_any_task_event(self, event: TaskEvent) -> None:
        logger.debug("user %s: %s %s", event.user_id, type(event).__name__, event.model_dump())

    def on_task_added(self, event: TaskAdded) -> None:
        logger.info("task %s added for user %s", event.task_id, event.user_id)
        self.timeline_repo.add(
            TimelineEntry(
                user_id=event.user_id,
                task_id=event.task_id,
                type=TimelineEntryType.TASK_ADDED,
                payload=self._task_snapshot(event.user_id, event.task_id),
            )
        )

    def on_tasks_imported(self, event: TasksImported) -> None:
        logger.info(
            "%d generated task(s) imported for user %s", len(event.task_ids), event.user_id
        )
        self.timeline_repo.add(
            TimelineEntry(
                user_id=event.user_id,
                type=TimelineEntryType.TASKS_IMPORTED,
                payload={"task_ids": event.task_ids},
            )
        )

    def on_task_updated(self, event: TaskUpdated) -> None:
        logger.info("task %s rescheduled for user %s", event.task_id, event.user_id)
        self.timeline_repo.add(
            TimelineEntry(
                user_id=event.user_id,
                task_id=event.task_id,
                type=TimelineEntryType.TASK_UPDATED,
                payload=self._task_snapshot(event.user_id, event.task_id),
            )
        )

    def on_task_completion_changed(self, event: TaskCompletionChanged) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                user_id=event.user_id,
                task_id=event.task_id,
                type=TimelineEntryType.TASK_COMPLETION_CHANGED,
                payload={"completed": event.completed},
            )
        )

    def on_task_deleted(self, event: TaskDeleted) -> None:
        logger.info("task %s deleted for user %s", event.task_id, event.user_id)
        self.timeline_repo.add(
            TimelineEntry(
                user_id=event.user_id,
                task_id=event.task_id,
                type=TimelineEntryType.TASK_DELETED,
            )
        )

    def on_task_overlap_rejected(self, event: TaskOverlapRejected) -> None:
        logger.warning(
            "rejected %s+%dmin on %s for user %s: overlaps task %s",
            event.start_time,
            event.duration,
            event.date,
            event.user_id,
            event.conflicting_task_id,
        )
        self.timeline_repo.add(
            TimelineEntry(
                user_id=event.user_id,
                task_id=event.task_id,
                type=TimelineEntryType.OVERLAP_REJECTED,
                payload={
                    "conflicting_task_id": event.conflicting_task_id,
                    "date": event.date,
                    "startTime": event.start_time,
                    "duration": event.duration,
                },
            )
        )
