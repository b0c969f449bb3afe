"""Service for detecting time conflicts between a user's tasks."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from todoai.services.timeparse import to_minutes


class Scheduled(Protocol):
    """Anything with the fields needed to place a task on a day's timeline."""

    id: str
    date: str
    start_time: str
    duration: int


@dataclass(frozen=True)
class NoConflict:
    has_conflict = False


@dataclass(frozen=True)
class Conflict:
    task: Scheduled
    has_conflict = True


OverlapResult = NoConflict | Conflict


def _overlapping(
    existing_tasks: Iterable[Scheduled],
    candidate: Scheduled,
    exclude_id: str | None,
) -> Iterator[Scheduled]:
    candidate_start = to_minutes(candidate.start_time)
    candidate_end = candidate_start + candidate.duration

    for task in existing_tasks:
        if exclude_id is not None and task.id == exclude_id:
            continue
        # Tasks on different days never conflict.
        if task.date != candidate.date:
            continue
        task_start = to_minutes(task.start_time)
        task_end = task_start + task.duration
        if candidate_start < task_end and candidate_end > task_start:
            yield task


def check_overlap(
    existing_tasks: Iterable[Scheduled],
    candidate: Scheduled,
    exclude_id: str | None = None,
) -> OverlapResult:
    """Decide whether *candidate* may be placed among a single user's tasks.

    Intervals are half-open ``[start, start + duration)``: a task starting
    exactly when another ends is NOT a conflict. The task identified by
    *exclude_id* (the candidate's own stored version during an update) is
    skipped. Returns the first conflicting task found; which one is reported
    when several overlap depends on the order of *existing_tasks*.

    Raises ``InvalidTimeFormat`` for a malformed start time.
    """
    for task in _overlapping(existing_tasks, candidate, exclude_id):
        return Conflict(task=task)
    return NoConflict()


def find_conflicts(
    existing_tasks: Iterable[Scheduled],
    candidate: Scheduled,
    exclude_id: str | None = None,
) -> list[Scheduled]:
    """Return every task that overlaps *candidate*, in input order."""
    return list(_overlapping(existing_tasks, candidate, exclude_id))
