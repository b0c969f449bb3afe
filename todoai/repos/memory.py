"""In-memory repositories for users, their tasks and the activity timeline."""

from __future__ import annotations

import threading

from todoai.domain.models import Task, TimelineEntry, User


class UserRepository:
    """Dict-backed store for User instances, keyed by id.

    Tasks are embedded in their owning user, so every task write goes
    through here.
    """

    def __init__(self) -> None:
        self._store: dict[str, User] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def add(self, user: User) -> None:
        with self._locks_guard:
            self._store[user.id] = user
            self._locks.setdefault(user.id, threading.Lock())

    def add_if_email_free(self, user: User) -> bool:
        """Store *user* unless another user already has its email.

        The check and the insert happen atomically.
        """
        with self._locks_guard:
            if any(u.email == user.email for u in self._store.values()):
                return False
            self._store[user.id] = user
            self._locks.setdefault(user.id, threading.Lock())
            return True

    def get(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        for user in self._store.values():
            if user.email == email:
                return user
        return None

    def find_by_credentials(self, email: str, password: str) -> User | None:
        user = self.get_by_email(email)
        if user is None or user.password != password:
            return None
        return user

    def list_all(self) -> list[User]:
        return list(self._store.values())

    def delete(self, user_id: str) -> None:
        with self._locks_guard:
            self._store.pop(user_id, None)
            self._locks.pop(user_id, None)

    def lock_for(self, user_id: str) -> threading.Lock | None:
        """Return the lock serializing read-validate-write cycles for one user.

        Returns ``None`` for unknown users; no lock is created for them.
        """
        with self._locks_guard:
            return self._locks.get(user_id)

    def replace_task(self, user_id: str, task_id: str, task: Task) -> User | None:
        """Swap the task stored under *task_id* for *task*.

        Returns ``None`` when either the user or the task does not exist.
        """
        user = self._store.get(user_id)
        if user is None:
            return None
        for i, existing in enumerate(user.tasks):
            if existing.id == task_id:
                user.tasks[i] = task
                user.version += 1
                return user
        return None

    def clear(self) -> None:
        self._store.clear()
        with self._locks_guard:
            self._locks.clear()


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_user(self, user_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.user_id == user_id],
            key=lambda e: e.timestamp,
        )

    def list_for_task(self, task_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.task_id == task_id],
            key=lambda e: e.timestamp,
        )
