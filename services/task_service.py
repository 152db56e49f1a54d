# services/task_service.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
import uuid
from typing import Callable, List, Optional

from core.constants import DEFAULT_ESTIMATE
from domain.models import Task
from storage.repos import TaskRepo

logger = logging.getLogger(__name__)


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError("Task title cannot be empty.")
    return title


def _clean_estimate(estimate) -> int:
    try:
        return max(1, int(estimate))
    except (TypeError, ValueError):
        return DEFAULT_ESTIMATE


class TaskService:
    """
    Ordered task registry (insertion order), written through to its slot
    after every mutation.
    """

    def __init__(self, task_repo: TaskRepo):
        self.repo = task_repo
        self.tasks: List[Task] = task_repo.load()
        self._on_removed: Optional[Callable[[List[str]], None]] = None

    def set_on_removed(self, fn: Callable[[List[str]], None]) -> None:
        self._on_removed = fn

    def _save(self) -> None:
        self.repo.save(self.tasks)

    def _emit_removed(self, ids: List[str]) -> None:
        if self._on_removed and ids:
            self._on_removed(ids)

    # ---- queries ----
    def list_tasks(self) -> List[Task]:
        return list(self.tasks)

    def get(self, task_id: Optional[str]) -> Optional[Task]:
        if not task_id:
            return None
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def _require(self, task_id: str) -> Task:
        t = self.get(task_id)
        if t is None:
            raise ValueError("Task not found.")
        return t

    # ---- mutations ----
    def create_task(self, title: str, estimate: int = DEFAULT_ESTIMATE) -> Task:
        task = Task(
            id=str(uuid.uuid4()),
            title=_clean_title(title),
            estimated_count=_clean_estimate(estimate),
        )
        self.tasks.append(task)
        self._save()
        logger.debug("created task %s", task.id)
        return task

    def update_task(
        self,
        task_id: str,
        title: Optional[str] = None,
        estimate: Optional[int] = None,
    ) -> Task:
        t = self._require(task_id)
        new_title = _clean_title(title) if title is not None else t.title
        t.title = new_title
        if estimate is not None:
            t.estimated_count = _clean_estimate(estimate)
        self._save()
        return t

    def toggle_done(self, task_id: str) -> Task:
        t = self._require(task_id)
        t.is_done = not t.is_done
        self._save()
        return t

    def increment_completed(self, task_id: str) -> Optional[Task]:
        t = self.get(task_id)
        if t is None:
            return None
        t.completed_count += 1
        self._save()
        return t

    def delete_task(self, task_id: str) -> None:
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if t.id != task_id]
        if len(self.tasks) == before:
            return
        self._save()
        self._emit_removed([task_id])

    def clear_all(self, confirm: Callable[[str], bool]) -> bool:
        """
        Remove every task after an explicit yes from `confirm`.
        Returns True if the registry was cleared.
        """
        if not self.tasks:
            return False
        n = len(self.tasks)
        ok = confirm(
            f"Are you sure you want to clear all {n} tasks? "
            "This action cannot be undone."
        )
        if not ok:
            return False
        ids = [t.id for t in self.tasks]
        self.tasks = []
        self._save()
        self._emit_removed(ids)
        logger.info("cleared %d tasks", n)
        return True
