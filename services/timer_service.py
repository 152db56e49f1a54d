# -*- coding: utf-8 -*-

import logging
from typing import Callable, List, Optional, Set

from core.constants import BREAK, FOCUS
from core.session_engine import Boundary, SessionEngine, SessionSnapshot
from domain.models import Session, Task
from services.notify_service import Notifier
from services.settings_service import SettingsService
from services.task_service import TaskService
from storage.repos import SessionRepo

logger = logging.getLogger(__name__)


class TimerService:
    """
    Orchestrates:
    - SessionEngine state
    - Task completion counts on focus expiry
    - Notifications at session boundaries
    - Write-through of the session slot
    - Callbacks for UI
    """

    def __init__(
        self,
        session: Session,
        settings_service: SettingsService,
        task_service: TaskService,
        session_repo: SessionRepo,
        notifier: Notifier,
    ):
        self.session = session
        self.settings_service = settings_service
        self.task_service = task_service
        self.session_repo = session_repo
        self.notifier = notifier

        self.engine = SessionEngine(session, settings_service.settings)

        self._on_tick: Optional[Callable[[SessionSnapshot], None]] = None
        self._on_phase_change: Optional[Callable[[SessionSnapshot], None]] = None
        self._on_state_change: Optional[Callable[[SessionSnapshot], None]] = None

        task_service.set_on_removed(self._on_tasks_removed)
        settings_service.add_listener(self._on_settings_changed)

        # the saved reference may point at a task deleted in another run
        if session.active_task_id and task_service.get(session.active_task_id) is None:
            session.active_task_id = None
            self._save()

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[SessionSnapshot], None]) -> None:
        self._on_tick = fn

    def set_on_phase_change(self, fn: Callable[[SessionSnapshot], None]) -> None:
        self._on_phase_change = fn

    def set_on_state_change(self, fn: Callable[[SessionSnapshot], None]) -> None:
        self._on_state_change = fn

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.engine.snapshot())

    def _emit_phase_change(self) -> None:
        if self._on_phase_change:
            self._on_phase_change(self.engine.snapshot())

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.engine.snapshot())

    def _save(self) -> None:
        self.session_repo.save(self.session)

    def _changed(self) -> None:
        self._save()
        self._emit_state_change()
        self._emit_tick()

    # ----- Public API -----
    def get_snapshot(self) -> SessionSnapshot:
        return self.engine.snapshot()

    def is_running(self) -> bool:
        return self.session.is_running

    def active_task(self) -> Optional[Task]:
        return self.task_service.get(self.session.active_task_id)

    def start(self, task_id: Optional[str] = None) -> None:
        self.engine.start(task_id)
        self._changed()

    def toggle_run(self) -> None:
        self.engine.toggle_run()
        self._changed()

    def reset(self) -> None:
        self.engine.reset()
        self._changed()

    def switch_kind(self) -> bool:
        if not self.engine.switch_kind():
            return False
        self._changed()
        return True

    def tick(self) -> None:
        """
        Should be called once per second by the UI loop.
        """
        if not self.session.is_running:
            return

        boundary = self.engine.tick()
        self._save()

        if boundary is None:
            self._emit_tick()
            return

        self._finish(boundary)
        self._emit_phase_change()
        self._emit_state_change()
        self._emit_tick()

    # ----- internals -----
    def _finish(self, boundary: Boundary) -> None:
        if boundary.finished == FOCUS:
            if not boundary.task_id:
                return
            task = self.task_service.increment_completed(boundary.task_id)
            if task is None:
                # task vanished while the session ran
                self.session.active_task_id = None
                self._save()
                return
            logger.info(
                "pomodoro complete for %s (%d/%d)",
                task.id,
                task.completed_count,
                task.estimated_count,
            )
            self.notifier.notify("Pomodoro Complete!", "Great work! Time for a break.")
        elif boundary.finished == BREAK:
            self.notifier.notify("Break Over!", "Ready to get back to work?")

    def _on_tasks_removed(self, ids: List[str]) -> None:
        if self.session.active_task_id not in ids:
            return
        self.session.active_task_id = None
        self.session.is_running = False
        self._changed()

    def _on_settings_changed(self, changed: Set[str]) -> None:
        kind = self.session.kind
        key = "break_minutes" if kind == BREAK else "work_minutes"
        if key in changed and self.engine.resize(kind):
            self._changed()
