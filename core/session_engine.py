# -*- coding: utf-8 -*-

from dataclasses import dataclass
from typing import Optional

from core.constants import BREAK, FOCUS
from domain.models import Session, Settings


@dataclass(frozen=True)
class SessionSnapshot:
    kind: str  # "focus" | "break"
    remaining_minutes: int
    remaining_seconds: int
    is_running: bool
    active_task_id: Optional[str]

    @property
    def remaining_sec(self) -> int:
        return self.remaining_minutes * 60 + self.remaining_seconds


@dataclass(frozen=True)
class Boundary:
    finished: str  # kind that just ran out
    task_id: Optional[str]


class SessionEngine:
    """
    Pure countdown state machine (no Tkinter).
    Mutates the Session it was given in place; the caller triggers tick()
    once per second while the session is running.
    """

    def __init__(self, session: Session, settings: Settings):
        self.session = session
        self.settings = settings

    def duration_for(self, kind: str) -> int:
        return self.settings.break_minutes if kind == BREAK else self.settings.work_minutes

    def snapshot(self) -> SessionSnapshot:
        s = self.session
        return SessionSnapshot(
            kind=s.kind,
            remaining_minutes=s.remaining_minutes,
            remaining_seconds=s.remaining_seconds,
            is_running=s.is_running,
            active_task_id=s.active_task_id,
        )

    def _set_remaining(self, kind: str) -> None:
        self.session.remaining_minutes = self.duration_for(kind)
        self.session.remaining_seconds = 0

    def start(self, task_id: Optional[str] = None) -> None:
        # always a fresh focus session, whatever was going on before
        s = self.session
        s.kind = FOCUS
        self._set_remaining(FOCUS)
        s.active_task_id = task_id
        s.is_running = True

    def toggle_run(self) -> None:
        self.session.is_running = not self.session.is_running

    def pause(self) -> None:
        self.session.is_running = False

    def reset(self) -> None:
        self._set_remaining(self.session.kind)
        self.session.is_running = False

    def switch_kind(self) -> bool:
        s = self.session
        if s.is_running:
            return False
        s.kind = BREAK if s.kind == FOCUS else FOCUS
        self._set_remaining(s.kind)
        if s.kind == BREAK:
            s.active_task_id = None
        return True

    def resize(self, kind: str) -> bool:
        """Reset the remaining time to the configured duration if idle in `kind`."""
        s = self.session
        if s.is_running or s.kind != kind:
            return False
        self._set_remaining(kind)
        return True

    def tick(self) -> Optional[Boundary]:
        """
        Returns a Boundary when this tick finished the current session.
        """
        s = self.session
        if not s.is_running:
            return None

        if s.remaining_seconds > 0:
            s.remaining_seconds -= 1
        elif s.remaining_minutes > 0:
            s.remaining_minutes -= 1
            s.remaining_seconds = 59

        if s.remaining_minutes > 0 or s.remaining_seconds > 0:
            return None

        finished = s.kind
        boundary = Boundary(
            finished=finished,
            task_id=s.active_task_id if finished == FOCUS else None,
        )
        s.kind = BREAK if finished == FOCUS else FOCUS
        self._set_remaining(s.kind)
        s.is_running = False
        return boundary
