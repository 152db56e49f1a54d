# -*- coding: utf-8 -*-

from typing import Any, Callable, Optional, Protocol

from core.constants import TICK_INTERVAL_MS


class Scheduler(Protocol):
    """What we need from a Tk widget (or a fake in tests)."""

    def after(self, ms: int, func: Callable[[], None]) -> Any: ...

    def after_cancel(self, job: Any) -> None: ...


class Ticker:
    """
    Periodic tick driven by the UI event loop.
    Scheduled while is_running() holds, cancelled as soon as it stops.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        callback: Callable[[], None],
        is_running: Callable[[], bool],
        interval_ms: int = TICK_INTERVAL_MS,
    ):
        self.scheduler = scheduler
        self.callback = callback
        self.is_running = is_running
        self.interval_ms = int(interval_ms)
        self._job: Optional[Any] = None

    @property
    def active(self) -> bool:
        return self._job is not None

    def sync(self) -> None:
        running = bool(self.is_running())
        if running == self.active:
            return
        if running:
            self._schedule()
        else:
            self._cancel()

    def stop(self) -> None:
        self._cancel()

    def _schedule(self) -> None:
        self._job = self.scheduler.after(self.interval_ms, self._fire)

    def _cancel(self) -> None:
        if self._job is not None:
            job, self._job = self._job, None
            self.scheduler.after_cancel(job)

    def _fire(self) -> None:
        self._job = None
        if not self.is_running():
            return
        self.callback()
        if self.is_running() and self._job is None:
            self._schedule()
