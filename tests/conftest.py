# -*- coding: utf-8 -*-

import pytest

from services.notify_service import Notifier
from services.settings_service import SettingsService
from services.task_service import TaskService
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import SessionRepo, SettingsRepo, TaskRepo


class FakeScheduler:
    """Collects after() jobs; run them by hand with run_pending()."""

    def __init__(self):
        self.jobs = {}
        self.cancelled = []
        self._next = 0

    def after(self, ms, func):
        self._next += 1
        job = f"after#{self._next}"
        self.jobs[job] = (ms, func)
        return job

    def after_cancel(self, job):
        self.cancelled.append(job)
        self.jobs.pop(job, None)

    def delays(self):
        return [ms for ms, _ in self.jobs.values()]

    def run_pending(self):
        jobs, self.jobs = self.jobs, {}
        for _, func in jobs.values():
            func()


class FakePlayer:
    def __init__(self):
        self.on_end = None
        self.calls = []
        self.volume = None

    def load(self, video_id):
        self.calls.append(("load", video_id))

    def play(self):
        self.calls.append(("play",))

    def pause(self):
        self.calls.append(("pause",))

    def set_volume(self, volume):
        self.volume = volume

    def release(self):
        self.calls.append(("release",))

    def loaded(self):
        return [c[1] for c in self.calls if c[0] == "load"]


class FakeBackend:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def notify(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.sent.append(kwargs)


@pytest.fixture
def db():
    d = Database(":memory:")
    d.init_schema()
    yield d
    d.close()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def settings_service(db):
    repo = SettingsRepo(db)
    return SettingsService(repo.load(), repo)


@pytest.fixture
def task_service(db):
    return TaskService(TaskRepo(db))


@pytest.fixture
def notifier(settings_service, backend):
    n = Notifier(settings_service.settings, backend=backend)
    n.request_permission()
    return n


@pytest.fixture
def make_timer(db, settings_service, task_service, notifier):
    def _make(session=None):
        repo = SessionRepo(db)
        if session is None:
            session = repo.load(settings_service.settings)
        return TimerService(session, settings_service, task_service, repo, notifier)

    return _make


@pytest.fixture
def player():
    return FakePlayer()
