# -*- coding: utf-8 -*-

from domain.models import Settings
from services.notify_service import DEFAULT, DENIED, GRANTED, Notifier


class _Backend:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def notify(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.sent.append(kwargs)


def test_nothing_is_sent_before_permission():
    backend = _Backend()
    n = Notifier(Settings(), backend=backend)
    assert n.permission == DEFAULT
    assert n.notify("t", "b") is False
    assert backend.sent == []


def test_sends_when_granted_and_enabled():
    backend = _Backend()
    n = Notifier(Settings(), backend=backend)
    assert n.request_permission() == GRANTED
    assert n.notify("Break Over!", "Ready to get back to work?") is True
    assert backend.sent[0]["title"] == "Break Over!"
    assert backend.sent[0]["app_name"] == "Time Playground"


def test_setting_off_suppresses():
    backend = _Backend()
    n = Notifier(Settings(notifications_on=False), backend=backend)
    n.request_permission()
    assert n.notify("t", "b") is False
    assert backend.sent == []


def test_missing_backend_is_denied():
    n = Notifier(Settings(), backend=None)
    assert n.request_permission() == DENIED
    assert n.notify("t", "b") is False


def test_unsupported_platform_flips_to_denied():
    n = Notifier(Settings(), backend=_Backend(NotImplementedError()))
    n.request_permission()
    assert n.notify("t", "b") is False
    assert n.permission == DENIED


def test_backend_failure_is_not_raised():
    n = Notifier(Settings(), backend=_Backend(OSError("dbus down")))
    n.request_permission()
    assert n.notify("t", "b") is False
    assert n.permission == GRANTED
