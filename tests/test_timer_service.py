# -*- coding: utf-8 -*-

from core.constants import BREAK, FOCUS
from domain.models import Session
from storage.repos import SessionRepo


def _run_out(timer):
    for _ in range(timer.get_snapshot().remaining_sec):
        timer.tick()


def test_focus_completion_increments_task_and_notifies(
    make_timer, task_service, settings_service, backend
):
    settings_service.update(work_minutes=1)
    task = task_service.create_task("write", 2)
    timer = make_timer()
    phases = []
    timer.set_on_phase_change(phases.append)

    timer.start(task.id)
    _run_out(timer)

    assert task_service.get(task.id).completed_count == 1
    assert [p.kind for p in phases] == [BREAK]
    snap = timer.get_snapshot()
    assert snap.kind == BREAK and not snap.is_running
    assert snap.remaining_minutes == settings_service.settings.break_minutes
    assert backend.sent[0]["title"] == "Pomodoro Complete!"
    assert backend.sent[0]["message"] == "Great work! Time for a break."


def test_focus_completion_without_task_is_silent(make_timer, settings_service, backend):
    settings_service.update(work_minutes=1)
    timer = make_timer()
    timer.start()
    _run_out(timer)
    assert timer.get_snapshot().kind == BREAK
    assert backend.sent == []


def test_break_completion_notifies(make_timer, settings_service, backend):
    settings_service.update(break_minutes=1)
    timer = make_timer()
    assert timer.switch_kind() is True
    timer.toggle_run()
    _run_out(timer)

    assert timer.get_snapshot().kind == FOCUS
    assert backend.sent[-1]["title"] == "Break Over!"


def test_notifications_respect_setting(make_timer, task_service, settings_service, backend):
    settings_service.update(work_minutes=1, notifications_on=False)
    task = task_service.create_task("a")
    timer = make_timer()
    timer.start(task.id)
    _run_out(timer)
    assert task_service.get(task.id).completed_count == 1
    assert backend.sent == []


def test_deleting_active_task_clears_reference_and_stops(make_timer, task_service):
    task = task_service.create_task("a")
    other = task_service.create_task("b")
    timer = make_timer()
    timer.start(task.id)

    task_service.delete_task(other.id)
    assert timer.get_snapshot().active_task_id == task.id

    task_service.delete_task(task.id)
    snap = timer.get_snapshot()
    assert snap.active_task_id is None
    assert snap.is_running is False


def test_clear_all_clears_active_task(make_timer, task_service):
    task = task_service.create_task("a")
    timer = make_timer()
    timer.start(task.id)
    task_service.clear_all(lambda m: True)
    assert timer.active_task() is None
    assert not timer.is_running()


def test_task_deleted_behind_the_registry_is_not_credited(
    make_timer, task_service, settings_service, backend
):
    settings_service.update(work_minutes=1)
    task = task_service.create_task("a")
    timer = make_timer()
    timer.start(task.id)
    # drop it without going through delete_task
    task_service.tasks.clear()
    _run_out(timer)

    assert timer.get_snapshot().active_task_id is None
    assert backend.sent == []


def test_stale_task_reference_is_dropped_on_load(db, make_timer):
    SessionRepo(db).save(Session(active_task_id="gone"))
    timer = make_timer()
    assert timer.get_snapshot().active_task_id is None
    assert SessionRepo(db).load().active_task_id is None


def test_duration_change_resizes_idle_session_of_that_kind(make_timer, settings_service):
    timer = make_timer()
    settings_service.update(work_minutes=40)
    snap = timer.get_snapshot()
    assert (snap.remaining_minutes, snap.remaining_seconds) == (40, 0)

    settings_service.update(break_minutes=10)
    assert timer.get_snapshot().remaining_minutes == 40


def test_duration_change_leaves_running_session_alone(make_timer, settings_service):
    timer = make_timer()
    timer.start()
    timer.tick()
    settings_service.update(work_minutes=50)
    snap = timer.get_snapshot()
    assert (snap.remaining_minutes, snap.remaining_seconds) == (24, 59)


def test_every_change_is_written_through(db, make_timer):
    timer = make_timer()
    timer.start()
    timer.tick()
    saved = SessionRepo(db).load()
    assert (saved.remaining_minutes, saved.remaining_seconds) == (24, 59)
    # a reload never resumes a running session
    assert saved.is_running is False


def test_state_change_callback_fires_on_controls(make_timer):
    timer = make_timer()
    seen = []
    timer.set_on_state_change(seen.append)
    timer.start()
    timer.toggle_run()
    timer.reset()
    assert [s.is_running for s in seen] == [True, False, False]
