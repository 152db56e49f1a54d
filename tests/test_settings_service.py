# -*- coding: utf-8 -*-

import pytest

from core.config import AppConfig
from core.constants import DEFAULT_DB_PATH, MAX_WORK_MINUTES, SCRIPT_TIME_LIMIT_SEC
from services.settings_service import coerce_estimate, coerce_minutes, coerce_volume
from storage.repos import SettingsRepo


@pytest.mark.parametrize(
    "raw, expected",
    [("30", 30), (" 15 ", 15), ("0", 25), ("-3", 25), ("abc", 25), (None, 25), ("999", 60)],
)
def test_coerce_minutes(raw, expected):
    assert coerce_minutes(raw, 25, MAX_WORK_MINUTES) == expected


def test_coerce_estimate_and_volume():
    assert coerce_estimate("3") == 3
    assert coerce_estimate("") == 1
    assert coerce_estimate("50") == 20
    assert coerce_volume("0.4") == pytest.approx(0.4)
    assert coerce_volume(7) == 1.0
    assert coerce_volume(-1) == 0.0
    assert coerce_volume("loud") == 0.5


def test_update_merges_persists_and_notifies(db, settings_service):
    seen = []
    settings_service.add_listener(seen.append)

    changed = settings_service.update(work_minutes=45, music_on=True)

    assert changed == {"work_minutes", "music_on"}
    assert seen == [{"work_minutes", "music_on"}]
    reloaded = SettingsRepo(db).load()
    assert reloaded.work_minutes == 45
    assert reloaded.music_on is True
    assert reloaded.break_minutes == 5


def test_update_rejects_unknown_keys(settings_service):
    with pytest.raises(ValueError, match="Unknown setting"):
        settings_service.update(theme="dark")
    assert settings_service.settings.work_minutes == 25


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("TIME_PLAYGROUND_DB", "/tmp/x.db")
    monkeypatch.setenv("TIME_PLAYGROUND_LOG_LEVEL", "debug")
    monkeypatch.setenv("TIME_PLAYGROUND_SCRIPT_LIMIT", "0.5")
    cfg = AppConfig.from_env()
    assert (cfg.db_path, cfg.log_level, cfg.script_time_limit) == ("/tmp/x.db", "DEBUG", 0.5)


def test_config_ignores_bad_env(monkeypatch):
    monkeypatch.delenv("TIME_PLAYGROUND_DB", raising=False)
    monkeypatch.delenv("TIME_PLAYGROUND_LOG_LEVEL", raising=False)
    monkeypatch.setenv("TIME_PLAYGROUND_SCRIPT_LIMIT", "-1")
    cfg = AppConfig.from_env()
    assert cfg.db_path == DEFAULT_DB_PATH
    assert cfg.log_level == "INFO"
    assert cfg.script_time_limit == SCRIPT_TIME_LIMIT_SEC
