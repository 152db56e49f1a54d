#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import logging
import tkinter as tk
from typing import List, Optional

from core.config import AppConfig
from services.notify_service import Notifier
from services.playback_service import PlaybackController
from services.settings_service import SettingsService
from services.task_service import TaskService
from services.timer_service import TimerService
from services.vlc_player import open_player
from storage.db import Database
from storage.repos import PlaylistRepo, SessionRepo, SettingsRepo, TaskRepo
from ui.main_window import MainWindow
from ui.sandbox_window import SandboxWindow

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> AppConfig:
    cfg = AppConfig.from_env()
    parser = argparse.ArgumentParser(
        prog="time-playground",
        description="Pomodoro tracker with background music and a date/time sandbox.",
    )
    parser.add_argument("--db", default=cfg.db_path, help="SQLite file for saved state")
    parser.add_argument(
        "--log-level",
        default=cfg.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
    )
    parser.add_argument(
        "--script-time-limit",
        default=cfg.script_time_limit,
        type=float,
        help="seconds a sandbox script may run",
    )
    ns = parser.parse_args(argv)
    return AppConfig(
        db_path=ns.db,
        log_level=ns.log_level,
        script_time_limit=ns.script_time_limit,
    )


def main(argv: Optional[List[str]] = None):
    cfg = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = Database(db_path=cfg.db_path)
    db.init_schema()

    settings_repo = SettingsRepo(db)
    settings_service = SettingsService(settings_repo.load(), settings_repo)
    settings = settings_service.settings
    session_repo = SessionRepo(db)
    session = session_repo.load(settings)

    task_service = TaskService(TaskRepo(db))
    notifier = Notifier(settings)
    notifier.request_permission()
    timer_service = TimerService(
        session, settings_service, task_service, session_repo, notifier
    )

    root = tk.Tk()
    playback = PlaybackController(settings, session, PlaylistRepo(db), root)
    settings_service.add_listener(playback.on_settings_changed)

    track = playback.current_track()
    ready = open_player(root, track.video_id if track else None)
    playback.attach(ready)

    def open_sandbox():
        SandboxWindow(root, time_limit=cfg.script_time_limit)

    def shutdown():
        if playback.player is not None:
            playback.player.release()
        db.close()

    app = MainWindow(
        root,
        task_service,
        timer_service,
        settings_service,
        playback,
        notifier,
        open_sandbox=open_sandbox,
        on_close=shutdown,
    )
    logger.info("started with %s", cfg.db_path)
    app.run()


if __name__ == "__main__":
    main()
