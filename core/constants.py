# -*- coding: utf-8 -*-

APP_NAME = "Time Playground"

# Session kinds
FOCUS = "focus"
BREAK = "break"

# Settings defaults / input limits (minutes)
DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
MAX_WORK_MINUTES = 60
MAX_BREAK_MINUTES = 30
DEFAULT_MUSIC_VOLUME = 0.5

# Task estimate limits (pomodoros)
DEFAULT_ESTIMATE = 1
MAX_ESTIMATE = 20

# Persisted slots in the key-value store
SLOT_TASKS = "pomodoro-todos"
SLOT_SETTINGS = "pomodoro-settings"
SLOT_SESSION = "pomodoro-timer"
SLOT_PLAYLIST = "youtube-playlist"

# Timing
TICK_INTERVAL_MS = 1000
RESUME_DELAY_MS = 500
SANDBOX_AUTORUN_MS = 1000

# Sandbox
SCRIPT_TIME_LIMIT_SEC = 2.0
MAX_RANGE = 1_000_000

DEFAULT_DB_PATH = "time_playground.db"
