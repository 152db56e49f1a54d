# -*- coding: utf-8 -*-

import os
from dataclasses import dataclass

from core.constants import DEFAULT_DB_PATH, SCRIPT_TIME_LIMIT_SEC


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass
class AppConfig:
    db_path: str = DEFAULT_DB_PATH
    log_level: str = "INFO"
    script_time_limit: float = SCRIPT_TIME_LIMIT_SEC

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            db_path=os.environ.get("TIME_PLAYGROUND_DB") or DEFAULT_DB_PATH,
            log_level=(os.environ.get("TIME_PLAYGROUND_LOG_LEVEL") or "INFO").upper(),
            script_time_limit=_env_float(
                "TIME_PLAYGROUND_SCRIPT_LIMIT", SCRIPT_TIME_LIMIT_SEC
            ),
        )
