# -*- coding: utf-8 -*-

import logging
from typing import Any, Callable, List, Set

from core.constants import DEFAULT_ESTIMATE, DEFAULT_MUSIC_VOLUME, MAX_ESTIMATE
from domain.models import Settings
from storage.repos import SettingsRepo

logger = logging.getLogger(__name__)


# ---- UI input coercion (runs before anything reaches the store) ----
def coerce_minutes(raw: Any, default: int, upper: int) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    if value < 1:
        return default
    return min(value, upper)


def coerce_estimate(raw: Any) -> int:
    return coerce_minutes(raw, DEFAULT_ESTIMATE, MAX_ESTIMATE)


def coerce_volume(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_MUSIC_VOLUME
    return min(1.0, max(0.0, value))


class SettingsService:
    """
    Flat settings record with a single merge-style update.
    Values are trusted; listeners get the set of changed keys.
    """

    def __init__(self, settings: Settings, settings_repo: SettingsRepo):
        self.settings = settings
        self.repo = settings_repo
        self._listeners: List[Callable[[Set[str]], None]] = []

    def add_listener(self, fn: Callable[[Set[str]], None]) -> None:
        self._listeners.append(fn)

    def update(self, **changes: Any) -> Set[str]:
        known = set(self.settings.to_dict())
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        for key, value in changes.items():
            setattr(self.settings, key, value)
        self.repo.save(self.settings)

        changed = set(changes)
        logger.debug("settings updated: %s", sorted(changed))
        for fn in self._listeners:
            fn(changed)
        return changed
