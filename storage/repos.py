# storage/repos.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import json
import logging
from typing import Any, List, Optional

from core.constants import SLOT_PLAYLIST, SLOT_SESSION, SLOT_SETTINGS, SLOT_TASKS
from domain.models import Session, Settings, Task, Track
from storage.db import Database

logger = logging.getLogger(__name__)


class AppStateRepo:
    def __init__(self, db: Database):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        row = self.db.conn.execute(
            "SELECT value FROM app_state WHERE key=?",
            (key,),
        ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.db.conn.execute(
            """
            INSERT INTO app_state(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self.db.conn.commit()

    def delete(self, key: str) -> None:
        self.db.conn.execute("DELETE FROM app_state WHERE key=?", (key,))
        self.db.conn.commit()


class _SlotRepo:
    """
    One JSON document per aggregate in app_state.
    A slot that fails to parse is reported and treated as absent, so the
    aggregate falls back to its default without touching the other slots.
    """

    key = ""

    def __init__(self, db: Database):
        self.state = AppStateRepo(db)

    def _read(self) -> Optional[Any]:
        raw = self.state.get(self.key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Failed to parse saved %s, using defaults", self.key)
            return None

    def _write(self, data: Any) -> None:
        self.state.set(self.key, json.dumps(data))

    def _malformed(self, exc: Exception) -> None:
        logger.warning("Malformed saved %s (%s), using defaults", self.key, exc)


class TaskRepo(_SlotRepo):
    key = SLOT_TASKS

    def load(self) -> List[Task]:
        data = self._read()
        if data is None:
            return []
        try:
            return [Task.from_dict(d) for d in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self._malformed(e)
            return []

    def save(self, tasks: List[Task]) -> None:
        self._write([t.to_dict() for t in tasks])


class SettingsRepo(_SlotRepo):
    key = SLOT_SETTINGS

    def load(self) -> Settings:
        data = self._read()
        if data is None:
            return Settings()
        try:
            return Settings.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self._malformed(e)
            return Settings()

    def save(self, settings: Settings) -> None:
        self._write(settings.to_dict())


class SessionRepo(_SlotRepo):
    key = SLOT_SESSION

    def load(self, settings: Optional[Settings] = None) -> Session:
        default = Session(
            remaining_minutes=(settings or Settings()).work_minutes,
        )
        data = self._read()
        if data is None:
            return default
        try:
            return Session.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self._malformed(e)
            return default

    def save(self, session: Session) -> None:
        self._write(session.to_dict())


class PlaylistRepo(_SlotRepo):
    key = SLOT_PLAYLIST

    def load(self) -> List[Track]:
        data = self._read()
        if data is None:
            return []
        try:
            return [Track.from_dict(d) for d in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self._malformed(e)
            return []

    def save(self, playlist: List[Track]) -> None:
        self._write([t.to_dict() for t in playlist])
