# -*- coding: utf-8 -*-

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from core.constants import (
    BREAK,
    DEFAULT_BREAK_MINUTES,
    DEFAULT_MUSIC_VOLUME,
    DEFAULT_WORK_MINUTES,
    FOCUS,
)


@dataclass
class Task:
    id: str
    title: str
    estimated_count: int = 1
    completed_count: int = 0
    is_done: bool = False

    @property
    def goal_reached(self) -> bool:
        return self.completed_count >= self.estimated_count

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Task":
        return cls(
            id=str(d["id"]),
            title=str(d["title"]),
            estimated_count=max(1, int(d.get("estimated_count", 1))),
            completed_count=max(0, int(d.get("completed_count", 0))),
            is_done=bool(d.get("is_done", False)),
        )


@dataclass
class Session:
    remaining_minutes: int = DEFAULT_WORK_MINUTES
    remaining_seconds: int = 0
    is_running: bool = False
    kind: str = FOCUS  # focus | break
    active_task_id: Optional[str] = None

    @property
    def remaining_sec(self) -> int:
        return self.remaining_minutes * 60 + self.remaining_seconds

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Session":
        kind = d.get("kind", FOCUS)
        if kind not in (FOCUS, BREAK):
            raise ValueError(f"Unknown session kind: {kind!r}")
        minutes = int(d["remaining_minutes"])
        seconds = int(d["remaining_seconds"])
        if minutes < 0 or not 0 <= seconds < 60:
            raise ValueError("Remaining time out of range.")
        active = d.get("active_task_id")
        return cls(
            remaining_minutes=minutes,
            remaining_seconds=seconds,
            # a running timer is never resumed across reloads
            is_running=False,
            kind=kind,
            active_task_id=str(active) if active else None,
        )


@dataclass
class Settings:
    work_minutes: int = DEFAULT_WORK_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    notifications_on: bool = True
    music_on: bool = False
    music_volume: float = DEFAULT_MUSIC_VOLUME

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Settings":
        base = cls()
        work = int(d.get("work_minutes", base.work_minutes))
        brk = int(d.get("break_minutes", base.break_minutes))
        if work < 1 or brk < 1:
            raise ValueError("Durations must be positive.")
        volume = float(d.get("music_volume", base.music_volume))
        return cls(
            work_minutes=work,
            break_minutes=brk,
            notifications_on=bool(d.get("notifications_on", base.notifications_on)),
            music_on=bool(d.get("music_on", base.music_on)),
            music_volume=min(1.0, max(0.0, volume)),
        )


@dataclass(frozen=True)
class Track:
    id: str
    title: str
    video_id: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Track":
        return cls(
            id=str(d["id"]),
            title=str(d["title"]),
            video_id=str(d["video_id"]),
            url=str(d["url"]),
        )
