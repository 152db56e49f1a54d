# -*- coding: utf-8 -*-

import logging
import re
import uuid
from concurrent.futures import Future
from typing import Any, List, Optional, Protocol, Set

from core.constants import FOCUS, RESUME_DELAY_MS
from core.ticker import Scheduler
from domain.models import Session, Settings, Track
from storage.repos import PlaylistRepo

logger = logging.getLogger(__name__)

_VIDEO_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/embed/([^&\n?#]+)"),
    re.compile(r"youtube\.com/v/([^&\n?#]+)"),
)


def extract_video_id(url: str) -> Optional[str]:
    for pattern in _VIDEO_ID_PATTERNS:
        m = pattern.search(url or "")
        if m:
            return m.group(1)
    return None


class Player(Protocol):
    """Opaque external player handle."""

    on_end: Any

    def load(self, video_id: str) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def set_volume(self, volume: int) -> None: ...

    def release(self) -> None: ...


class PlaybackController:
    """
    Playlist + background music policy.

    Music plays while (music on AND session running AND focus AND playlist
    non-empty) and pauses as soon as any of those stops holding. Call sync()
    after every change that can affect it.

    Player operations are skipped until the player handle is ready.
    """

    def __init__(
        self,
        settings: Settings,
        session: Session,
        playlist_repo: PlaylistRepo,
        scheduler: Scheduler,
    ):
        self.settings = settings
        self.session = session
        self.repo = playlist_repo
        self.scheduler = scheduler

        self.playlist: List[Track] = playlist_repo.load()
        self.current_index = 0
        self.is_playing = False
        self.player: Optional[Player] = None
        self._resume_job: Optional[Any] = None

    # ---- readiness ----
    def attach(self, ready: "Future[Player]") -> None:
        """Adopt the player once `ready` resolves (on the scheduler's thread)."""
        ready.add_done_callback(self._on_ready_done)

    def _on_ready_done(self, fut: "Future[Player]") -> None:
        try:
            player = fut.result()
        except Exception:
            logger.warning("Player failed to initialise; music disabled.", exc_info=True)
            return
        self.scheduler.after(0, lambda: self.adopt(player))

    def adopt(self, player: Player) -> None:
        if self.player is not None:
            return
        self.player = player
        player.on_end = self.advance
        player.set_volume(self._volume_percent())
        track = self.current_track()
        if track is not None:
            player.load(track.video_id)
        logger.info("player ready")
        self.sync()

    # ---- playlist ----
    def current_track(self) -> Optional[Track]:
        if 0 <= self.current_index < len(self.playlist):
            return self.playlist[self.current_index]
        return None

    def _save(self) -> None:
        self.repo.save(self.playlist)

    def add_track(self, url: str) -> Track:
        url = (url or "").strip()
        video_id = extract_video_id(url)
        if not video_id:
            raise ValueError("Please enter a valid YouTube URL")

        track = Track(
            id=str(uuid.uuid4()),
            title=f"YouTube Video {video_id}",
            video_id=video_id,
            url=url,
        )
        self.playlist.append(track)
        self._save()
        if len(self.playlist) == 1 and self.player is not None:
            self.player.load(track.video_id)
        self.sync()
        return track

    def remove_track(self, track_id: str) -> None:
        idx = next((i for i, t in enumerate(self.playlist) if t.id == track_id), None)
        if idx is None:
            return
        was_current = idx == self.current_index
        del self.playlist[idx]
        if not self.playlist or self.current_index >= len(self.playlist):
            self.current_index = 0
        self._save()
        if was_current and self.playlist:
            self._load_current()
        self.sync()

    # ---- transport ----
    def _load_current(self) -> None:
        track = self.current_track()
        if self.player is None or track is None:
            return
        self.player.load(track.video_id)
        if self.is_playing:
            # give the player time to open the new stream
            self._cancel_resume()
            self._resume_job = self.scheduler.after(RESUME_DELAY_MS, self._resume)

    def _resume(self) -> None:
        self._resume_job = None
        if not self.is_playing:
            return
        if self.should_play():
            self.play()
        else:
            self.pause()

    def _cancel_resume(self) -> None:
        if self._resume_job is not None:
            job, self._resume_job = self._resume_job, None
            self.scheduler.after_cancel(job)

    def advance(self) -> None:
        if not self.playlist:
            return
        self.current_index = (self.current_index + 1) % len(self.playlist)
        self._load_current()

    def retreat(self) -> None:
        if not self.playlist:
            return
        n = len(self.playlist)
        self.current_index = (self.current_index - 1 + n) % n
        self._load_current()

    def play(self) -> None:
        if self.player is not None and self.settings.music_on and self.playlist:
            self.player.play()
            self.is_playing = True

    def pause(self) -> None:
        self._cancel_resume()
        if self.player is not None:
            self.player.pause()
            self.is_playing = False

    def toggle_music(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    # ---- settings pass-through ----
    def _volume_percent(self) -> int:
        return int(round(self.settings.music_volume * 100))

    def set_volume(self, volume: float) -> None:
        if self.player is not None:
            self.player.set_volume(int(round(volume * 100)))

    def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self.sync()
        else:
            self.pause()

    def on_settings_changed(self, changed: Set[str]) -> None:
        if "music_volume" in changed:
            self.set_volume(self.settings.music_volume)
        if "music_on" in changed:
            self.set_enabled(self.settings.music_on)

    # ---- policy ----
    def should_play(self) -> bool:
        return bool(
            self.settings.music_on
            and self.session.is_running
            and self.session.kind == FOCUS
            and self.playlist
        )

    def sync(self) -> None:
        if self.should_play():
            if not self.is_playing:
                self.play()
        else:
            self.pause()
