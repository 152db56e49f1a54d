# -*- coding: utf-8 -*-

import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional

from core.ticker import Scheduler

logger = logging.getLogger(__name__)

# audio only, no window, no OSD
VLC_ARGS = ("--no-xlib", "--no-video", "--no-video-title-show", "--quiet")

YDL_OPTS = {
    "format": "bestaudio/best",
    "quiet": True,
    "skip_download": True,
    "noplaylist": True,
    "source_address": "0.0.0.0",
}


def resolve_stream(video_id: str) -> Optional[str]:
    import yt_dlp

    page_url = f"https://www.youtube.com/watch?v={video_id}"
    with yt_dlp.YoutubeDL(YDL_OPTS) as ydl:
        info = ydl.extract_info(page_url, download=False)
    if not isinstance(info, dict):
        return None
    if info.get("url"):
        return info["url"]
    entries = info.get("entries") or []
    if entries and isinstance(entries[0], dict):
        return entries[0].get("url")
    return None


class VlcPlayer:
    """
    Background audio player for YouTube tracks.

    VLC and yt-dlp work happens off the UI thread; results come back through
    scheduler.after(0, ...), so every public method is UI-thread only.
    """

    def __init__(self, vlc: Any, instance: Any, scheduler: Scheduler):
        self._vlc = vlc
        self.instance = instance
        self.scheduler = scheduler
        self.media_player = instance.media_player_new()
        self.on_end: Optional[Callable[[], None]] = None

        self._streams: Dict[str, str] = {}
        self._wanted: Optional[str] = None
        self._loaded: Optional[str] = None
        self._play_pending = False

        events = self.media_player.event_manager()
        events.event_attach(vlc.EventType.MediaPlayerEndReached, self._on_end_reached)

    def load(self, video_id: str) -> None:
        if video_id == self._wanted:
            return
        self._wanted = video_id
        self._play_pending = False
        self.media_player.stop()

        url = self._streams.get(video_id)
        if url:
            self._set_media(video_id, url)
            return
        threading.Thread(target=self._resolve, args=(video_id,), daemon=True).start()

    def _resolve(self, video_id: str) -> None:
        try:
            url = resolve_stream(video_id)
        except Exception:
            logger.warning("Could not resolve stream for %s", video_id, exc_info=True)
            url = None
        self.scheduler.after(0, lambda: self._stream_ready(video_id, url))

    def _stream_ready(self, video_id: str, url: Optional[str]) -> None:
        if not url:
            logger.warning("No audio stream for %s", video_id)
            return
        self._streams[video_id] = url
        if video_id != self._wanted:
            return
        self._set_media(video_id, url)

    def _set_media(self, video_id: str, url: str) -> None:
        self.media_player.set_media(self.instance.media_new(url))
        self._loaded = video_id
        if self._play_pending:
            self._play_pending = False
            self.media_player.play()

    def play(self) -> None:
        if self._loaded is None or self._loaded != self._wanted:
            self._play_pending = True
            return
        if self.media_player.play() == -1:
            logger.warning("VLC refused to play %s", self._loaded)

    def pause(self) -> None:
        self._play_pending = False
        state = self.media_player.get_state()
        if state in (self._vlc.State.Opening, self._vlc.State.Buffering):
            # set_pause is ignored until the stream is open
            self.media_player.stop()
        else:
            self.media_player.set_pause(1)

    def set_volume(self, volume: int) -> None:
        self.media_player.audio_set_volume(max(0, min(100, int(volume))))

    def _on_end_reached(self, event) -> None:
        # VLC thread; libvlc must not be called back from here
        self.scheduler.after(0, self._fire_end)

    def _fire_end(self) -> None:
        self._wanted = None
        if self.on_end:
            self.on_end()

    def release(self) -> None:
        try:
            self.media_player.stop()
            self.media_player.release()
            self.instance.release()
        except Exception:
            logger.debug("VLC release failed", exc_info=True)


def open_player(scheduler: Scheduler, initial_video_id: Optional[str] = None) -> "Future[VlcPlayer]":
    """
    Create the player on a worker thread.
    The returned future resolves exactly once, with the player or the error.
    """
    ready: "Future[VlcPlayer]" = Future()

    def _create() -> None:
        try:
            import vlc

            instance = vlc.Instance(*VLC_ARGS)
            if instance is None:
                raise RuntimeError("libvlc could not be initialised")
            player = VlcPlayer(vlc, instance, scheduler)
        except Exception as e:
            ready.set_exception(e)
            return
        if initial_video_id:
            scheduler.after(0, lambda: player.load(initial_video_id))
        ready.set_result(player)

    threading.Thread(target=_create, daemon=True).start()
    return ready
