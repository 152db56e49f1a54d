# -*- coding: utf-8 -*-

from types import SimpleNamespace

import pytest

from services.vlc_player import VlcPlayer


class _MediaPlayer:
    def __init__(self):
        self.calls = []
        self.media = None
        self.playing = False
        self.volume = None
        self.handlers = {}
        self.state = "playing"

    def event_manager(self):
        return self

    def event_attach(self, event_type, handler):
        self.handlers[event_type] = handler

    def set_media(self, media):
        self.media = media

    def play(self):
        self.calls.append("play")
        self.playing = True
        return 0

    def stop(self):
        self.calls.append("stop")
        self.playing = False

    def is_playing(self):
        return self.playing

    def get_state(self):
        return self.state

    def set_pause(self, flag):
        self.calls.append("pause")
        self.playing = not flag

    def audio_set_volume(self, volume):
        self.volume = volume

    def release(self):
        self.calls.append("release")


class _Instance:
    def __init__(self):
        self.mp = _MediaPlayer()

    def media_player_new(self):
        return self.mp

    def media_new(self, url):
        return ("media", url)

    def release(self):
        pass


_VLC = SimpleNamespace(
    EventType=SimpleNamespace(MediaPlayerEndReached="end"),
    State=SimpleNamespace(Opening="opening", Buffering="buffering"),
)


@pytest.fixture(autouse=True)
def _no_network(monkeypatch):
    monkeypatch.setattr("services.vlc_player.resolve_stream", lambda video_id: None)


def _player(scheduler, streams=None):
    instance = _Instance()
    p = VlcPlayer(_VLC, instance, scheduler)
    p._streams.update(streams or {})
    return p, instance.mp


def test_play_waits_until_stream_is_set(scheduler):
    p, mp = _player(scheduler)
    p.load("abc")
    p.play()
    assert "play" not in mp.calls

    p._stream_ready("abc", "http://stream/abc")
    assert mp.media == ("media", "http://stream/abc")
    assert mp.calls[-1] == "play"


def test_stale_stream_is_cached_but_not_loaded(scheduler):
    p, mp = _player(scheduler, {"new": "http://stream/new"})
    p.load("old")
    p.load("new")
    p._stream_ready("old", "http://stream/old")
    assert mp.media == ("media", "http://stream/new")
    assert p._streams["old"] == "http://stream/old"


def test_reloading_same_track_is_a_no_op(scheduler):
    p, mp = _player(scheduler, {"a": "http://stream/a"})
    p.load("a")
    mp.calls.clear()
    p.load("a")
    assert mp.calls == []


def test_pause_and_volume(scheduler):
    p, mp = _player(scheduler, {"a": "http://stream/a"})
    p.load("a")
    p.play()
    p.pause()
    assert mp.calls[-1] == "pause"
    p.set_volume(250)
    assert mp.volume == 100


def test_end_of_track_is_reported_on_scheduler(scheduler):
    p, mp = _player(scheduler, {"a": "http://stream/a"})
    ended = []
    p.on_end = lambda: ended.append(True)
    p.load("a")

    mp.handlers["end"](None)
    assert ended == []
    scheduler.run_pending()
    assert ended == [True]

    # the same track can be loaded again after it ended
    mp.calls.clear()
    p.load("a")
    assert "stop" in mp.calls


def test_pause_while_stream_is_opening_stops_it(scheduler):
    p, mp = _player(scheduler, {"a": "http://stream/a"})
    p.load("a")
    p.play()
    mp.state = "opening"
    mp.calls.clear()

    p.pause()

    assert mp.calls == ["stop"]
    assert not mp.playing


def test_pause_before_play_starts_is_not_dropped(scheduler):
    p, mp = _player(scheduler, {"a": "http://stream/a"})
    p.load("a")
    mp.state = "buffering"
    p.play()
    p.pause()
    assert mp.calls[-1] == "stop"
