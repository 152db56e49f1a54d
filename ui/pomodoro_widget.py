# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import Callable

from core.constants import BREAK
from core.session_engine import SessionSnapshot
from core.ticker import Ticker
from services.playback_service import PlaybackController
from services.timer_service import TimerService


def format_time(minutes: int, seconds: int) -> str:
    return f"{max(0, minutes):02d}:{max(0, seconds):02d}"


class PomodoroWidget(ttk.Frame):
    def __init__(
        self,
        master,
        timer_service: TimerService,
        playback: PlaybackController,
        on_request_refresh: Callable[[], None],
    ):
        super().__init__(master)

        self.timer_service = timer_service
        self.playback = playback
        self.on_request_refresh = on_request_refresh

        self.ticker = Ticker(self, timer_service.tick, timer_service.is_running)

        self._build_ui()

        # wire callbacks from service -> widget UI
        self.timer_service.set_on_tick(self._on_tick)
        self.timer_service.set_on_phase_change(self._on_phase_change)
        self.timer_service.set_on_state_change(self._on_state_change)

        # initial render
        self._render(self.timer_service.get_snapshot())
        self.render_music()

    def _build_ui(self):
        self.columnconfigure(0, weight=1)

        self.phase_var = tk.StringVar(value="Focus Time")
        self.time_var = tk.StringVar(value="25:00")
        self.info_var = tk.StringVar(value="")

        self.phase_label = ttk.Label(self, textvariable=self.phase_var, font=("Sans", 14, "bold"))
        self.phase_label.grid(row=0, column=0)

        self.time_label = ttk.Label(
            self, textvariable=self.time_var, font=("Sans", 48, "bold")
        )
        self.time_label.grid(row=1, column=0, pady=(6, 4))

        self.info_label = ttk.Label(self, textvariable=self.info_var)
        self.info_label.grid(row=2, column=0, pady=(0, 10))

        btns = ttk.Frame(self)
        btns.grid(row=3, column=0)

        self.run_btn = ttk.Button(btns, text="Start", command=self._toggle_run)
        self.reset_btn = ttk.Button(btns, text="Reset", command=self._reset)
        self.switch_btn = ttk.Button(btns, text="Break", command=self._switch_kind)

        self.run_btn.grid(row=0, column=0, padx=(0, 6))
        self.reset_btn.grid(row=0, column=1, padx=(0, 6))
        self.switch_btn.grid(row=0, column=2)

        # music controls (only shown when music is on and there is a playlist)
        self.music_row = ttk.Frame(self)
        self.track_var = tk.StringVar(value="")
        ttk.Label(self.music_row, textvariable=self.track_var).grid(
            row=0, column=0, columnspan=3, pady=(0, 4)
        )
        ttk.Button(self.music_row, text="⏮", width=3, command=self._retreat).grid(
            row=1, column=0, padx=2
        )
        self.music_btn = ttk.Button(
            self.music_row, text="▶", width=3, command=self._toggle_music
        )
        self.music_btn.grid(row=1, column=1, padx=2)
        ttk.Button(self.music_row, text="⏭", width=3, command=self._advance).grid(
            row=1, column=2, padx=2
        )

    # ---- actions ----
    def _toggle_run(self):
        self.timer_service.toggle_run()

    def _reset(self):
        self.timer_service.reset()

    def _switch_kind(self):
        self.timer_service.switch_kind()

    def _toggle_music(self):
        self.playback.toggle_music()
        self.render_music()

    def _advance(self):
        self.playback.advance()
        self.render_music()

    def _retreat(self):
        self.playback.retreat()
        self.render_music()

    # ---- Service callbacks ----
    def _on_tick(self, snap: SessionSnapshot):
        self._render(snap)

    def _on_phase_change(self, snap: SessionSnapshot):
        if snap.kind == BREAK:
            self.info_var.set("Great work! Time for a break.")
        else:
            self.info_var.set("Break over! Ready to get back to work?")

    def _on_state_change(self, snap: SessionSnapshot):
        self.ticker.sync()
        self.playback.sync()
        self._render(snap)
        self.render_music()
        self.on_request_refresh()

    def _render(self, snap: SessionSnapshot):
        self.time_var.set(format_time(snap.remaining_minutes, snap.remaining_seconds))
        is_break = snap.kind == BREAK
        self.phase_var.set("Break Time" if is_break else "Focus Time")

        self.run_btn.config(text="Pause" if snap.is_running else "Start")
        self.switch_btn.config(text="🎯 Focus" if is_break else "☕ Break")
        self.switch_btn.state(["disabled"] if snap.is_running else ["!disabled"])

        task = self.timer_service.active_task()
        if task is not None and not is_break:
            self.info_var.set(
                f"Working on: {task.title}  "
                f"({task.completed_count}/{task.estimated_count} pomodoros)"
            )
        elif snap.is_running:
            self.info_var.set("Running...")

    def render_music(self):
        pb = self.playback
        if not (pb.settings.music_on and pb.playlist):
            self.music_row.grid_remove()
            return
        self.music_row.grid(row=4, column=0, pady=(12, 0))
        track = pb.current_track()
        self.track_var.set(track.title if track else "Loading...")
        self.music_btn.config(text="⏸" if pb.is_playing else "▶")

    def destroy(self):
        self.ticker.stop()
        super().destroy()
