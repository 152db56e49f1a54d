# -*- coding: utf-8 -*-

import logging
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable, Dict, Optional

from core.constants import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_WORK_MINUTES,
    MAX_BREAK_MINUTES,
    MAX_ESTIMATE,
    MAX_WORK_MINUTES,
)
from services.notify_service import Notifier
from services.playback_service import PlaybackController
from services.settings_service import (
    SettingsService,
    coerce_estimate,
    coerce_minutes,
    coerce_volume,
)
from services.task_service import TaskService
from services.timer_service import TimerService
from ui.pomodoro_widget import PomodoroWidget

logger = logging.getLogger(__name__)


class MainWindow:
    def __init__(
        self,
        root: tk.Tk,
        task_service: TaskService,
        timer_service: TimerService,
        settings_service: SettingsService,
        playback: PlaybackController,
        notifier: Notifier,
        open_sandbox: Callable[[], None],
        on_close: Optional[Callable[[], None]] = None,
    ):
        self.root = root
        self.task_service = task_service
        self.timer_service = timer_service
        self.settings_service = settings_service
        self.playback = playback
        self.notifier = notifier
        self.open_sandbox = open_sandbox
        self.on_close = on_close

        self.root.title("Time Playground - Pomodoro Tracker")
        self.root.geometry("980x640")

        self._list_index_to_task_id: Dict[int, str] = {}
        self._list_index_to_track_id: Dict[int, str] = {}
        self._editing_task_id: Optional[str] = None
        self._settings_open = False

        self._build_ui()
        self.settings_service.add_listener(lambda changed: self._refresh_settings())
        self._refresh_all()
        self.root.protocol("WM_DELETE_WINDOW", self._close)

    def _build_ui(self):
        root = self.root

        outer = ttk.Frame(root, padding=10)
        outer.pack(fill="both", expand=True)
        outer.columnconfigure(0, weight=1)
        outer.columnconfigure(1, weight=2)
        outer.rowconfigure(2, weight=1)

        # header
        header = ttk.Frame(outer)
        header.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 8))
        ttk.Label(header, text="🍅 Pomodoro Tracker", font=("Sans", 16, "bold")).pack(
            side="left"
        )
        ttk.Button(header, text="Sandbox", command=self.open_sandbox).pack(side="right")
        ttk.Button(header, text="⚙ Settings", command=self._toggle_settings).pack(
            side="right", padx=(0, 6)
        )

        self.settings_frame = ttk.Labelframe(outer, text="Settings", padding=10)
        self._build_settings(self.settings_frame)

        # LEFT: timer
        left = ttk.Labelframe(outer, text="Timer", padding=10)
        left.grid(row=2, column=0, sticky="nsew", padx=(0, 10))
        left.columnconfigure(0, weight=1)

        self.pomodoro = PomodoroWidget(
            left,
            timer_service=self.timer_service,
            playback=self.playback,
            on_request_refresh=self._on_timer_changed,
        )
        self.pomodoro.grid(row=0, column=0, sticky="n")

        # RIGHT: tasks
        right = ttk.Labelframe(outer, text="Tasks", padding=10)
        right.grid(row=2, column=1, sticky="nsew")
        right.columnconfigure(0, weight=1)
        right.rowconfigure(2, weight=1)

        add_row = ttk.Frame(right)
        add_row.grid(row=0, column=0, sticky="ew")
        add_row.columnconfigure(0, weight=1)

        self.new_task_var = tk.StringVar()
        self.new_task_entry = ttk.Entry(add_row, textvariable=self.new_task_var)
        self.new_task_entry.grid(row=0, column=0, sticky="ew")
        self.new_task_entry.bind("<Return>", lambda e: self._submit_task())

        ttk.Label(add_row, text="Pomodoros:").grid(row=0, column=1, padx=(6, 2))
        self.estimate_var = tk.StringVar(value="1")
        ttk.Spinbox(
            add_row, from_=1, to=MAX_ESTIMATE, width=4, textvariable=self.estimate_var
        ).grid(row=0, column=2)

        self.submit_btn = ttk.Button(add_row, text="Add", command=self._submit_task)
        self.submit_btn.grid(row=0, column=3, padx=(6, 0))
        self.cancel_edit_btn = ttk.Button(add_row, text="Cancel", command=self._cancel_edit)

        self.err_var = tk.StringVar(value="")
        ttk.Label(right, textvariable=self.err_var, foreground="red").grid(
            row=1, column=0, sticky="w", pady=(6, 6)
        )

        self.task_list = tk.Listbox(right, height=14, activestyle="none")
        self.task_list.grid(row=2, column=0, sticky="nsew")

        actions = ttk.Frame(right)
        actions.grid(row=3, column=0, sticky="ew", pady=(8, 0))

        self.start_task_btn = ttk.Button(
            actions, text="▶ Start", command=self._start_selected
        )
        self.start_task_btn.pack(side="left")
        ttk.Button(actions, text="Edit", command=self._edit_selected).pack(
            side="left", padx=(6, 0)
        )
        ttk.Button(actions, text="Done / Undo", command=self._toggle_selected).pack(
            side="left", padx=(6, 0)
        )
        ttk.Button(actions, text="Delete", command=self._delete_selected).pack(
            side="left", padx=(6, 0)
        )
        self.clear_btn = ttk.Button(actions, text="Clear All", command=self._clear_all)
        self.clear_btn.pack(side="right")

    def _build_settings(self, frame: ttk.Labelframe):
        s = self.settings_service.settings
        for c in range(4):
            frame.columnconfigure(c, weight=1)

        ttk.Label(frame, text="Work Duration (minutes)").grid(row=0, column=0, sticky="w")
        self.work_var = tk.StringVar(value=str(s.work_minutes))
        work = ttk.Spinbox(
            frame, from_=1, to=MAX_WORK_MINUTES, width=6, textvariable=self.work_var,
            command=self._apply_durations,
        )
        work.grid(row=1, column=0, sticky="w")
        work.bind("<FocusOut>", lambda e: self._apply_durations())
        work.bind("<Return>", lambda e: self._apply_durations())

        ttk.Label(frame, text="Break Duration (minutes)").grid(row=0, column=1, sticky="w")
        self.break_var = tk.StringVar(value=str(s.break_minutes))
        brk = ttk.Spinbox(
            frame, from_=1, to=MAX_BREAK_MINUTES, width=6, textvariable=self.break_var,
            command=self._apply_durations,
        )
        brk.grid(row=1, column=1, sticky="w")
        brk.bind("<FocusOut>", lambda e: self._apply_durations())
        brk.bind("<Return>", lambda e: self._apply_durations())

        self.notify_var = tk.BooleanVar(value=s.notifications_on)
        ttk.Checkbutton(
            frame,
            text="Enable notifications",
            variable=self.notify_var,
            command=lambda: self.settings_service.update(
                notifications_on=bool(self.notify_var.get())
            ),
        ).grid(row=0, column=2, sticky="w")
        self.notify_hint_var = tk.StringVar(value="")
        ttk.Label(frame, textvariable=self.notify_hint_var, foreground="#B45309").grid(
            row=1, column=2, sticky="w"
        )

        self.music_var = tk.BooleanVar(value=s.music_on)
        ttk.Checkbutton(
            frame,
            text="Background music",
            variable=self.music_var,
            command=lambda: self.settings_service.update(
                music_on=bool(self.music_var.get())
            ),
        ).grid(row=0, column=3, sticky="w")
        self.volume_var = tk.DoubleVar(value=s.music_volume)
        ttk.Scale(
            frame, from_=0.0, to=1.0, variable=self.volume_var, command=self._apply_volume
        ).grid(row=1, column=3, sticky="ew")

        # playlist
        pl = ttk.Frame(frame)
        pl.grid(row=2, column=0, columnspan=4, sticky="ew", pady=(10, 0))
        pl.columnconfigure(0, weight=1)

        self.track_url_var = tk.StringVar()
        url_entry = ttk.Entry(pl, textvariable=self.track_url_var)
        url_entry.grid(row=0, column=0, sticky="ew")
        url_entry.bind("<Return>", lambda e: self._add_track())
        ttk.Button(pl, text="Add", command=self._add_track).grid(row=0, column=1, padx=(6, 0))
        ttk.Button(pl, text="Remove", command=self._remove_track).grid(
            row=0, column=2, padx=(6, 0)
        )

        self.playlist_box = tk.Listbox(pl, height=4, activestyle="none")
        self.playlist_box.grid(row=1, column=0, columnspan=3, sticky="ew", pady=(6, 0))

    def run(self):
        self.root.mainloop()

    def _close(self):
        logger.info("shutting down")
        self.pomodoro.ticker.stop()
        if self.on_close:
            self.on_close()
        self.root.destroy()

    # ----- settings -----
    def _toggle_settings(self):
        self._settings_open = not self._settings_open
        if self._settings_open:
            self.settings_frame.grid(row=1, column=0, columnspan=2, sticky="ew", pady=(0, 10))
            self._refresh_settings()
        else:
            self.settings_frame.grid_remove()

    def _apply_durations(self):
        s = self.settings_service.settings
        work = coerce_minutes(self.work_var.get(), DEFAULT_WORK_MINUTES, MAX_WORK_MINUTES)
        brk = coerce_minutes(self.break_var.get(), DEFAULT_BREAK_MINUTES, MAX_BREAK_MINUTES)
        changes = {}
        if work != s.work_minutes:
            changes["work_minutes"] = work
        if brk != s.break_minutes:
            changes["break_minutes"] = brk
        if changes:
            self.settings_service.update(**changes)
        self.work_var.set(str(work))
        self.break_var.set(str(brk))

    def _apply_volume(self, raw):
        self.settings_service.update(music_volume=coerce_volume(raw))

    def _refresh_settings(self):
        s = self.settings_service.settings
        if s.notifications_on and not self.notifier.granted:
            self.notify_hint_var.set("Notifications are not available on this system.")
        else:
            self.notify_hint_var.set("")
        self._refresh_playlist()
        self.pomodoro.render_music()

    # ----- playlist -----
    def _add_track(self):
        try:
            self.playback.add_track(self.track_url_var.get())
        except ValueError as e:
            messagebox.showwarning("Playlist", str(e), parent=self.root)
            return
        self.track_url_var.set("")
        self._refresh_playlist()
        self.pomodoro.render_music()

    def _remove_track(self):
        sel = self.playlist_box.curselection()
        if not sel:
            return
        track_id = self._list_index_to_track_id.get(int(sel[0]))
        if track_id:
            self.playback.remove_track(track_id)
        self._refresh_playlist()
        self.pomodoro.render_music()

    def _refresh_playlist(self):
        self.playlist_box.delete(0, "end")
        self._list_index_to_track_id.clear()
        for i, t in enumerate(self.playback.playlist):
            marker = " ♪" if i == self.playback.current_index and self.playback.is_playing else ""
            self.playlist_box.insert("end", f"{i + 1}. {t.title}  [{t.video_id}]{marker}")
            self._list_index_to_track_id[i] = t.id

    # ----- tasks -----
    def _selected_task_id(self) -> Optional[str]:
        sel = self.task_list.curselection()
        if not sel:
            return None
        return self._list_index_to_task_id.get(int(sel[0]))

    def _submit_task(self):
        title = self.new_task_var.get()
        estimate = coerce_estimate(self.estimate_var.get())
        try:
            if self._editing_task_id:
                self.task_service.update_task(self._editing_task_id, title, estimate)
            else:
                self.task_service.create_task(title, estimate)
        except ValueError as e:
            self.err_var.set(str(e))
            return
        self._cancel_edit()
        self._refresh_tasks()

    def _edit_selected(self):
        task = self.task_service.get(self._selected_task_id())
        if task is None:
            return
        self._editing_task_id = task.id
        self.new_task_var.set(task.title)
        self.estimate_var.set(str(task.estimated_count))
        self.submit_btn.config(text="Save")
        self.cancel_edit_btn.grid(row=0, column=4, padx=(6, 0))
        self.new_task_entry.focus_set()

    def _cancel_edit(self):
        self._editing_task_id = None
        self.new_task_var.set("")
        self.estimate_var.set("1")
        self.err_var.set("")
        self.submit_btn.config(text="Add")
        self.cancel_edit_btn.grid_remove()

    def _start_selected(self):
        task = self.task_service.get(self._selected_task_id())
        if task is None or task.is_done or self.timer_service.is_running():
            return
        self.timer_service.start(task.id)

    def _toggle_selected(self):
        task_id = self._selected_task_id()
        if task_id:
            self.task_service.toggle_done(task_id)
            self._refresh_tasks()

    def _delete_selected(self):
        task_id = self._selected_task_id()
        if not task_id:
            return
        if task_id == self._editing_task_id:
            self._cancel_edit()
        self.task_service.delete_task(task_id)
        self._refresh_tasks()

    def _clear_all(self):
        def confirm(message: str) -> bool:
            return messagebox.askyesno("Clear all tasks", message, parent=self.root)

        if self.task_service.clear_all(confirm):
            self._cancel_edit()
            self._refresh_tasks()

    def _refresh_tasks(self):
        active_id = self.timer_service.get_snapshot().active_task_id
        self.task_list.delete(0, "end")
        self._list_index_to_task_id.clear()
        for i, t in enumerate(self.task_service.list_tasks()):
            check = "☑" if t.is_done else "☐"
            goal = "  ✓ goal reached" if t.goal_reached else ""
            active = "  ◀ active" if t.id == active_id else ""
            self.task_list.insert(
                "end",
                f"{check} {t.title}   🍅 {t.completed_count}/{t.estimated_count}{goal}{active}",
            )
            if t.is_done:
                self.task_list.itemconfig(i, foreground="#9CA3AF")
            self._list_index_to_task_id[i] = t.id

        n = len(self.task_service.tasks)
        self.clear_btn.config(text=f"Clear All ({n})" if n else "Clear All")
        self.clear_btn.state(["!disabled"] if n else ["disabled"])
        self.start_task_btn.state(
            ["disabled"] if self.timer_service.is_running() else ["!disabled"]
        )

    def _on_timer_changed(self):
        self._refresh_tasks()
        self._refresh_playlist()

    def _refresh_all(self):
        self._refresh_tasks()
        self._refresh_settings()
