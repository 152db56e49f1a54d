# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk

from tkinterweb import HtmlFrame

from core.constants import SANDBOX_AUTORUN_MS, SCRIPT_TIME_LIMIT_SEC
from sandbox.examples import DEFAULT_SCRIPT, EXAMPLES
from sandbox.runner import execute
from ui.markdown_renderer import MarkdownRenderer


class SandboxWindow:
    """
    Date/time scripting sandbox: editor on the left, rendered output and
    examples on the right. Re-runs the script a second after typing stops.
    """

    def __init__(self, master: tk.Misc, time_limit: float = SCRIPT_TIME_LIMIT_SEC):
        self.time_limit = time_limit
        self._md = MarkdownRenderer()
        self._autorun_job = None

        self.top = tk.Toplevel(master)
        self.top.title("Time Playground - Date/Time Sandbox")
        self.top.geometry("1100x640")
        self.top.protocol("WM_DELETE_WINDOW", self.close)

        self._build_ui()
        self._load(DEFAULT_SCRIPT)
        self.run()

    def _build_ui(self):
        outer = ttk.Frame(self.top, padding=10)
        outer.pack(fill="both", expand=True)
        outer.columnconfigure(0, weight=3)
        outer.columnconfigure(1, weight=2)
        outer.rowconfigure(1, weight=1)

        bar = ttk.Frame(outer)
        bar.grid(row=0, column=0, sticky="ew", pady=(0, 6))
        ttk.Label(bar, text="Code Editor", font=("Sans", 12, "bold")).pack(side="left")
        ttk.Button(bar, text="Reset", command=lambda: self._load(DEFAULT_SCRIPT)).pack(
            side="right"
        )
        ttk.Button(bar, text="Run Code", command=self.run).pack(side="right", padx=(0, 6))

        self.editor = tk.Text(
            outer,
            wrap="word",
            undo=True,
            font=("Monospace", 11),
            bg="#1E1E1E",
            fg="#D4D4D4",
            insertbackground="#FFFFFF",
        )
        self.editor.grid(row=1, column=0, sticky="nsew", padx=(0, 10))
        self.editor.bind("<<Modified>>", self._on_modified)
        self.editor.bind("<Control-Return>", self._run_shortcut)

        side = ttk.Frame(outer)
        side.grid(row=0, column=1, rowspan=2, sticky="nsew")
        side.columnconfigure(0, weight=1)
        side.rowconfigure(0, weight=1)

        self.output = HtmlFrame(side, horizontal_scrollbar="auto")
        self.output.grid(row=0, column=0, sticky="nsew")

        examples = ttk.Labelframe(side, text="Examples", padding=8)
        examples.grid(row=1, column=0, sticky="ew", pady=(10, 0))
        examples.columnconfigure(0, weight=1)
        for i, ex in enumerate(EXAMPLES):
            ttk.Button(
                examples, text=ex.title, command=lambda code=ex.code: self._load(code)
            ).grid(row=i, column=0, sticky="ew", pady=2)

    def _load(self, code: str):
        self.editor.delete("1.0", "end")
        self.editor.insert("1.0", code)
        self.editor.edit_modified(False)
        self._schedule_autorun()

    def _on_modified(self, event=None):
        if not self.editor.edit_modified():
            return
        self.editor.edit_modified(False)
        self._schedule_autorun()

    def _schedule_autorun(self):
        if self._autorun_job is not None:
            self.top.after_cancel(self._autorun_job)
        self._autorun_job = self.top.after(SANDBOX_AUTORUN_MS, self._autorun)

    def _autorun(self):
        self._autorun_job = None
        if self.source().strip():
            self.run()

    def source(self) -> str:
        return self.editor.get("1.0", "end-1c")

    def _run_shortcut(self, event=None):
        self.run()
        return "break"

    def run(self):
        result = execute(self.source(), time_limit=self.time_limit)
        self.output.load_html(self._md.render_run(result))

    def close(self):
        if self._autorun_job is not None:
            self.top.after_cancel(self._autorun_job)
            self._autorun_job = None
        self.top.destroy()
