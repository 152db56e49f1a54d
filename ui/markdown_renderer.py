# ui/markdown_renderer.py
# -*- coding: utf-8 -*-

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from markdown import markdown

from sandbox.runner import RunResult, format_value


@dataclass(frozen=True)
class MarkdownTheme:
    text: str = "#111827"
    muted: str = "#6B7280"
    border: str = "#E5E7EB"
    panel: str = "#FFFFFF"
    codebg: str = "#111827"
    codefg: str = "#34D399"
    resultbg: str = "#1E3A8A"
    resultfg: str = "#DBEAFE"
    errorbg: str = "#7F1D1D"
    errorfg: str = "#FEE2E2"


def _fence(text: str, lang: str = "") -> str:
    # the fence must be longer than any backtick run inside the block
    longest = max((len(m) for m in re.findall(r"`+", text)), default=0)
    ticks = "`" * max(3, longest + 1)
    return f"{ticks}{lang}\n{text}\n{ticks}"


class MarkdownRenderer:
    """
    Single responsibility:
    - Turn a sandbox RunResult into markdown (console / result / error)
    - Convert MD -> HTML with CSS that tkinterweb (tkhtml) can display
    """

    EXTENSIONS = ["extra", "sane_lists", "admonition"]

    def __init__(self, theme: Optional[MarkdownTheme] = None):
        self.theme = theme or MarkdownTheme()

    # ---------- run result -> markdown ----------
    def run_to_markdown(self, result: RunResult) -> str:
        parts: List[str] = []

        if result.logs:
            parts.append("### Console Output")
            parts.append(_fence("\n".join(result.logs)))

        if result.error:
            parts.append("### Error")
            parts.append('<div class="error" markdown="1">')
            parts.append(_fence(result.error))
            parts.append("</div>")
        elif result.value is not None:
            lang = "json" if isinstance(result.value, (dict, list, tuple)) else ""
            parts.append("### Result")
            parts.append('<div class="result" markdown="1">')
            parts.append(_fence(format_value(result.value), lang))
            parts.append("</div>")

        if not parts:
            parts.append("*Nothing printed, nothing returned.*")

        return "\n\n".join(parts)

    # ---------- CSS ----------
    def css(self) -> str:
        t = self.theme
        return f"""
        body {{
          font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
          margin: 14px;
          color: {t.text};
          background: {t.panel};
          font-size: 14px;
          line-height: 1.5;
        }}

        h3 {{
          font-size: 1.08em;
          margin: 1.0em 0 0.4em;
        }}

        em {{ color: {t.muted}; }}

        pre {{
          background: {t.codebg};
          color: {t.codefg};
          padding: 10px 12px;
          border-radius: 8px;
          border: 1px solid {t.border};
          margin: 0.6em 0;
        }}
        pre code {{
          font-family: ui-monospace, SFMono-Regular, Menlo, Monaco, Consolas, "Liberation Mono", monospace;
          font-size: 0.92em;
          white-space: pre;
        }}

        .result pre {{ background: {t.resultbg}; color: {t.resultfg}; }}
        .error pre {{ background: {t.errorbg}; color: {t.errorfg}; }}
        """

    # ---------- render ----------
    def to_html(self, md_text: str) -> str:
        body = markdown(
            md_text or "",
            extensions=self.EXTENSIONS,
            output_format="html5",
        )
        return f"""
        <html>
          <head>
            <meta charset="utf-8"/>
            <style>{self.css()}</style>
          </head>
          <body>{body}</body>
        </html>
        """

    def render_run(self, result: RunResult) -> str:
        return self.to_html(self.run_to_markdown(result))
