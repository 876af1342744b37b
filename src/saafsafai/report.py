"""Render run summaries and append them to the daily log."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from .config import CleanupConfig
    from .summary import RunSummary


def is_interactive(environ: Mapping[str, str] | None = None) -> bool:
    """Guess whether a user is watching (terminal plus desktop or SSH session)."""
    env = os.environ if environ is None else environ
    return bool(env.get("TERM")) and bool(env.get("DISPLAY") or env.get("SSH_CLIENT"))


def _section(lines: list[str], title: str, items: list[str]) -> None:
    if not items:
        return
    lines.append(title)
    lines.extend(f"   - {item}" for item in items)
    lines.append("")


def render_summary(summary: RunSummary, timestamp: datetime | None = None) -> str:
    """Render a summary as plain text.

    Args:
        summary: Summary to render.
        timestamp: Time shown in the header. Defaults to now.

    Returns:
        Multi-line report text.

    """
    timestamp = timestamp or datetime.now()
    lines = [f"Saafsafai cleanup report - {timestamp:%Y-%m-%d %H:%M:%S}", ""]

    _section(lines, "Deleted temp files:", summary.deleted_files)
    _section(lines, "Moved files to category folders:", summary.moved_files)
    _section(lines, "Deleted old node_modules folders:", summary.removed_dirs)
    _section(lines, "Failures:", summary.errors)

    if summary.is_empty:
        lines.append("Nothing to clean today.")
    else:
        lines.append(f"Cleaned up {summary.total} items total.")
        if summary.errors:
            lines.append(f"{len(summary.errors)} operations failed, see log for details.")

    return "\n".join(lines)


class Reporter:
    """Writes run summaries to the daily log and, when attended, the terminal."""

    def __init__(self, config: CleanupConfig, console: Console | None = None) -> None:
        self.config = config
        self.console = console or Console()

    def report(self, summary: RunSummary, *, echo: bool | None = None) -> Path:
        """Append the rendered summary to today's log file.

        Args:
            summary: Summary to report.
            echo: Print to the terminal too. Guessed from the environment if None.

        Returns:
            Path of the log file written.

        """
        text = render_summary(summary)
        log_file = self.config.log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with log_file.open("a", encoding="utf-8", errors="backslashreplace") as f:
            f.write(text + "\n")

        if echo is None:
            echo = is_interactive()
        if echo:
            self.console.print(text, markup=False, highlight=False)

        return log_file
