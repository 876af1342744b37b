"""Runs the enabled cleanup phases and reports the result."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

from .modules import discover_modules
from .report import Reporter
from .summary import RunSummary

if TYPE_CHECKING:
    from .config import CleanupConfig
    from .modules.base import CleanupModule


class CleanupRunner:
    """Single cleanup pass: sweep downloads, prune node_modules, write the log."""

    def __init__(self, config: CleanupConfig, reporter: Reporter | None = None) -> None:
        """Initialize the runner.

        Args:
            config: Cleanup configuration.
            reporter: Summary sink. Defaults to the daily log reporter.

        Raises:
            ValueError: If the configured log level is unknown.

        """
        self.config = config
        self.logger = self._setup_logging()
        self.reporter = reporter or Reporter(config)

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the run.

        Returns:
            Configured package logger.

        """
        level = getattr(logging, self.config.log_level.upper(), None)
        if not isinstance(level, int):
            raise ValueError(f"Invalid log_level: {self.config.log_level!r}")

        logger = logging.getLogger("saafsafai")
        logger.setLevel(level)

        # Clear existing handlers to avoid duplicates if the runner is recreated
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        # Console handler with Rich
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
        )
        console_handler.setLevel(logging.INFO)
        logger.addHandler(console_handler)

        # File handler, same file the report is appended to
        log_file = self.config.log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8", errors="backslashreplace")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
        )
        logger.addHandler(file_handler)

        return logger

    def modules(self) -> list[CleanupModule]:
        return discover_modules(self.config)

    def run(self) -> RunSummary:
        """Run every enabled phase and report the merged summary.

        Returns:
            Merged summary of all phases.

        """
        self.logger.info("Starting cleanup run...")
        summary = RunSummary()

        modules = self.modules()
        if not modules:
            self.logger.info("No cleanup phases enabled in config")

        for module in modules:
            self.logger.info("Running %s", module.name)
            try:
                summary = summary.merge(module.run())
            except OSError as e:
                self.logger.exception("Phase %s aborted", module.name)
                summary = summary.merge(RunSummary(errors=[f"{module.name} aborted: {e}"]))

        self.logger.info(
            "Run finished: deleted=%d, moved=%d, removed=%d, errors=%d",
            len(summary.deleted_files),
            len(summary.moved_files),
            len(summary.removed_dirs),
            len(summary.errors),
        )

        for handler in self.logger.handlers:
            handler.flush()
        self.reporter.report(summary)

        return summary
