"""Downloads folder sweep.

Deletes half-finished downloads and sorts everything else at the top level
of the downloads directory into category folders (Documents/, Images/, ...).
Subdirectories, including category folders from earlier runs, are left alone.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..categories import ExtensionClassifier, file_extension, is_temporary
from ..mover import CollisionSafeMover
from ..summary import RunSummary

if TYPE_CHECKING:
    from ..config import CleanupConfig

logger = logging.getLogger(__name__)


class DownloadsModule:
    """Sorts the downloads directory and drops temporary files."""

    MODULE_ENABLED: bool = True
    name: str = "downloads"
    config_flag: str = "clean_downloads"

    def __init__(
        self,
        config: CleanupConfig,
        classifier: ExtensionClassifier | None = None,
    ) -> None:
        self.config = config
        self.classifier = classifier or ExtensionClassifier()

    def run(self) -> RunSummary:
        """Sweep the configured downloads directory."""
        return self.sweep(self.config.downloads_dir)

    def sweep(self, downloads_root: Path) -> RunSummary:
        """Sweep the immediate children of ``downloads_root``.

        Entries are handled in whatever order the filesystem lists them.
        """
        summary = RunSummary()

        if not downloads_root.is_dir():
            logger.warning("Downloads directory does not exist: %s", downloads_root)
            return summary

        try:
            entries = list(downloads_root.iterdir())
        except OSError as e:
            logger.error("Failed to read downloads directory %s: %s", downloads_root, e)
            summary.errors.append(f"Could not read {downloads_root}: {e}")
            return summary

        mover = CollisionSafeMover(downloads_root)

        for entry in entries:
            try:
                is_file = entry.is_file()
            except OSError as e:
                logger.warning("Cannot stat %s: %s", entry, e)
                continue

            # Directories, broken links and special files are not swept
            if not is_file:
                continue

            extension = file_extension(entry)

            if is_temporary(extension):
                self._delete_temp_file(entry, summary)
                continue

            result = mover.move_to_category(entry, self.classifier.classify(extension))
            if result.success:
                summary.moved_files.append(entry.name)
            else:
                summary.errors.append(f"Could not move {result.error}")

        logger.info(
            "Downloads sweep done: %d deleted, %d moved, %d failed",
            len(summary.deleted_files),
            len(summary.moved_files),
            len(summary.errors),
        )
        return summary

    @staticmethod
    def _delete_temp_file(path: Path, summary: RunSummary) -> None:
        try:
            path.unlink()
        except OSError as e:
            logger.error("Failed to delete temp file %s: %s", path.name, e)
            summary.errors.append(f"Could not delete {path}: {e}")
            return

        logger.info("Deleted temp file: %s", path.name)
        summary.deleted_files.append(path.name)
