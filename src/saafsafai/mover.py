"""Move files into category folders without overwriting anything."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from . import SaafsafaiError
from .categories import Category

logger = logging.getLogger(__name__)


class MoveError(SaafsafaiError):
    """A single file could not be relocated."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause


@dataclass
class MoveResult:
    """Result of a move operation."""

    source: Path
    category: Category
    success: bool
    destination: Path | None = None
    error: MoveError | None = None


def normalized_name(filename: str) -> str:
    """Lowercase the extension of ``filename``, leaving the stem alone."""
    path = Path(filename)
    return f"{path.stem}{path.suffix.lower()}"


def unique_destination(directory: Path, filename: str) -> Path:
    """Find a free path for ``filename`` inside ``directory``.

    Names are compared case-insensitively so ``report.pdf`` also blocks
    ``Report.PDF``. Taken names get ``_1``, ``_2``, ... inserted before the
    extension; the lowest free number is used.

    This is stricter than an exact-path existence check: on a case-sensitive
    filesystem ``Report.pdf`` next to ``report.pdf`` still gets a suffix even
    though both names could coexist.

    Args:
        directory: Existing destination directory.
        filename: Desired file name.

    Returns:
        Path that does not collide with any entry of ``directory``.

    """
    taken = {entry.name.lower() for entry in directory.iterdir()}
    path = Path(filename)
    candidate = filename
    counter = 1

    while candidate.lower() in taken:
        candidate = f"{path.stem}_{counter}{path.suffix}"
        counter += 1

    return directory / candidate


class CollisionSafeMover:
    """Relocates files into ``<downloads_root>/<Category>`` folders."""

    def __init__(self, downloads_root: Path) -> None:
        """Initialize the mover.

        Args:
            downloads_root: Directory the category folders live in.

        """
        self.downloads_root = downloads_root

    def category_dir(self, category: Category) -> Path:
        return self.downloads_root / category.value

    def move_to_category(self, source: Path, category: Category) -> MoveResult:
        """Move ``source`` into the folder for ``category``.

        Failures are logged and returned, never raised.

        Args:
            source: File to move.
            category: Target category.

        Returns:
            MoveResult with the final destination or the error.

        """
        dest_dir = self.category_dir(category)

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            destination = unique_destination(dest_dir, normalized_name(source.name))
            source.rename(destination)
        except PermissionError as e:
            logger.error("Permission denied moving %s: %s", source, e)
            return MoveResult(source=source, category=category, success=False, error=MoveError(source, e))
        except OSError as e:
            logger.error("Error moving %s: %s", source, e)
            return MoveResult(source=source, category=category, success=False, error=MoveError(source, e))

        logger.info("Moved %s -> %s/%s", source.name, category.value, destination.name)
        return MoveResult(source=source, category=category, success=True, destination=destination)
