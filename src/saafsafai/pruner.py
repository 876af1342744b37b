"""Age-gated removal of dependency cache directories."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from pathlib import Path

NODE_MODULES = "node_modules"
NODE_MODULES_MAX_AGE_DAYS = 30

logger = logging.getLogger(__name__)


class NodeAction(Enum):
    """What happened to a directory visited by the pruner."""

    REMOVED = "removed"  # Stale, deleted
    KEPT = "kept"  # Matched but recent enough
    SKIPPED = "skipped"  # Could not be listed or inspected
    ERROR = "error"  # Stale, but deletion failed


@dataclass(frozen=True)
class NodeResult:
    """Outcome for a single directory."""

    path: Path
    action: NodeAction
    reason: str | None = None


@dataclass
class PruneReport:
    """All per-directory outcomes of one prune pass."""

    results: list[NodeResult] = field(default_factory=list)

    def paths(self, action: NodeAction) -> list[Path]:
        return [r.path for r in self.results if r.action is action]

    @property
    def removed(self) -> list[Path]:
        return self.paths(NodeAction.REMOVED)

    @property
    def kept(self) -> list[Path]:
        return self.paths(NodeAction.KEPT)

    @property
    def skipped(self) -> list[NodeResult]:
        return [r for r in self.results if r.action is NodeAction.SKIPPED]

    @property
    def failed(self) -> list[NodeResult]:
        return [r for r in self.results if r.action is NodeAction.ERROR]


class StaleDirectoryPruner:
    """Deletes directories with a given name that have not changed for a while.

    Matched directories are never descended into, whether or not they end up
    deleted, so nested copies below a match are not evaluated.
    """

    def __init__(
        self,
        sentinel_name: str = NODE_MODULES,
        max_age_days: int = NODE_MODULES_MAX_AGE_DAYS,
    ) -> None:
        """Initialize the pruner.

        Args:
            sentinel_name: Exact directory name to match.
            max_age_days: Directories strictly older than this are removed.

        """
        self.sentinel_name = sentinel_name
        self.max_age_days = max_age_days

    def cutoff(self, now: datetime) -> datetime:
        """Directories modified strictly before this moment are stale."""
        return now - timedelta(days=self.max_age_days)

    def prune(self, root: Path, now: datetime | None = None) -> PruneReport:
        """Walk ``root`` depth-first and remove stale sentinel directories.

        Args:
            root: Top of the tree to walk.
            now: Reference time; defaults to the current UTC time.

        Returns:
            PruneReport with one result per matched or unreadable directory.

        """
        cutoff = self.cutoff(now or datetime.now(UTC))
        report = PruneReport()

        if root.name == self.sentinel_name and root.is_dir() and not root.is_symlink():
            report.results.append(self._evaluate(root, cutoff))
            return report

        def on_error(error: OSError) -> None:
            path = Path(error.filename) if error.filename else root
            logger.warning("Skipping unreadable directory %s: %s", path, error)
            report.results.append(
                NodeResult(path=path, action=NodeAction.SKIPPED, reason=error.strerror or str(error))
            )

        for dirpath, dirnames, _filenames in os.walk(root, onerror=on_error):
            if self.sentinel_name not in dirnames:
                continue

            # Never descend into a match
            dirnames.remove(self.sentinel_name)

            candidate = Path(dirpath) / self.sentinel_name
            if candidate.is_symlink():
                continue

            report.results.append(self._evaluate(candidate, cutoff))

        return report

    def _evaluate(self, path: Path, cutoff: datetime) -> NodeResult:
        """Remove ``path`` if its mtime is strictly before ``cutoff``."""
        try:
            modified = datetime.fromtimestamp(path.lstat().st_mtime, tz=UTC)
        except OSError as e:
            logger.warning("Cannot stat %s: %s", path, e)
            return NodeResult(path=path, action=NodeAction.SKIPPED, reason=f"Cannot stat: {e}")

        if modified >= cutoff:
            return NodeResult(
                path=path,
                action=NodeAction.KEPT,
                reason=f"Modified {modified:%Y-%m-%d}",
            )

        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.error("Failed to remove %s at %s: %s", self.sentinel_name, path, e)
            return NodeResult(path=path, action=NodeAction.ERROR, reason=str(e))

        logger.info("Removed stale %s: %s", self.sentinel_name, path)
        return NodeResult(path=path, action=NodeAction.REMOVED)
