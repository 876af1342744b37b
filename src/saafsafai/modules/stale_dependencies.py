"""Stale node_modules cleanup module.

Finds node_modules directories anywhere under the scan root (the home
directory by default) and deletes the ones untouched for more than 30 days.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..pruner import NODE_MODULES, NODE_MODULES_MAX_AGE_DAYS, StaleDirectoryPruner
from ..summary import RunSummary

if TYPE_CHECKING:
    from ..config import CleanupConfig


class StaleDependenciesModule:
    """Removes old node_modules trees."""

    MODULE_ENABLED: bool = True
    name: str = "stale_dependencies"
    config_flag: str = "delete_node_modules"

    def __init__(self, config: CleanupConfig) -> None:
        self.config = config
        self.pruner = StaleDirectoryPruner(NODE_MODULES, NODE_MODULES_MAX_AGE_DAYS)

    def run(self) -> RunSummary:
        report = self.pruner.prune(self.config.scan_root)

        return RunSummary(
            removed_dirs=[str(path) for path in report.removed],
            errors=[f"Could not remove {r.path}: {r.reason}" for r in report.failed],
        )
