"""Per-run record of what the cleanup changed."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RunSummary:
    """Outcome of one cleanup phase or of a whole run.

    Phases build their own summary and return it; the caller merges them.
    """

    deleted_files: list[str] = field(default_factory=list)
    moved_files: list[str] = field(default_factory=list)
    removed_dirs: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def merge(self, other: RunSummary) -> RunSummary:
        """Return a new summary with ``other`` appended after this one."""
        return RunSummary(
            deleted_files=[*self.deleted_files, *other.deleted_files],
            moved_files=[*self.moved_files, *other.moved_files],
            removed_dirs=[*self.removed_dirs, *other.removed_dirs],
            errors=[*self.errors, *other.errors],
        )

    @property
    def total(self) -> int:
        """Number of items successfully cleaned."""
        return len(self.deleted_files) + len(self.moved_files) + len(self.removed_dirs)

    @property
    def is_empty(self) -> bool:
        return self.total == 0 and not self.errors
