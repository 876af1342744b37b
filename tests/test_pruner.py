"""Tests for age-gated node_modules pruning."""

from __future__ import annotations

import os
import time
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from saafsafai.config import CleanupConfig
from saafsafai.modules.stale_dependencies import StaleDependenciesModule
from saafsafai.pruner import (
    NODE_MODULES,
    NODE_MODULES_MAX_AGE_DAYS,
    NodeAction,
    NodeResult,
    PruneReport,
    StaleDirectoryPruner,
)

# Whole seconds so mtimes survive the float round-trip exactly
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def pruner() -> StaleDirectoryPruner:
    """Create a pruner with the default node_modules policy."""
    return StaleDirectoryPruner()


def _make_modules(parent: Path, *, files: int = 1) -> Path:
    """Create a node_modules directory with a few files."""
    modules = parent / NODE_MODULES
    modules.mkdir(parents=True, exist_ok=True)
    for i in range(files):
        (modules / f"pkg{i}.js").write_text("module.exports = {}")
    return modules


def _set_age(path: Path, age: timedelta, now: datetime = NOW) -> None:
    """Set the mtime of ``path`` to ``now - age``."""
    ts = (now - age).timestamp()
    os.utime(path, (ts, ts))


class TestDefaults:
    """Tests for the fixed pruning policy."""

    def test_policy_constants(self) -> None:
        """node_modules older than 30 days are targeted."""
        assert NODE_MODULES == "node_modules"
        assert NODE_MODULES_MAX_AGE_DAYS == 30

    def test_cutoff(self, pruner: StaleDirectoryPruner) -> None:
        """Cutoff is now minus the max age."""
        assert pruner.cutoff(NOW) == NOW - timedelta(days=30)


class TestAgeBoundary:
    """Tests for the strict age comparison."""

    def test_exactly_at_cutoff_is_kept(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """A directory modified exactly 30 days ago survives."""
        modules = _make_modules(tmp_path / "proj")
        _set_age(modules, timedelta(days=30))

        report = pruner.prune(tmp_path, now=NOW)

        assert modules.exists()
        assert report.kept == [modules]
        assert report.removed == []

    def test_one_day_older_is_removed(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """A directory modified 31 days ago is removed."""
        modules = _make_modules(tmp_path / "proj")
        _set_age(modules, timedelta(days=31))

        report = pruner.prune(tmp_path, now=NOW)

        assert not modules.exists()
        assert report.removed == [modules]

    def test_one_second_past_cutoff_is_removed(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """Strictly older by any amount qualifies."""
        modules = _make_modules(tmp_path / "proj")
        _set_age(modules, timedelta(days=30, seconds=1))

        report = pruner.prune(tmp_path, now=NOW)

        assert report.removed == [modules]

    def test_recent_directory_is_kept(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """Recently used node_modules are left alone."""
        modules = _make_modules(tmp_path / "proj")
        _set_age(modules, timedelta(days=2))

        report = pruner.prune(tmp_path, now=NOW)

        assert modules.exists()
        assert report.results == [
            NodeResult(path=modules, action=NodeAction.KEPT, reason="Modified 2026-02-27"),
        ]


class TestNoDescent:
    """Matched directories are never walked into."""

    def test_nested_sentinel_not_evaluated(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """proj/node_modules (45d) is removed; its nested copy (1d) is never evaluated."""
        outer = _make_modules(tmp_path / "proj")
        inner = _make_modules(outer / "sub")
        _set_age(inner, timedelta(days=1))
        _set_age(outer, timedelta(days=45))

        report = pruner.prune(tmp_path, now=NOW)

        assert report.results == [NodeResult(path=outer, action=NodeAction.REMOVED)]
        assert not outer.exists()

    def test_kept_directory_not_descended(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """An old nested copy inside a recent one is preserved."""
        outer = _make_modules(tmp_path / "proj")
        inner = _make_modules(outer / "dep")
        _set_age(inner, timedelta(days=90))
        _set_age(outer, timedelta(days=1))

        report = pruner.prune(tmp_path, now=NOW)

        assert [r.path for r in report.results] == [outer]
        assert inner.exists()

    def test_failed_removal_not_descended(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """When deletion fails the subtree is still skipped."""
        outer = _make_modules(tmp_path / "proj")
        inner = _make_modules(outer / "dep")
        _set_age(inner, timedelta(days=90))
        _set_age(outer, timedelta(days=90))

        with patch("saafsafai.pruner.shutil.rmtree", side_effect=PermissionError(13, "Permission denied")):
            report = pruner.prune(tmp_path, now=NOW)

        assert len(report.results) == 1
        assert report.results[0].action is NodeAction.ERROR
        assert report.results[0].path == outer
        assert "Permission denied" in (report.results[0].reason or "")
        assert inner.exists()


class TestTraversal:
    """Tests for the depth-first walk."""

    def test_finds_sentinels_at_any_depth(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """Stale directories in several projects are all removed."""
        shallow = _make_modules(tmp_path / "a")
        deep = _make_modules(tmp_path / "code" / "clients" / "b")
        _set_age(shallow, timedelta(days=60))
        _set_age(deep, timedelta(days=60))

        report = pruner.prune(tmp_path, now=NOW)

        assert sorted(report.removed) == sorted([shallow, deep])
        assert not shallow.exists()
        assert not deep.exists()
        assert (tmp_path / "code" / "clients" / "b").exists()

    def test_name_match_is_exact(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """Similar names do not match."""
        for name in ("node_modules_old", "Node_Modules", "my_node_modules"):
            directory = tmp_path / name
            directory.mkdir()
            _set_age(directory, timedelta(days=100))

        report = pruner.prune(tmp_path, now=NOW)

        assert report.results == []
        assert len(list(tmp_path.iterdir())) == 3

    def test_file_named_like_sentinel_ignored(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """Only directories are considered."""
        fake = tmp_path / NODE_MODULES
        fake.write_text("not a dir")
        _set_age(fake, timedelta(days=100))

        report = pruner.prune(tmp_path, now=NOW)

        assert report.results == []
        assert fake.exists()

    def test_symlinked_sentinel_not_followed(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """A node_modules symlink is neither removed nor followed."""
        target = tmp_path / "shared"
        target.mkdir()
        (target / "keep.js").write_text("")
        project = tmp_path / "proj"
        project.mkdir()
        link = project / NODE_MODULES
        link.symlink_to(target, target_is_directory=True)
        _set_age(target, timedelta(days=100))

        report = pruner.prune(project, now=NOW)

        assert report.results == []
        assert link.is_symlink()
        assert (target / "keep.js").exists()

    def test_root_itself_is_evaluated(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """Pointing the pruner straight at a node_modules directory works."""
        modules = _make_modules(tmp_path)
        _set_age(modules, timedelta(days=40))

        report = pruner.prune(modules, now=NOW)

        assert report.removed == [modules]

    def test_missing_root_is_skipped(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """A missing root yields a single skip with a reason."""
        missing = tmp_path / "absent"

        report = pruner.prune(missing, now=NOW)

        assert len(report.skipped) == 1
        assert report.skipped[0].path == missing
        assert report.skipped[0].reason

    def test_unreadable_directory_is_skipped(self, pruner: StaleDirectoryPruner, tmp_path: Path) -> None:
        """A listing error skips that node only; siblings are still pruned."""
        locked = tmp_path / "locked"
        locked.mkdir()
        stale = _make_modules(tmp_path / "open")
        _set_age(stale, timedelta(days=60))
        real_scandir = os.scandir

        def guarded_scandir(path: str | int | os.PathLike[str] = ".") -> object:
            # rmtree also calls scandir, with file descriptors
            if not isinstance(path, int) and Path(path) == locked:
                raise PermissionError(13, "Permission denied", str(locked))
            return real_scandir(path)

        with patch.object(os, "scandir", guarded_scandir):
            report = pruner.prune(tmp_path, now=NOW)

        assert [r.path for r in report.skipped] == [locked]
        assert report.skipped[0].reason == "Permission denied"
        assert report.removed == [stale]

    def test_custom_sentinel_and_age(self, tmp_path: Path) -> None:
        """Name and age are parameters of the pruner."""
        pruner = StaleDirectoryPruner(sentinel_name=".venv", max_age_days=7)
        venv = tmp_path / "proj" / ".venv"
        venv.mkdir(parents=True)
        _set_age(venv, timedelta(days=8))

        report = pruner.prune(tmp_path, now=NOW)

        assert report.removed == [venv]


class TestPruneReport:
    """Tests for PruneReport accessors."""

    def test_partitions_by_action(self, tmp_path: Path) -> None:
        """Each accessor returns only its own action."""
        report = PruneReport(results=[
            NodeResult(tmp_path / "a", NodeAction.REMOVED),
            NodeResult(tmp_path / "b", NodeAction.KEPT),
            NodeResult(tmp_path / "c", NodeAction.SKIPPED, "Permission denied"),
            NodeResult(tmp_path / "d", NodeAction.ERROR, "Busy"),
        ])

        assert report.removed == [tmp_path / "a"]
        assert report.kept == [tmp_path / "b"]
        assert [r.path for r in report.skipped] == [tmp_path / "c"]
        assert [r.path for r in report.failed] == [tmp_path / "d"]


class TestStaleDependenciesModule:
    """Tests for the module wrapper used by the runner."""

    def test_module_attributes(self) -> None:
        """The module is switched by delete_node_modules."""
        assert StaleDependenciesModule.MODULE_ENABLED is True
        assert StaleDependenciesModule.name == "stale_dependencies"
        assert StaleDependenciesModule.config_flag == "delete_node_modules"

    def test_run_records_removed_paths(self, tmp_path: Path) -> None:
        """Only confirmed removals reach the summary, as path strings."""
        config = CleanupConfig()
        config.scan_root = tmp_path
        now = datetime.fromtimestamp(int(time.time()), tz=UTC)
        old = _make_modules(tmp_path / "old")
        fresh = _make_modules(tmp_path / "fresh")
        _set_age(old, timedelta(days=45), now)
        _set_age(fresh, timedelta(days=1), now)

        summary = StaleDependenciesModule(config).run()

        assert summary.removed_dirs == [str(old)]
        assert summary.errors == []
        assert fresh.exists()

    def test_run_records_failures(self, tmp_path: Path) -> None:
        """Failed removals become error entries."""
        config = CleanupConfig()
        config.scan_root = tmp_path
        old = _make_modules(tmp_path / "old")
        _set_age(old, timedelta(days=45), datetime.now(UTC))

        with patch("saafsafai.pruner.shutil.rmtree", side_effect=OSError(16, "Device or resource busy")):
            summary = StaleDependenciesModule(config).run()

        assert summary.removed_dirs == []
        assert len(summary.errors) == 1
        assert str(old) in summary.errors[0]
