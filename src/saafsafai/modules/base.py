"""Base protocol for cleanup modules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..summary import RunSummary


@runtime_checkable
class CleanupModule(Protocol):
    """Interface for a cleanup phase that can be switched on in the config."""

    MODULE_ENABLED: bool
    name: str
    # Name of the boolean CleanupConfig attribute that turns this phase on
    config_flag: str

    def run(self) -> RunSummary:
        """Perform the cleanup.

        Returns:
            Summary of what this phase changed. Per-item failures are
            recorded in it rather than raised.

        """
        ...
