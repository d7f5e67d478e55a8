"""Exceptions raised by preview_snapshots."""
from __future__ import annotations

from typing import Any


class PreviewSnapshotsError(Exception):
    """Base class for preview_snapshots errors."""


class DuplicateConfigurationError(PreviewSnapshotsError, ValueError):
    """Raised when a registry is built with non-unique configuration names."""

    def __init__(self, names: list[str]):
        self.names = names
        super().__init__(f"Configuration names must be unique, duplicated: {', '.join(names)}")


class StrategyShapeError(PreviewSnapshotsError, TypeError):
    """Raised when a strategy argument is not a strategy, mapping or list of strategies."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            "Expected a Snapshotting, a mapping of names to Snapshotting, or a list of "
            f"Snapshotting; got {type(value).__name__}"
        )


class SnapshotAssertionError(PreviewSnapshotsError, AssertionError):
    """Raised after a dispatch when one or more snapshots did not pass."""

    def __init__(self, failures: list[Any]):
        self.failures = failures
        lines = [f"{len(failures)} snapshot(s) failed:"]
        for outcome in failures:
            lines.append(f"  {outcome.identifier}: {outcome.message}")
        super().__init__("\n".join(lines))
