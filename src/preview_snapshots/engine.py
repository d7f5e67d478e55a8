"""
Snapshot engine.

The engine owns everything that happens to a single snapshot: turning the
rendered unit into its comparable format, locating the reference on disk,
recording it, and diffing against it. It never raises for a mismatch;
every call produces a ``SnapshotOutcome``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .config import SnapshotConfig
from .location import SourceLocation
from .storage import ReferenceStore
from .strategy import Snapshotting

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    RECORDED = "recorded"
    ERROR = "error"


@dataclass
class SnapshotOutcome:
    """Result of one snapshot assertion."""

    identifier: str
    status: OutcomeStatus
    message: Optional[str] = None
    reference_path: Optional[Path] = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.status in (OutcomeStatus.FAILED, OutcomeStatus.ERROR)


class SnapshotEngine:
    """Records and compares snapshot references on disk."""

    def __init__(self, config: Optional[SnapshotConfig] = None):
        self.config = config or SnapshotConfig()

    def store_for(self, location: SourceLocation) -> ReferenceStore:
        """Reference store for a test file, relative snapshot dirs resolve next to it."""
        snapshot_dir = self.config.get_snapshot_dir()
        if not snapshot_dir.is_absolute():
            snapshot_dir = location.file.parent / snapshot_dir
        return ReferenceStore(snapshot_dir)

    def assert_snapshot(
        self,
        value: Any,
        strategy: Snapshotting,
        identifier: str,
        record: bool,
        location: SourceLocation,
    ) -> SnapshotOutcome:
        """Compare ``value`` with its reference, or record it."""
        store = self.store_for(location)
        try:
            reference_path = store.reference_path(
                location.file_stem, location.test_name, identifier, strategy.path_extension
            )
        except ValueError as e:
            logger.warning(f"No reference path for {identifier!r}: {e}")
            return SnapshotOutcome(
                identifier=identifier,
                status=OutcomeStatus.ERROR,
                message=f"Invalid reference path: {e}",
            )

        try:
            snapshot = strategy.snapshot(value)
            data = strategy.serialize(snapshot)
        except Exception as e:
            logger.warning(f"Could not snapshot {identifier}: {e}")
            return SnapshotOutcome(
                identifier=identifier,
                status=OutcomeStatus.ERROR,
                message=f"Snapshotting failed: {type(e).__name__}: {e}",
                reference_path=reference_path,
            )

        if record:
            self._record(store, reference_path, data, identifier, strategy, location)
            logger.info(f"Recorded snapshot {identifier} at {reference_path}")
            return SnapshotOutcome(
                identifier=identifier,
                status=OutcomeStatus.RECORDED,
                message=f"Recorded snapshot at {reference_path}",
                reference_path=reference_path,
            )

        reference_data = store.load_reference(reference_path)
        if reference_data is None:
            return self._missing_reference(
                store, reference_path, data, identifier, strategy, location
            )

        try:
            reference = strategy.deserialize(reference_data)
            comparison = strategy.diff(reference, snapshot)
        except Exception as e:
            logger.warning(f"Could not compare {identifier} with {reference_path}: {e}")
            return SnapshotOutcome(
                identifier=identifier,
                status=OutcomeStatus.ERROR,
                message=f"Comparison failed: {type(e).__name__}: {e}",
                reference_path=reference_path,
            )

        if comparison.match:
            logger.debug(f"Snapshot {identifier} matches {reference_path}")
            return SnapshotOutcome(
                identifier=identifier,
                status=OutcomeStatus.PASSED,
                reference_path=reference_path,
            )

        logger.warning(f"Snapshot {identifier} does not match {reference_path}")
        return SnapshotOutcome(
            identifier=identifier,
            status=OutcomeStatus.FAILED,
            message=f"Snapshot does not match reference {reference_path}\n{comparison.error_message}",
            reference_path=reference_path,
            details=comparison.details or {},
        )

    def _missing_reference(
        self,
        store: ReferenceStore,
        reference_path: Path,
        data: bytes,
        identifier: str,
        strategy: Snapshotting,
        location: SourceLocation,
    ) -> SnapshotOutcome:
        if not self.config.record_missing:
            return SnapshotOutcome(
                identifier=identifier,
                status=OutcomeStatus.FAILED,
                message=f"No reference was found on disk at {reference_path}",
                reference_path=reference_path,
            )

        self._record(store, reference_path, data, identifier, strategy, location)
        logger.info(f"Recorded missing reference {identifier} at {reference_path}")
        return SnapshotOutcome(
            identifier=identifier,
            status=OutcomeStatus.FAILED,
            message=(
                f"No reference was found on disk. Automatically recorded snapshot at "
                f"{reference_path}; re-run the test to assert against it"
            ),
            reference_path=reference_path,
        )

    def _record(
        self,
        store: ReferenceStore,
        reference_path: Path,
        data: bytes,
        identifier: str,
        strategy: Snapshotting,
        location: SourceLocation,
    ) -> None:
        store.store_reference(
            reference_path,
            data,
            identifier=identifier,
            test_file=str(location.file),
            test_name=location.test_name,
            path_extension=strategy.path_extension,
        )
