"""
Pytest configuration and shared fixtures for preview_snapshots tests.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from preview_snapshots.engine import OutcomeStatus, SnapshotOutcome
from preview_snapshots.location import SourceLocation

pytest_plugins = ["preview_snapshots.pytest_plugin"]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    # Cleanup
    if temp_path.exists():
        shutil.rmtree(temp_path)


@pytest.fixture
def temp_snapshot_dir(temp_dir):
    """Create a temporary snapshot directory."""
    snapshot_path = temp_dir / "__snapshots__"
    snapshot_path.mkdir(parents=True, exist_ok=True)
    return snapshot_path


@pytest.fixture
def location(temp_dir):
    """A source location for a fake test file inside the temp directory."""
    return SourceLocation(file=temp_dir / "test_banner.py", test_name="test_banner", line=12)


class RecordingEngine:
    """Engine double that records every call and passes unless told otherwise."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    def assert_snapshot(self, value, strategy, identifier, record, location):
        self.calls.append(
            {
                "value": value,
                "strategy": strategy,
                "identifier": identifier,
                "record": record,
                "location": location,
            }
        )
        if identifier in self.failing:
            return SnapshotOutcome(
                identifier=identifier, status=OutcomeStatus.FAILED, message="mismatch"
            )
        if record:
            return SnapshotOutcome(identifier=identifier, status=OutcomeStatus.RECORDED)
        return SnapshotOutcome(identifier=identifier, status=OutcomeStatus.PASSED)

    @property
    def identifiers(self):
        return [call["identifier"] for call in self.calls]


@pytest.fixture
def engine():
    """An engine double that records calls."""
    return RecordingEngine()


@pytest.fixture
def make_engine():
    """Factory for engine doubles, e.g. ``make_engine(failing={"Short"})``."""
    return RecordingEngine
