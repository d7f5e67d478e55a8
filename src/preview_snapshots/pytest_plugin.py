"""
pytest integration.

Registered through the ``pytest11`` entry point. Provides the
``preview_snapshots`` fixture and the ``--snapshot-record`` /
``--snapshot-dir`` command line options.
"""
from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from .config import ConfigManager, SnapshotConfig
from .dispatcher import SnapshotAsserter
from .location import SourceLocation


def pytest_addoption(parser):
    group = parser.getgroup("preview-snapshots")
    group.addoption(
        "--snapshot-record",
        action="store_true",
        default=None,
        help="Record new snapshot references instead of comparing against them",
    )
    group.addoption(
        "--snapshot-dir",
        default=None,
        help="Directory for snapshot references, relative to each test file",
    )
    group.addoption(
        "--snapshot-config",
        type=Path,
        default=None,
        help="Path to a preview_snapshots.json configuration file",
    )


@pytest.fixture(scope="session")
def preview_snapshots_config(pytestconfig) -> SnapshotConfig:
    """Session configuration: config file, then environment, then command line."""
    config_path = pytestconfig.getoption("--snapshot-config")
    if config_path is None:
        config_path = Path(pytestconfig.rootpath) / "preview_snapshots.json"

    manager = ConfigManager(config_path)
    manager.update_config(
        record=pytestconfig.getoption("--snapshot-record"),
        snapshot_dir=pytestconfig.getoption("--snapshot-dir"),
    )
    return manager.get_config()


@pytest.fixture
def preview_snapshots(request, preview_snapshots_config) -> SnapshotAsserter:
    """A ``SnapshotAsserter`` bound to the requesting test.

    Each test gets its own copy of the session configuration.
    """
    # Class and parametrization are part of the name so references never collide
    test_name = request.node.nodeid.split("::", 1)[-1]
    location = SourceLocation(
        file=Path(request.node.path),
        test_name=test_name,
        line=request.node.location[1] + 1 if request.node.location[1] is not None else None,
    )
    config = dataclasses.replace(
        preview_snapshots_config, tolerance=dict(preview_snapshots_config.tolerance)
    )
    return SnapshotAsserter(config=config, location=location)
