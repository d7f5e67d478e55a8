"""
Preview snapshots.

Declare a component's example configurations once and reuse them for
interactive previews and for snapshot regression tests.
"""

import logging
import sys

__version__ = "0.1.0"

# Configure logging for the package
def configure_logging(level=logging.INFO):
    """Configure logging for the preview_snapshots package."""
    # Configure the package-level logger
    logger = logging.getLogger('preview_snapshots')

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter('%(levelname)s: %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)

    return logger

# Configure logging by default
configure_logging()

# Import main classes for public API
from .cli import SnapshotCLI, main
from .comparator import Comparator, ComparisonConfig, ComparisonResult
from .config import ConfigManager, SnapshotConfig
from .dispatcher import (
    DispatchReport,
    SnapshotAsserter,
    StrategyShape,
    assert_snapshots,
    normalize_strategies,
    snapshot_identifier,
)
from .engine import OutcomeStatus, SnapshotEngine, SnapshotOutcome
from .errors import (
    DuplicateConfigurationError,
    PreviewSnapshotsError,
    SnapshotAssertionError,
    StrategyShapeError,
)
from .location import SourceLocation
from .registry import Configuration, NamedPreviewState, Preview, PreviewSnapshots
from .storage import ReferenceMetadata, ReferenceStore
from .strategy import STRATEGIES, Snapshotting, strategy_named

__all__ = [
    # Version
    "__version__",
    "configure_logging",
    # Registry
    "Configuration",
    "NamedPreviewState",
    "Preview",
    "PreviewSnapshots",
    # Dispatcher
    "DispatchReport",
    "SnapshotAsserter",
    "StrategyShape",
    "assert_snapshots",
    "normalize_strategies",
    "snapshot_identifier",
    # Strategies
    "STRATEGIES",
    "Snapshotting",
    "strategy_named",
    # Comparator
    "Comparator",
    "ComparisonConfig",
    "ComparisonResult",
    # Engine and storage
    "OutcomeStatus",
    "SnapshotEngine",
    "SnapshotOutcome",
    "ReferenceMetadata",
    "ReferenceStore",
    "SourceLocation",
    # Config
    "ConfigManager",
    "SnapshotConfig",
    # Errors
    "DuplicateConfigurationError",
    "PreviewSnapshotsError",
    "SnapshotAssertionError",
    "StrategyShapeError",
    # CLI
    "SnapshotCLI",
    "main",
]
