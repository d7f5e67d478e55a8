"""
Configuration management for preview snapshots.

This module handles loading and managing configuration settings
for the snapshot engine, the pytest plugin and the CLI.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "preview_snapshots.json"

ENV_RECORD = "PREVIEW_SNAPSHOTS_RECORD"
ENV_SNAPSHOT_DIR = "PREVIEW_SNAPSHOTS_DIR"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class SnapshotConfig:
    """Configuration for snapshot testing."""

    # Directories, relative paths resolve next to each test file
    snapshot_dir: str = "__snapshots__"

    # Recording
    record: bool = False
    record_missing: bool = True

    # Strategy used when an assertion does not name one
    default_strategy: str = "text"

    # Comparison settings
    tolerance: Dict[str, float] = None

    # Output settings
    verbose: bool = False
    quiet: bool = False

    def __post_init__(self):
        if self.tolerance is None:
            self.tolerance = {
                "rtol": 1e-5,
                "atol": 1e-8,
                "equal_nan": False
            }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SnapshotConfig':
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_file(cls, config_path: Path) -> 'SnapshotConfig':
        """Load configuration from JSON file."""
        if not config_path.exists():
            return cls()

        try:
            with open(config_path, 'r') as f:
                data = json.load(f)
            return cls.from_dict(data)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            return cls()

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def apply_environment(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Override settings from PREVIEW_SNAPSHOTS_* environment variables."""
        environ = os.environ if environ is None else environ

        if ENV_RECORD in environ:
            self.record = environ[ENV_RECORD].strip().lower() in _TRUTHY
        if environ.get(ENV_SNAPSHOT_DIR):
            self.snapshot_dir = environ[ENV_SNAPSHOT_DIR]

    def get_snapshot_dir(self) -> Path:
        """Get snapshot directory as Path."""
        return Path(self.snapshot_dir)


class ConfigManager:
    """Manages configuration loading and saving."""

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        self.config_path = config_path or Path(DEFAULT_CONFIG_FILE)
        self.environ = environ
        self.config = self._load()

    def _load(self) -> SnapshotConfig:
        config = SnapshotConfig.from_file(self.config_path)
        config.apply_environment(self.environ)
        return config

    def get_config(self) -> SnapshotConfig:
        """Get the current configuration."""
        return self.config

    def update_config(self, **kwargs) -> None:
        """Update configuration with new values, skipping ``None``."""
        for key, value in kwargs.items():
            if value is not None and hasattr(self.config, key):
                setattr(self.config, key, value)

    def save_config(self) -> None:
        """Save configuration to file."""
        self.config.save_to_file(self.config_path)

    def reload_config(self) -> None:
        """Reload configuration from file."""
        self.config = self._load()

    def create_default_config(self) -> None:
        """Create a default configuration file."""
        default_config = SnapshotConfig()
        default_config.save_to_file(self.config_path)
        logger.info(f"Created default configuration at {self.config_path}")
