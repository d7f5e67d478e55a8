"""
Reference storage for snapshot testing.

References are stored as raw bytes under
``<snapshot_dir>/<test file stem>/<test name>.<identifier>.<ext>`` with a
``.meta.json`` sidecar describing how and when they were recorded. Name
parts that are not already file-name safe carry a digest of their raw text.
"""
from __future__ import annotations

import hashlib
import json
import logging
import os
import platform
import re
import subprocess
import sys
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".meta.json"
_DIGEST_LENGTH = 8


@dataclass
class ReferenceMetadata:
    """Metadata for a recorded reference."""

    identifier: str
    test_file: str
    test_name: str
    path_extension: str
    timestamp: datetime
    git_commit: Optional[str] = None
    git_branch: Optional[str] = None
    python_version: Optional[str] = None
    platform: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReferenceMetadata":
        """Create from dictionary."""
        data = dict(data)
        if isinstance(data["timestamp"], str):
            data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        return cls(**data)


def sanitize_path_component(text: str) -> str:
    """Make ``text`` usable as part of a file name.

    Runs of non-word characters become '-' and the ends are trimmed. When
    that changes the text, a short digest of the original is appended so two
    distinct texts never share a file name.
    """
    sanitized = re.sub(r"\W+", "-", text).strip("-")
    if sanitized == text:
        return sanitized

    digest = hashlib.sha1(text.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
    return f"{sanitized}-{digest}" if sanitized else digest


def metadata_path_for(reference_path: Path) -> Path:
    return reference_path.with_name(reference_path.name + METADATA_SUFFIX)


class ReferenceStore:
    """Manages reference storage and retrieval."""

    def __init__(self, snapshot_dir: Path):
        self.snapshot_dir = Path(snapshot_dir)

    def reference_path(
        self, test_file_stem: str, test_name: str, identifier: str, path_extension: str
    ) -> Path:
        """Path of the reference for one snapshot identifier."""
        if not identifier:
            raise ValueError("Snapshot identifier must not be empty")
        if not test_name:
            raise ValueError("Test name must not be empty")

        file_name = (
            f"{sanitize_path_component(test_name)}.{sanitize_path_component(identifier)}"
            f".{path_extension}"
        )
        return self.snapshot_dir / test_file_stem / file_name

    def store_reference(
        self,
        reference_path: Path,
        data: bytes,
        identifier: str,
        test_file: str,
        test_name: str,
        path_extension: str,
    ) -> Path:
        """Write reference bytes and their metadata sidecar."""
        reference_path.parent.mkdir(parents=True, exist_ok=True)
        reference_path.write_bytes(data)

        metadata = ReferenceMetadata(
            identifier=identifier,
            test_file=test_file,
            test_name=test_name,
            path_extension=path_extension,
            timestamp=datetime.now(),
            git_commit=self._get_git_commit(),
            git_branch=self._get_git_branch(),
            python_version=self._get_python_version(),
            platform=self._get_platform(),
        )
        with open(metadata_path_for(reference_path), "w") as f:
            json.dump(metadata.to_dict(), f, indent=2, default=str)

        logger.debug(f"Stored reference {reference_path}")
        return reference_path

    def load_reference(self, reference_path: Path) -> Optional[bytes]:
        """Load reference bytes, or None if no reference exists."""
        if not reference_path.exists():
            return None
        return reference_path.read_bytes()

    def load_metadata(self, reference_path: Path) -> Optional[ReferenceMetadata]:
        """Load the metadata sidecar of a reference, if readable."""
        metadata_path = metadata_path_for(reference_path)
        if not metadata_path.exists():
            return None

        try:
            with open(metadata_path) as f:
                return ReferenceMetadata.from_dict(json.load(f))
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning(f"Failed to load reference metadata {metadata_path}: {e}")
            return None

    def list_references(
        self, test_file_stem: Optional[str] = None
    ) -> list[tuple[Path, Optional[ReferenceMetadata]]]:
        """List all stored references, optionally for one test file."""
        search_dir = self.snapshot_dir
        if test_file_stem:
            search_dir = search_dir / test_file_stem

        if not search_dir.exists():
            return []

        references = []
        for path in sorted(search_dir.rglob("*")):
            if not path.is_file() or path.name.endswith(METADATA_SUFFIX):
                continue
            references.append((path, self.load_metadata(path)))

        return references

    def delete_reference(self, reference_path: Path) -> bool:
        """Delete a reference and its sidecar."""
        deleted = False

        if reference_path.exists():
            reference_path.unlink()
            deleted = True

        metadata_path = metadata_path_for(reference_path)
        if metadata_path.exists():
            metadata_path.unlink()

        return deleted

    def find_orphaned_metadata(self) -> list[Path]:
        """Sidecars whose reference file no longer exists."""
        if not self.snapshot_dir.exists():
            return []

        orphans = []
        for metadata_path in sorted(self.snapshot_dir.rglob(f"*{METADATA_SUFFIX}")):
            reference_path = metadata_path.with_name(metadata_path.name[: -len(METADATA_SUFFIX)])
            if not reference_path.exists():
                orphans.append(metadata_path)
        return orphans

    def cleanup_empty_directories(self) -> list[Path]:
        """Remove empty directories in the reference tree."""
        removed = []
        for root, dirs, _ in os.walk(self.snapshot_dir, topdown=False):
            for dir_name in dirs:
                dir_path = Path(root) / dir_name
                try:
                    if not any(dir_path.iterdir()):
                        dir_path.rmdir()
                        removed.append(dir_path)
                except OSError:
                    pass  # Directory not empty or permission error
        return removed

    def get_reference_stats(self) -> dict[str, Any]:
        """Get statistics about stored references."""
        references = self.list_references()

        stats: dict[str, Any] = {
            "total_references": len(references),
            "test_files": set(),
            "extensions": set(),
            "oldest_reference": None,
            "newest_reference": None,
            "total_size_bytes": 0,
        }

        for reference_path, metadata in references:
            stats["test_files"].add(reference_path.parent.name)
            stats["extensions"].add(reference_path.suffix.lstrip("."))

            if metadata is not None:
                if stats["oldest_reference"] is None or metadata.timestamp < stats["oldest_reference"]:
                    stats["oldest_reference"] = metadata.timestamp
                if stats["newest_reference"] is None or metadata.timestamp > stats["newest_reference"]:
                    stats["newest_reference"] = metadata.timestamp

            try:
                stats["total_size_bytes"] += reference_path.stat().st_size
            except OSError:
                pass

        stats["test_files"] = sorted(stats["test_files"])
        stats["extensions"] = sorted(stats["extensions"])

        return stats

    def _get_git_commit(self) -> Optional[str]:
        """Get current git commit hash."""
        return self._run_git("rev-parse", "HEAD", transform=lambda out: out[:12])

    def _get_git_branch(self) -> Optional[str]:
        """Get current git branch."""
        return self._run_git("branch", "--show-current")

    def _run_git(self, *args: str, transform=None) -> Optional[str]:
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                timeout=5,
                cwd=self.snapshot_dir if self.snapshot_dir.exists() else None,
            )
        except (OSError, subprocess.SubprocessError):
            return None

        if result.returncode != 0:
            return None
        output = result.stdout.strip()
        return transform(output) if transform else output

    def _get_python_version(self) -> str:
        """Get Python version."""
        return f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

    def _get_platform(self) -> str:
        """Get platform information."""
        return f"{platform.system()}-{platform.machine()}"
