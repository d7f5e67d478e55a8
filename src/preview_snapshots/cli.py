"""
Command-line interface for preview snapshots.

This module provides CLI commands for previewing configuration registries
and for inspecting and cleaning recorded snapshot references.
"""
from __future__ import annotations

import argparse
import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .config import ConfigManager
from .registry import PreviewSnapshots
from .storage import ReferenceStore

logger = logging.getLogger(__name__)


class SnapshotCLI:
    """Command-line interface for preview snapshots."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.get_config()

    def run(self, args: Optional[list[str]] = None) -> int:
        """Run the CLI with given arguments."""
        parser = self._create_parser()
        parsed_args = parser.parse_args(args)

        if parsed_args.config:
            self.config_manager = ConfigManager(parsed_args.config)
            self.config = self.config_manager.get_config()
        if parsed_args.verbose:
            self.config.verbose = True
            logging.getLogger("preview_snapshots").setLevel(logging.DEBUG)
        if parsed_args.quiet:
            self.config.quiet = True

        if not hasattr(parsed_args, "func"):
            parser.print_help()
            return 1

        try:
            return parsed_args.func(parsed_args)
        except KeyboardInterrupt:
            logger.info("\nInterrupted by user")
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            if self.config.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="preview-snapshots",
            description="Preview configuration registries and manage snapshot references",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument("--config", "-c", type=Path, help="Configuration file path")

        parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

        parser.add_argument("--quiet", "-q", action="store_true", help="Quiet output")

        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        # Preview command
        preview_parser = subparsers.add_parser(
            "preview", help="Render every configuration of a registry"
        )
        preview_parser.add_argument(
            "target",
            help="Registry to preview as MODULE:ATTRIBUTE or path/to/file.py:ATTRIBUTE",
        )
        preview_parser.set_defaults(func=self._preview_command)

        # List command
        list_parser = subparsers.add_parser("list", help="List recorded references")
        list_parser.add_argument(
            "snapshot_dir", type=Path, nargs="?", help="Directory containing references"
        )
        list_parser.add_argument("--test-file", help="Only list references of one test file")
        list_parser.set_defaults(func=self._list_command)

        # Clean command
        clean_parser = subparsers.add_parser(
            "clean", help="Remove orphaned metadata and empty directories"
        )
        clean_parser.add_argument(
            "snapshot_dir", type=Path, nargs="?", help="Directory containing references"
        )
        clean_parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without actually deleting",
        )
        clean_parser.set_defaults(func=self._clean_command)

        # Config command
        config_parser = subparsers.add_parser("config", help="Configuration management")
        config_parser.add_argument(
            "--init", action="store_true", help="Initialize default configuration file"
        )
        config_parser.add_argument("--show", action="store_true", help="Show current configuration")
        config_parser.set_defaults(func=self._config_command)

        return parser

    def _preview_command(self, args) -> int:
        """Handle the preview command."""
        snapshots = load_registry(args.target)

        previews = snapshots.previews()
        for preview in previews:
            print(f"=== {preview.display_name} ===")
            print(preview.content)
            print()

        if not self.config.quiet:
            logger.info(f"Rendered {len(previews)} preview(s) from {args.target}")
        return 0

    def _list_command(self, args) -> int:
        """Handle the list command."""
        snapshot_dir = args.snapshot_dir or self.config.get_snapshot_dir()
        store = ReferenceStore(snapshot_dir)
        references = store.list_references(args.test_file)

        logger.info(f"Found {len(references)} references in {snapshot_dir}:")

        for reference_path, metadata in references:
            logger.info(f"  {reference_path.relative_to(snapshot_dir)}")
            if metadata is None:
                logger.info("    (no metadata)")
                continue

            logger.info(f"    Identifier: {metadata.identifier}")
            if self.config.verbose:
                logger.debug(f"    Test: {metadata.test_file}::{metadata.test_name}")
                logger.debug(f"    Recorded: {metadata.timestamp.isoformat()}")
                if metadata.git_commit:
                    logger.debug(f"    Commit: {metadata.git_commit} ({metadata.git_branch})")

        return 0

    def _clean_command(self, args) -> int:
        """Handle the clean command."""
        snapshot_dir = args.snapshot_dir or self.config.get_snapshot_dir()

        if not snapshot_dir.exists():
            logger.info(f"Snapshot directory {snapshot_dir} does not exist")
            return 0

        store = ReferenceStore(snapshot_dir)
        stats = store.get_reference_stats()

        logger.info(f"Snapshot directory: {snapshot_dir}")
        logger.info(f"Total references: {stats['total_references']}")
        logger.info(f"Total size: {stats['total_size_bytes'] / 1024 / 1024:.2f} MB")

        orphans = store.find_orphaned_metadata()
        for metadata_path in orphans:
            if args.dry_run:
                logger.info(f"  Would delete {metadata_path}")
            else:
                metadata_path.unlink()
                logger.info(f"  Deleted {metadata_path}")

        if args.dry_run:
            logger.info(f"Dry run - {len(orphans)} orphaned metadata file(s) would be deleted")
            return 0

        removed = store.cleanup_empty_directories()
        logger.info(
            f"Deleted {len(orphans)} orphaned metadata file(s) and {len(removed)} empty directories"
        )
        return 0

    def _config_command(self, args) -> int:
        """Handle the config command."""
        if args.init:
            self.config_manager.create_default_config()
            return 0

        if args.show:
            logger.info("Current configuration:")
            config_dict = self.config.to_dict()
            for key, value in config_dict.items():
                logger.info(f"  {key}: {value}")
            return 0

        logger.info("Use --init to create default config or --show to display current config")
        return 0


def load_registry(target: str) -> PreviewSnapshots[Any]:
    """Resolve ``MODULE:ATTRIBUTE`` or ``path.py:ATTRIBUTE`` to a registry.

    The attribute may be a ``PreviewSnapshots`` or a callable returning one.
    """
    module_ref, sep, attribute = target.rpartition(":")
    if not sep or not module_ref or not attribute:
        raise ValueError(f"Expected MODULE:ATTRIBUTE, got '{target}'")

    if module_ref.endswith(".py"):
        module = _load_module_from_file(Path(module_ref))
    else:
        module = importlib.import_module(module_ref)

    value: Any = module
    for part in attribute.split("."):
        value = getattr(value, part)

    if not isinstance(value, PreviewSnapshots) and callable(value):
        value = value()

    if not isinstance(value, PreviewSnapshots):
        raise TypeError(f"{target} is a {type(value).__name__}, not PreviewSnapshots")
    return value


def _load_module_from_file(module_file: Path) -> Any:
    """Load a module from a file path."""
    if not module_file.exists():
        raise FileNotFoundError(f"Module file not found: {module_file}")

    module_name = module_file.stem
    spec = importlib.util.spec_from_file_location(module_name, module_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load module: {module_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    cli = SnapshotCLI()
    return cli.run(args)


if __name__ == "__main__":
    sys.exit(main())
