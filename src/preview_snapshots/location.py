"""
Source location of the test that asked for a snapshot.

The engine stores references next to the test file that requested them,
grouped by test name, so every assertion needs to know where it came from.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_PACKAGE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class SourceLocation:
    """File, test name and line of a snapshot assertion."""

    file: Path
    test_name: str
    line: Optional[int] = None

    @classmethod
    def from_caller(cls) -> "SourceLocation":
        """Locate the first stack frame outside of this package."""
        frame = inspect.currentframe()
        try:
            while frame is not None:
                path = Path(frame.f_code.co_filename).resolve()
                if _PACKAGE_DIR not in path.parents:
                    return cls(file=path, test_name=frame.f_code.co_name, line=frame.f_lineno)
                frame = frame.f_back
        finally:
            del frame

        raise RuntimeError("Could not determine the calling test's source location")

    @property
    def file_stem(self) -> str:
        return self.file.stem

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.file}::{self.test_name}"
        return f"{self.file}:{self.line}::{self.test_name}"
