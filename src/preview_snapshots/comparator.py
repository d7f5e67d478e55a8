"""
Comparison engine for value snapshots.

This module compares a freshly snapshotted value with its stored reference,
using numpy tolerances for arrays and numeric scalars and structural
equality for everything else.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np


@dataclass
class ComparisonResult:
    """Result of comparing two values."""

    match: bool
    tolerance_used: Optional[dict[str, float]] = None
    error_message: Optional[str] = None
    details: Optional[dict[str, Any]] = None


@dataclass
class ComparisonConfig:
    """Configuration for comparison operations."""

    rtol: float = 1e-5
    atol: float = 1e-8
    equal_nan: bool = False
    strict_types: bool = True
    strict_shapes: bool = True

    @classmethod
    def from_tolerance(cls, tolerance: dict[str, Any]) -> "ComparisonConfig":
        """Build from a ``{"rtol", "atol", "equal_nan"}`` mapping."""
        return cls(
            rtol=tolerance.get("rtol", cls.rtol),
            atol=tolerance.get("atol", cls.atol),
            equal_nan=tolerance.get("equal_nan", cls.equal_nan),
        )

    def tolerance(self) -> dict[str, float]:
        return {"rtol": self.rtol, "atol": self.atol, "equal_nan": self.equal_nan}


class Comparator:
    """Compares values with configurable tolerances."""

    def __init__(self, config: Optional[ComparisonConfig] = None):
        self.config = config or ComparisonConfig()

    def compare(self, actual: Any, expected: Any) -> ComparisonResult:
        """Compare actual value with expected value."""
        try:
            if actual is None and expected is None:
                return ComparisonResult(match=True)
            elif actual is None or expected is None:
                return ComparisonResult(
                    match=False,
                    error_message=f"One value is None: actual={actual!r}, expected={expected!r}",
                )

            # Order matters: arrays before scalars, containers before plain equality
            strategies = [
                self._compare_arrays,
                self._compare_scalars,
                self._compare_dicts,
                self._compare_sequences,
                self._compare_fallback,
            ]

            for strategy in strategies:
                result = strategy(actual, expected)
                if result is not None:
                    return result

            return ComparisonResult(
                match=False, error_message="No comparison strategy could handle these types"
            )

        except Exception as e:
            return ComparisonResult(
                match=False, error_message=f"Comparison failed with exception: {e}"
            )

    def _compare_arrays(self, actual: Any, expected: Any) -> Optional[ComparisonResult]:
        """Compare numpy arrays element-wise within tolerance."""
        if not (isinstance(actual, np.ndarray) and isinstance(expected, np.ndarray)):
            return None

        if self.config.strict_shapes and actual.shape != expected.shape:
            return ComparisonResult(
                match=False,
                error_message=f"Array shapes differ: {actual.shape} vs {expected.shape}",
            )

        if self.config.strict_types and actual.dtype != expected.dtype:
            return ComparisonResult(
                match=False,
                error_message=f"Array dtypes differ: {actual.dtype} vs {expected.dtype}",
            )

        if actual.dtype == object or expected.dtype == object:
            return self._compare_sequences(actual.ravel().tolist(), expected.ravel().tolist())

        tolerance_used = self.config.tolerance()

        if not (
            np.issubdtype(actual.dtype, np.number) and np.issubdtype(expected.dtype, np.number)
        ):
            match = bool(np.array_equal(actual, expected))
            return ComparisonResult(
                match=match,
                error_message=None if match else "Arrays not equal",
            )

        try:
            if np.issubdtype(actual.dtype, np.integer) and np.issubdtype(expected.dtype, np.integer):
                close = np.equal(actual, expected)
            else:
                close = np.isclose(
                    actual,
                    expected,
                    rtol=self.config.rtol,
                    atol=self.config.atol,
                    equal_nan=self.config.equal_nan,
                )
        except ValueError as e:
            return ComparisonResult(match=False, error_message=f"Array comparison failed: {e}")

        if close.all():
            return ComparisonResult(match=True, tolerance_used=tolerance_used)

        differences = np.abs(
            np.asarray(actual, dtype=float) - np.asarray(expected, dtype=float)
        )[~close]
        max_diff = float(np.nanmax(differences)) if differences.size else 0.0
        mean_diff = float(np.nanmean(differences)) if differences.size else 0.0

        return ComparisonResult(
            match=False,
            tolerance_used=tolerance_used,
            error_message=f"Arrays not close: max_diff={max_diff:.2e}, mean_diff={mean_diff:.2e}",
            details={
                "max_difference": max_diff,
                "mean_difference": mean_diff,
                "mismatched_elements": int((~close).sum()),
                "shape": actual.shape,
                "dtype": str(actual.dtype),
            },
        )

    def _compare_scalars(self, actual: Any, expected: Any) -> Optional[ComparisonResult]:
        """Compare numeric scalars within tolerance."""
        if not (self._is_numeric_scalar(actual) and self._is_numeric_scalar(expected)):
            return None

        if self._is_integer(actual) and self._is_integer(expected):
            if int(actual) == int(expected):
                return ComparisonResult(match=True)
            diff = abs(int(actual) - int(expected))
            return ComparisonResult(
                match=False,
                error_message=f"Integers differ: {actual} vs {expected}, diff={diff}",
                details={"difference": diff},
            )

        match = bool(
            np.isclose(
                float(actual),
                float(expected),
                rtol=self.config.rtol,
                atol=self.config.atol,
                equal_nan=self.config.equal_nan,
            )
        )
        tolerance_used = self.config.tolerance()

        if match:
            return ComparisonResult(match=True, tolerance_used=tolerance_used)

        diff = abs(float(actual) - float(expected))
        return ComparisonResult(
            match=False,
            tolerance_used=tolerance_used,
            error_message=f"Scalars not close: {actual} vs {expected}, diff={diff:.2e}",
            details={"difference": diff},
        )

    def _compare_sequences(self, actual: Any, expected: Any) -> Optional[ComparisonResult]:
        """Compare lists and tuples element by element."""
        if not (isinstance(actual, (list, tuple)) and isinstance(expected, (list, tuple))):
            return None

        if self.config.strict_types and type(actual) is not type(expected):
            return ComparisonResult(
                match=False,
                error_message=f"Type mismatch: {type(actual).__name__} vs {type(expected).__name__}",
            )

        if len(actual) != len(expected):
            return ComparisonResult(
                match=False,
                error_message=f"Sequence lengths differ: {len(actual)} vs {len(expected)}",
            )

        mismatches = []
        for i, (a, e) in enumerate(zip(actual, expected)):
            result = self.compare(a, e)
            if not result.match:
                mismatches.append((i, result.error_message))

        if mismatches:
            return ComparisonResult(
                match=False,
                error_message=f"Sequence elements differ at indices: {[i for i, _ in mismatches[:5]]}",
                details={"mismatches": mismatches[:10]},
            )
        return ComparisonResult(match=True)

    def _compare_dicts(self, actual: Any, expected: Any) -> Optional[ComparisonResult]:
        """Compare dictionaries key by key."""
        if not (isinstance(actual, dict) and isinstance(expected, dict)):
            return None

        actual_keys = set(actual.keys())
        expected_keys = set(expected.keys())

        if actual_keys != expected_keys:
            missing = expected_keys - actual_keys
            extra = actual_keys - expected_keys
            return ComparisonResult(
                match=False, error_message=f"Dict keys differ: missing={missing}, extra={extra}"
            )

        mismatches = []
        for key in expected:
            result = self.compare(actual[key], expected[key])
            if not result.match:
                mismatches.append((key, result.error_message))

        if mismatches:
            return ComparisonResult(
                match=False,
                error_message=f"Dict values differ for keys: {[k for k, _ in mismatches[:5]]}",
                details={"mismatches": mismatches[:10]},
            )
        return ComparisonResult(match=True)

    def _compare_fallback(self, actual: Any, expected: Any) -> Optional[ComparisonResult]:
        """Fallback comparison using the == operator."""
        if self.config.strict_types and type(actual) is not type(expected):
            return ComparisonResult(
                match=False,
                error_message=f"Type mismatch: {type(actual).__name__} vs {type(expected).__name__}",
            )

        match = actual == expected
        if isinstance(match, np.ndarray):
            match = bool(match.all())

        return ComparisonResult(
            match=bool(match),
            error_message=None if match else f"Values not equal: {actual!r} vs {expected!r}",
        )

    def _is_numeric_scalar(self, value: Any) -> bool:
        """Check if value is a numeric scalar (bool excluded)."""
        if isinstance(value, (bool, np.bool_)):
            return False
        return isinstance(value, (int, float, np.number))

    def _is_integer(self, value: Any) -> bool:
        return isinstance(value, (int, np.integer)) and not isinstance(value, bool)

