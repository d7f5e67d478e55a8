"""
Snapshot strategies.

A ``Snapshotting`` turns a rendered unit into a comparable format, knows how
to persist that format as bytes and how to diff two instances of it. The
dispatcher treats strategies as opaque; the engine drives them.
"""
from __future__ import annotations

import difflib
import io
import json as _json
import pickle as _pickle
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

import numpy as np

from .comparator import Comparator, ComparisonConfig, ComparisonResult


@dataclass(frozen=True)
class Snapshotting:
    """A strategy for snapshotting and comparing values."""

    path_extension: str
    snapshot: Callable[[Any], Any]
    serialize: Callable[[Any], bytes]
    deserialize: Callable[[bytes], Any]
    diff: Callable[[Any, Any], ComparisonResult]
    """Called as ``diff(reference, actual)``."""

    def pullback(self, transform: Callable[[Any], Any]) -> "Snapshotting":
        """Return a strategy that applies ``transform`` before snapshotting.

        This is how a strategy for one kind of value is reused for another,
        e.g. a text strategy pulled back over a widget's ``render_text()``.
        """
        snapshot = self.snapshot
        return replace(self, snapshot=lambda value: snapshot(transform(value)))

    @classmethod
    def text(cls, formatter: Callable[[Any], str] = str) -> "Snapshotting":
        """Snapshot values as text, diffed line by line."""
        return cls(
            path_extension="txt",
            snapshot=formatter,
            serialize=_encode_text,
            deserialize=_decode_text,
            diff=_diff_text,
        )

    @classmethod
    def json(cls, indent: int = 2) -> "Snapshotting":
        """Snapshot JSON-serializable values as pretty printed JSON with sorted keys."""
        return cls.text(
            formatter=lambda value: _json.dumps(value, indent=indent, sort_keys=True, default=str)
        ).with_extension("json")

    @classmethod
    def pickle(cls, config: Optional[ComparisonConfig] = None) -> "Snapshotting":
        """Snapshot arbitrary picklable values, compared with tolerances."""
        comparator = Comparator(config)
        return cls(
            path_extension="pkl",
            snapshot=lambda value: value,
            serialize=_pickle.dumps,
            deserialize=_pickle.loads,
            diff=lambda reference, actual: comparator.compare(actual, reference),
        )

    @classmethod
    def array(cls, config: Optional[ComparisonConfig] = None) -> "Snapshotting":
        """Snapshot array-like values as ``.npy`` files, compared with tolerances."""
        comparator = Comparator(config)
        return cls(
            path_extension="npy",
            snapshot=np.asarray,
            serialize=_encode_array,
            deserialize=_decode_array,
            diff=lambda reference, actual: comparator.compare(actual, reference),
        )

    def with_extension(self, path_extension: str) -> "Snapshotting":
        return replace(self, path_extension=path_extension)


def _encode_text(text: str) -> bytes:
    return text.encode("utf-8")


def _decode_text(data: bytes) -> str:
    return data.decode("utf-8")


def _diff_text(reference: str, actual: str) -> ComparisonResult:
    if reference == actual:
        return ComparisonResult(match=True)

    diff_lines = list(
        difflib.unified_diff(
            reference.splitlines(),
            actual.splitlines(),
            fromfile="reference",
            tofile="actual",
            lineterm="",
        )
    )
    return ComparisonResult(
        match=False,
        error_message="Text differs:\n" + "\n".join(diff_lines),
        details={"diff": diff_lines},
    )


def _encode_array(array: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    np.save(buffer, array, allow_pickle=False)
    return buffer.getvalue()


def _decode_array(data: bytes) -> np.ndarray:
    return np.load(io.BytesIO(data), allow_pickle=False)


STRATEGIES: dict[str, Callable[[Optional[ComparisonConfig]], Snapshotting]] = {
    "text": lambda config: Snapshotting.text(),
    "json": lambda config: Snapshotting.json(),
    "pickle": Snapshotting.pickle,
    "array": Snapshotting.array,
}


def strategy_named(name: str, config: Optional[ComparisonConfig] = None) -> Snapshotting:
    """Build one of the built-in strategies by name.

    ``config`` sets the tolerances of the value comparing strategies.
    """
    try:
        factory = STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown snapshot strategy '{name}', expected one of: {', '.join(sorted(STRATEGIES))}"
        ) from None
    return factory(config)
