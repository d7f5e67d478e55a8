"""
Snapshot dispatcher.

Fans a ``PreviewSnapshots`` collection out over one or more strategies and
hands every (configuration, strategy) pair to a snapshot engine under a
derived, unique identifier.

Identifiers are built from the configuration name, prefixed with ``named``
when given (``"{named}-{name}"``), and suffixed per strategy shape:

* single strategy: no suffix
* mapping of strategies: ``"-{key}"``
* list of strategies: ``"-{position}"``, positions start at 1
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Sequence, Union

from .comparator import ComparisonConfig
from .config import SnapshotConfig
from .engine import OutcomeStatus, SnapshotEngine, SnapshotOutcome
from .errors import SnapshotAssertionError, StrategyShapeError
from .location import SourceLocation
from .registry import Configuration, PreviewSnapshots
from .strategy import Snapshotting, strategy_named

logger = logging.getLogger(__name__)

Strategies = Union[Snapshotting, Mapping[str, Snapshotting], Sequence[Snapshotting]]


class Engine(Protocol):
    def assert_snapshot(
        self,
        value: Any,
        strategy: Snapshotting,
        identifier: str,
        record: bool,
        location: SourceLocation,
    ) -> SnapshotOutcome:
        ...


class StrategyShape(Enum):
    SINGLE = "single"
    KEYED = "keyed"
    ORDERED = "ordered"


def normalize_strategies(
    strategies: Strategies,
) -> tuple[StrategyShape, list[tuple[Optional[str], Snapshotting]]]:
    """Classify a strategy argument and pair each strategy with its identifier suffix."""
    if isinstance(strategies, Snapshotting):
        return StrategyShape.SINGLE, [(None, strategies)]

    if isinstance(strategies, Mapping):
        pairs = []
        for key, strategy in strategies.items():
            if not isinstance(strategy, Snapshotting):
                raise StrategyShapeError(strategy)
            pairs.append((str(key), strategy))
        return StrategyShape.KEYED, pairs

    if isinstance(strategies, (list, tuple)):
        pairs = []
        for position, strategy in enumerate(strategies, start=1):
            if not isinstance(strategy, Snapshotting):
                raise StrategyShapeError(strategy)
            pairs.append((str(position), strategy))
        return StrategyShape.ORDERED, pairs

    raise StrategyShapeError(strategies)


def snapshot_identifier(
    configuration: Configuration[Any], prefix: Optional[str] = None, suffix: Optional[str] = None
) -> str:
    """Derive the identifier of one (configuration, strategy) pair."""
    base = configuration.snapshot_name(prefix)
    if suffix is None:
        return base
    return f"{base}-{suffix}"


@dataclass
class DispatchReport:
    """Outcomes of one dispatch, in dispatch order."""

    outcomes: list[SnapshotOutcome] = field(default_factory=list)

    @property
    def identifiers(self) -> list[str]:
        return [outcome.identifier for outcome in self.outcomes]

    @property
    def failures(self) -> list[SnapshotOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    def summary(self) -> dict[str, int]:
        summary = {status.value: self.count(status) for status in OutcomeStatus}
        summary["total"] = len(self.outcomes)
        return summary

    def raise_for_failures(self) -> None:
        """Raise ``SnapshotAssertionError`` if any outcome failed or errored."""
        failures = self.failures
        if failures:
            raise SnapshotAssertionError(failures)


def assert_snapshots(
    snapshots: PreviewSnapshots[Any],
    strategies: Strategies,
    *,
    engine: Engine,
    location: SourceLocation,
    named: Optional[str] = None,
    record: bool = False,
    modify: Optional[Callable[[Any], Any]] = None,
) -> DispatchReport:
    """Assert every configuration against every requested strategy.

    Each pair renders the configuration's state afresh, applies ``modify``
    when given, and calls ``engine.assert_snapshot`` once. Mismatches do not
    stop the fan-out. If rendering a configuration raises, an ``error``
    outcome is reported for it and its remaining strategies are skipped;
    other configurations are still dispatched.
    """
    shape, pairs = normalize_strategies(strategies)
    report = DispatchReport()

    if not len(snapshots):
        logger.warning(f"No configurations to snapshot for {location}")
        return report

    logger.debug(
        f"Dispatching {len(snapshots)} configuration(s) x {len(pairs)} {shape.value} strategy(ies)"
    )

    for configuration in snapshots:
        for suffix, strategy in pairs:
            identifier = snapshot_identifier(configuration, named, suffix)

            try:
                value = snapshots.render(configuration)
                if modify is not None:
                    value = modify(value)
            except Exception as e:
                logger.warning(f"Rendering {configuration.name!r} failed: {e}")
                report.outcomes.append(
                    SnapshotOutcome(
                        identifier=identifier,
                        status=OutcomeStatus.ERROR,
                        message=f"Rendering failed: {type(e).__name__}: {e}",
                        details={"exception": e},
                    )
                )
                break

            report.outcomes.append(
                engine.assert_snapshot(value, strategy, identifier, record, location)
            )

    summary = report.summary()
    logger.info(
        f"Snapshots for {location.test_name}: {summary['passed']} passed, "
        f"{summary['failed']} failed, {summary['recorded']} recorded, {summary['error']} errors"
    )
    return report


class SnapshotAsserter:
    """Binds an engine, configuration and source location for test code.

    ``assert_snapshots`` runs the full dispatch and then raises a single
    ``SnapshotAssertionError`` listing every failing identifier.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        config: Optional[SnapshotConfig] = None,
        location: Optional[SourceLocation] = None,
    ):
        self.config = config or SnapshotConfig()
        self.engine = engine or SnapshotEngine(self.config)
        self.location = location

    def assert_snapshots(
        self,
        snapshots: PreviewSnapshots[Any],
        strategies: Optional[Strategies] = None,
        *,
        named: Optional[str] = None,
        record: Optional[bool] = None,
        modify: Optional[Callable[[Any], Any]] = None,
    ) -> DispatchReport:
        if strategies is None:
            strategies = strategy_named(
                self.config.default_strategy,
                ComparisonConfig.from_tolerance(self.config.tolerance),
            )
        if record is None:
            record = self.config.record

        report = assert_snapshots(
            snapshots,
            strategies,
            engine=self.engine,
            location=self.location or SourceLocation.from_caller(),
            named=named,
            record=record,
            modify=modify,
        )
        report.raise_for_failures()
        return report
