"""Integration tests for end-to-end workflows."""

from dataclasses import dataclass

import numpy as np
import pytest

from preview_snapshots import (
    ComparisonConfig,
    OutcomeStatus,
    PreviewSnapshots,
    SnapshotAsserter,
    SnapshotAssertionError,
    SnapshotConfig,
    SnapshotEngine,
    Snapshotting,
    assert_snapshots,
)


@dataclass
class TextUnit:
    """A minimal rendered component."""

    text: str
    border: bool = False

    def render_text(self):
        if self.border:
            return f"+{'-' * len(self.text)}+\n|{self.text}|\n+{'-' * len(self.text)}+"
        return self.text


@dataclass
class CardState:
    name: str
    title: str
    subtitle: str


@pytest.fixture
def workspace_engine(temp_snapshot_dir):
    return SnapshotEngine(SnapshotConfig(snapshot_dir=str(temp_snapshot_dir)))


@pytest.fixture
def messages():
    return PreviewSnapshots([("Short", "Hi"), ("Long", "Hello World")], configure=TextUnit)


@pytest.fixture
def text_units():
    return Snapshotting.text().pullback(TextUnit.render_text)


class TestRecordAndVerify:
    """Record references, then verify against them."""

    def test_single_strategy(self, messages, workspace_engine, location, text_units):
        recorded = assert_snapshots(
            messages, text_units, engine=workspace_engine, location=location, record=True
        )
        verified = assert_snapshots(messages, text_units, engine=workspace_engine, location=location)

        assert recorded.identifiers == ["Short", "Long"]
        assert verified.identifiers == ["Short", "Long"]
        assert verified.summary()["passed"] == 2

    def test_keyed_strategies(self, messages, workspace_engine, location, text_units):
        strategies = {"A": text_units, "B": Snapshotting.pickle().pullback(lambda unit: unit.text)}

        assert_snapshots(
            messages, strategies, engine=workspace_engine, location=location, record=True
        )
        report = assert_snapshots(messages, strategies, engine=workspace_engine, location=location)

        assert report.identifiers == ["Short-A", "Short-B", "Long-A", "Long-B"]
        assert report.failures == []

    def test_modify_only_affects_snapshots(self, messages, workspace_engine, location, text_units):
        add_border = lambda unit: TextUnit(unit.text, border=True)

        report = assert_snapshots(
            messages,
            text_units,
            engine=workspace_engine,
            location=location,
            named="bordered",
            record=True,
            modify=add_border,
        )

        short = report.outcomes[0].reference_path.read_text()
        assert short == "+--+\n|Hi|\n+--+"
        assert [p.content for p in messages.previews()] == [TextUnit("Hi"), TextUnit("Hello World")]

    def test_regression_reports_every_failure(self, workspace_engine, location, text_units):
        before = PreviewSnapshots([("A", "one"), ("B", "two"), ("C", "three")], configure=TextUnit)
        after = PreviewSnapshots([("A", "uno"), ("B", "two"), ("C", "tres")], configure=TextUnit)
        assert_snapshots(before, text_units, engine=workspace_engine, location=location, record=True)

        report = assert_snapshots(after, text_units, engine=workspace_engine, location=location)

        assert [o.status for o in report.outcomes] == [
            OutcomeStatus.FAILED,
            OutcomeStatus.PASSED,
            OutcomeStatus.FAILED,
        ]

    @pytest.mark.parametrize("first,second", [
        ("Hello World", "Hello-World"),
        ("\N{SLIGHTLY SMILING FACE}", "\N{SLIGHTLY FROWNING FACE}"),
    ])
    def test_similar_names_keep_separate_references(
        self, workspace_engine, location, text_units, first, second
    ):
        snapshots = PreviewSnapshots([(first, "one"), (second, "two")], configure=TextUnit)

        recorded = assert_snapshots(
            snapshots, text_units, engine=workspace_engine, location=location, record=True
        )
        verified = assert_snapshots(snapshots, text_units, engine=workspace_engine, location=location)

        first_path, second_path = (o.reference_path for o in recorded.outcomes)
        assert first_path != second_path
        assert first_path.read_text() == "one"
        assert second_path.read_text() == "two"
        assert verified.summary()["passed"] == 2


class TestNamedStates:
    """Registries built from named states."""

    def test_named_states_with_light_and_dark(self, workspace_engine, location):
        cards = PreviewSnapshots.from_states(
            [
                CardState("Short", "Hello", "PreviewSnapshots"),
                CardState("Long", "Hello PreviewSnapshots", "Welcome to PreviewSnapshots"),
            ],
            configure=lambda state: {"title": state.title, "subtitle": state.subtitle},
        )
        strategies = {
            "Light": Snapshotting.json().pullback(lambda card: {**card, "scheme": "light"}),
            "Dark": Snapshotting.json().pullback(lambda card: {**card, "scheme": "dark"}),
        }
        asserter = SnapshotAsserter(engine=workspace_engine, location=location)

        report = asserter.assert_snapshots(cards, strategies, named="iOS", record=True)

        assert report.identifiers == [
            "iOS-Short-Light",
            "iOS-Short-Dark",
            "iOS-Long-Light",
            "iOS-Long-Dark",
        ]
        assert '"scheme": "dark"' in report.outcomes[1].reference_path.read_text()


class TestArrays:
    """Pixel-buffer style snapshots through the array strategy."""

    def test_ordered_array_strategies(self, workspace_engine, location):
        gradients = PreviewSnapshots(
            [("Narrow", 2), ("Wide", 4)],
            configure=lambda width: np.linspace(0.0, 1.0, width),
        )
        strategies = [Snapshotting.array(), Snapshotting.array().pullback(lambda a: a[::-1])]
        asserter = SnapshotAsserter(engine=workspace_engine, location=location)

        asserter.assert_snapshots(gradients, strategies, record=True)
        report = asserter.assert_snapshots(gradients, strategies)

        assert report.identifiers == ["Narrow-1", "Narrow-2", "Wide-1", "Wide-2"]

    def test_tolerance_breach_raises(self, workspace_engine, location):
        asserter = SnapshotAsserter(engine=workspace_engine, location=location)
        strategy = Snapshotting.array(ComparisonConfig(atol=1e-3))
        asserter.assert_snapshots(
            PreviewSnapshots([("Flat", 0.0)], configure=lambda v: np.full(3, v)),
            strategy,
            record=True,
        )

        with pytest.raises(SnapshotAssertionError, match="Flat"):
            asserter.assert_snapshots(
                PreviewSnapshots([("Flat", 0.01)], configure=lambda v: np.full(3, v)),
                strategy,
            )
