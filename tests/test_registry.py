"""Tests for the configuration registry."""

from dataclasses import dataclass

import pytest

from preview_snapshots.errors import DuplicateConfigurationError
from preview_snapshots.registry import (
    Configuration,
    NamedPreviewState,
    Preview,
    PreviewSnapshots,
)


@dataclass
class BannerState:
    name: str
    message: str
    enabled: bool = True


class TestConfiguration:
    """Tests for Configuration."""

    def test_snapshot_name_without_prefix(self):
        configuration = Configuration(name="Short", state="Hi")
        assert configuration.snapshot_name() == "Short"

    def test_snapshot_name_with_prefix(self):
        configuration = Configuration(name="Short", state="Hi")
        assert configuration.snapshot_name("iOS") == "iOS-Short"

    def test_empty_prefix_is_still_a_prefix(self):
        configuration = Configuration(name="Short", state="Hi")
        assert configuration.snapshot_name("") == "-Short"

    def test_configuration_is_immutable(self):
        configuration = Configuration(name="Short", state="Hi")
        with pytest.raises(AttributeError):
            configuration.name = "Other"


class TestConstruction:
    """Tests for building a registry."""

    def test_from_pairs(self):
        snapshots = PreviewSnapshots([("Short", "Hi"), ("Long", "Hello World")], configure=str.upper)

        assert snapshots.names == ["Short", "Long"]
        assert all(isinstance(c, Configuration) for c in snapshots.configurations)
        assert len(snapshots) == 2

    def test_from_configurations(self):
        snapshots = PreviewSnapshots(
            [Configuration("Small", (1, "a")), Configuration("Large", (1000, "b"))],
            configure=lambda state: state[0],
        )

        assert [c.state for c in snapshots] == [(1, "a"), (1000, "b")]

    def test_configurations_are_copied(self):
        configurations = [("Short", "Hi")]
        snapshots = PreviewSnapshots(configurations, configure=str)
        configurations.append(("Long", "Hello"))

        assert snapshots.names == ["Short"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(DuplicateConfigurationError) as exc_info:
            PreviewSnapshots(
                [("Short", "Hi"), ("Long", "Hello"), ("Short", "Hey"), ("Short", "Yo")],
                configure=str,
            )

        assert exc_info.value.names == ["Short"]
        assert isinstance(exc_info.value, ValueError)

    def test_empty_registry_allowed(self):
        snapshots = PreviewSnapshots([], configure=str)
        assert len(snapshots) == 0
        assert snapshots.previews() == []

    def test_from_named_states(self):
        states = [BannerState("Short", "Hi"), BannerState("Disabled", "Hi", enabled=False)]
        snapshots = PreviewSnapshots.from_states(states, configure=lambda s: s.message)

        assert snapshots.names == ["Short", "Disabled"]
        assert snapshots.configurations[1].state is states[1]
        assert isinstance(states[0], NamedPreviewState)

    def test_from_states_with_name_callable(self):
        states = [{"title": "A"}, {"title": "B"}]
        snapshots = PreviewSnapshots.from_states(
            states, configure=dict, name=lambda state: state["title"]
        )

        assert snapshots.names == ["A", "B"]

    def test_from_states_with_attribute_string(self):
        @dataclass
        class Row:
            label: str

        snapshots = PreviewSnapshots.from_states([Row("x"), Row("y")], configure=str, name="label")
        assert snapshots.names == ["x", "y"]

    def test_from_states_without_name(self):
        with pytest.raises(TypeError, match="no 'name' attribute"):
            PreviewSnapshots.from_states(["plain string"], configure=str)

    def test_from_states_rejects_duplicates(self):
        with pytest.raises(DuplicateConfigurationError):
            PreviewSnapshots.from_states(
                [BannerState("Same", "a"), BannerState("Same", "b")], configure=str
            )


class TestPreviews:
    """Tests for the preview sequence."""

    def test_previews_in_insertion_order(self):
        snapshots = PreviewSnapshots(
            [("Long", "Hello World"), ("Short", "Hi"), ("Medium", "Hello")],
            configure=lambda message: f"[{message}]",
        )

        previews = snapshots.previews()

        assert previews == [
            Preview("Long", "[Hello World]"),
            Preview("Short", "[Hi]"),
            Preview("Medium", "[Hello]"),
        ]

    def test_previews_are_repeatable(self):
        snapshots = PreviewSnapshots([("Short", "Hi"), ("Long", "Hello World")], configure=len)

        assert snapshots.previews() == snapshots.previews()

    def test_render_errors_propagate(self):
        def configure(state):
            raise RuntimeError("broken view")

        snapshots = PreviewSnapshots([("Short", "Hi")], configure=configure)

        with pytest.raises(RuntimeError, match="broken view"):
            snapshots.previews()
