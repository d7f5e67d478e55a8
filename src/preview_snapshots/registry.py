"""
Configuration registry for preview snapshots.

A registry holds an ordered set of named example states together with the
single function that renders a state into the unit being previewed or
snapshot tested. The same registry feeds both the preview sequence and the
snapshot dispatcher.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    Iterator,
    Optional,
    Protocol,
    TypeVar,
    Union,
    runtime_checkable,
)

from .errors import DuplicateConfigurationError

S = TypeVar("S")


@runtime_checkable
class NamedPreviewState(Protocol):
    """A preview state that carries its own name."""

    name: str


@dataclass(frozen=True)
class Configuration(Generic[S]):
    """A single named state used for previews and snapshots."""

    name: str
    state: S

    def snapshot_name(self, prefix: Optional[str] = None) -> str:
        """Build the base snapshot identifier, optionally prefixed."""
        if prefix is None:
            return self.name
        return f"{prefix}-{self.name}"


@dataclass(frozen=True)
class Preview:
    """One entry of a preview sequence."""

    display_name: str
    content: Any


class PreviewSnapshots(Generic[S]):
    """An ordered collection of configurations plus their render function.

    Example:

        snapshots = PreviewSnapshots(
            configurations=[
                ("Short", "Hi"),
                ("Long", "Hello World"),
            ],
            configure=lambda message: Banner(message),
        )

    Configurations keep their insertion order, which drives both the preview
    ordering and the snapshot dispatch order. Names must be unique.
    """

    def __init__(
        self,
        configurations: Iterable[Union[Configuration[S], tuple[str, S]]],
        configure: Callable[[S], Any],
    ):
        self.configurations: tuple[Configuration[S], ...] = tuple(
            self._coerce(item) for item in configurations
        )
        self.configure = configure
        self._check_unique_names()

    @classmethod
    def from_states(
        cls,
        states: Iterable[S],
        configure: Callable[[S], Any],
        name: Union[str, Callable[[S], str], None] = None,
    ) -> "PreviewSnapshots[S]":
        """Create a collection from states that carry their own name.

        By default the name is read from each state's ``name`` attribute
        (see ``NamedPreviewState``). ``name`` may instead be an attribute
        name or a callable returning the name for a state.
        """
        if name is None:
            get_name = _attribute_getter("name")
        elif isinstance(name, str):
            get_name = _attribute_getter(name)
        else:
            get_name = name

        configurations = [Configuration(name=get_name(state), state=state) for state in states]
        return cls(configurations, configure)

    @property
    def names(self) -> list[str]:
        return [configuration.name for configuration in self.configurations]

    def render(self, configuration: Configuration[S]) -> Any:
        """Render a configuration's state with the stored render function."""
        return self.configure(configuration.state)

    def previews(self) -> list[Preview]:
        """Render every configuration in registry order for a preview host."""
        return [
            Preview(display_name=configuration.name, content=self.render(configuration))
            for configuration in self.configurations
        ]

    def __iter__(self) -> Iterator[Configuration[S]]:
        return iter(self.configurations)

    def __len__(self) -> int:
        return len(self.configurations)

    def __repr__(self) -> str:
        return f"PreviewSnapshots(names={self.names!r})"

    @staticmethod
    def _coerce(item: Union[Configuration[S], tuple[str, S]]) -> Configuration[S]:
        if isinstance(item, Configuration):
            return item
        name, state = item
        return Configuration(name=name, state=state)

    def _check_unique_names(self) -> None:
        seen: set[str] = set()
        duplicates: list[str] = []
        for configuration in self.configurations:
            if configuration.name in seen and configuration.name not in duplicates:
                duplicates.append(configuration.name)
            seen.add(configuration.name)

        if duplicates:
            raise DuplicateConfigurationError(duplicates)


def _attribute_getter(attribute: str) -> Callable[[Any], str]:
    def get_name(state: Any) -> str:
        try:
            return getattr(state, attribute)
        except AttributeError:
            raise TypeError(
                f"State {state!r} has no '{attribute}' attribute to use as a configuration name"
            ) from None

    return get_name
