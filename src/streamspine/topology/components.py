"""Component definitions — the declared nodes of a topology.

Manifesto:
A topology is a set of spouts (sources) and bolts (processing stages).
Each one is declared once with a class, an identifier and a parallelism
hint.  How the engine gets an instance of the class is decided at
declaration time and recorded as a tagged implementation reference, so
the build step never has to guess.

ARCHITECTURE
────────────
::

    NativeImpl(component_class)                   ── engine instantiates directly
    AdaptedImpl(component_class, qualified_name)  ── bridged through engine adapter

    ComponentDefinition(implementation, id, parallelism)
      ├── SpoutDefinition
      └── BoltDefinition + sources[(id, Grouping)]
            └── .source(ref, grouping) -> self      ── chainable

    resolve_implementation(cls, native=None)      ── decide the origin

Origin rules (first match wins):

1. explicit ``native=True/False`` on the declaration
2. truthy ``native_component`` class attribute
3. the class's top-level package is in ``settings.native_namespaces``
4. otherwise adapted

Tags:
    stream-spine, topology, components, spout, bolt

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from streamspine.core.naming import qualified_name
from streamspine.core.settings import get_settings
from streamspine.topology.grouping import Grouping
from streamspine.topology.identifiers import ComponentId, normalize_id


@dataclass(frozen=True)
class NativeImpl:
    """A component class the engine can instantiate as-is."""

    component_class: type

    @property
    def native(self) -> bool:
        return True

    def instantiate(self) -> Any:
        return self.component_class()


@dataclass(frozen=True)
class AdaptedImpl:
    """A component class bridged through the engine's adapter."""

    component_class: type
    qualified_name: str

    @property
    def native(self) -> bool:
        return False


Implementation = Union[NativeImpl, AdaptedImpl]


def resolve_implementation(component_class: type, native: bool | None = None) -> Implementation:
    """Decide once whether a class is native or adapted.

    Raises:
        TypeError: If ``component_class`` is not a class
    """
    if not isinstance(component_class, type):
        raise TypeError(
            f"Component must be a class, got {type(component_class).__name__}"
        )
    if native is None:
        package = component_class.__module__.split(".")[0]
        native = bool(getattr(component_class, "native_component", False)) or (
            package in get_settings().native_namespaces
        )
    if native:
        return NativeImpl(component_class)
    return AdaptedImpl(component_class, qualified_name(component_class))


def _check_parallelism(parallelism: int) -> int:
    if isinstance(parallelism, bool) or not isinstance(parallelism, int):
        raise TypeError(f"parallelism must be an int, got {type(parallelism).__name__}")
    if parallelism < 1:
        raise ValueError(f"parallelism must be >= 1, got {parallelism}")
    return parallelism


@dataclass
class ComponentDefinition:
    """A declared spout or bolt.

    ``id`` is mutable: the resolver replaces symbolic ids with numbers in
    place.
    """

    implementation: Implementation
    id: ComponentId
    parallelism: int = 1

    kind = "component"

    def __post_init__(self) -> None:
        self.id = normalize_id(self.id)
        self.parallelism = _check_parallelism(self.parallelism)

    @property
    def component_class(self) -> type:
        return self.implementation.component_class

    @property
    def class_name(self) -> str:
        return self.component_class.__name__

    @property
    def is_native(self) -> bool:
        return self.implementation.native

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "class": qualified_name(self.component_class),
            "native": self.is_native,
            "parallelism": self.parallelism,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, class={self.class_name}, parallelism={self.parallelism})"


@dataclass(repr=False)
class SpoutDefinition(ComponentDefinition):
    """A stream source."""

    kind = "spout"


@dataclass(repr=False)
class BoltDefinition(ComponentDefinition):
    """A processing stage subscribed to upstream components."""

    sources: list[tuple[ComponentId, Grouping]] = field(default_factory=list)

    kind = "bolt"

    def source(self, source_ref: ComponentId | type, grouping: Any) -> BoltDefinition:
        """Subscribe to ``source_ref`` with ``grouping`` and return self.

        A class reference is turned into the same snake_case name a default
        id would get, so ``source(WordSpout, "shuffle")`` matches a spout
        declared without an explicit id.
        """
        self.sources.append((normalize_id(source_ref), Grouping.parse(grouping)))
        return self

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["sources"] = [
            {"id": source_id, "grouping": grouping.to_dict()}
            for source_id, grouping in self.sources
        ]
        return data
