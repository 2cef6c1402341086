"""Topology Definition — the declaration API and component registry.

Manifesto:
A topology is declared once, in one place: which spouts feed which
bolts, with what grouping, how the engine should be configured, and
what to do after submission.  ``TopologyDefinition`` collects those
declarations in order on an *instance* so that two topologies in the
same process never share state.

ARCHITECTURE
────────────
::

    TopologyDefinition(name=None)
      ├── .spout(cls, id=, parallelism=, native=)   -> SpoutDefinition
      ├── .bolt(cls, id=, parallelism=, native=, sources=)
      │                                           -> BoltDefinition
      ├── .configure(name=, hook=)                  ── hook(config_builder, env)
      ├── .on_submit(hook | "method_name")          ── hook(submission, env)
      ├── .define()                                 ── override in subclasses
      └── .components / .spouts / .bolts / .topology_name / .to_dict()

Two declaration styles are supported::

    # 1. Instance style
    topology = TopologyDefinition(name="word_count")
    topology.spout(RandomSentenceSpout, parallelism=2)
    topology.bolt(SplitSentenceBolt, sources=lambda b: b.source(RandomSentenceSpout, "shuffle"))

    # 2. Subclass style, name derived from the class (word_count_topology)
    class WordCountTopology(TopologyDefinition):
        def define(self):
            self.spout(RandomSentenceSpout)
            self.bolt(SplitSentenceBolt).source(RandomSentenceSpout, "shuffle")
            self.bolt(WordCountBolt, parallelism=2).source(
                SplitSentenceBolt, {"fields": ["word"]}
            )
            self.on_submit("announce")

        def announce(self, submission, env):
            print(f"submitted {submission.topology_name} to {env}")

Tags:
    stream-spine, topology, registry, declaration, dsl

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from streamspine.core.logging import get_logger
from streamspine.core.naming import underscore
from streamspine.core.settings import get_settings
from streamspine.topology.components import (
    BoltDefinition,
    ComponentDefinition,
    SpoutDefinition,
    resolve_implementation,
)
from streamspine.topology.identifiers import ComponentId, normalize_id

if TYPE_CHECKING:
    from streamspine.topology.config_builder import ConfigBuilder
    from streamspine.topology.submitter import Submission

logger = get_logger(__name__)

ConfigureHook = Callable[["ConfigBuilder", str], Any]
SubmitHook = Callable[["Submission", str], Any]
SourcesCallback = Callable[[BoltDefinition], Any]


def _noop_hook(_target: Any, _env: str) -> None:
    return None


class TopologyDefinition:
    """Ordered registry of a topology's components and hooks."""

    def __init__(self, name: str | None = None) -> None:
        self._components: list[ComponentDefinition] = []
        self._name = name
        self.configure_hook: ConfigureHook = _noop_hook
        self.submit_hook: SubmitHook = _noop_hook
        self.define()

    def define(self) -> None:
        """Declare components here when subclassing; the default declares nothing."""

    # =========================================================================
    # Declaration
    # =========================================================================

    def spout(
        self,
        component_class: type,
        *,
        id: ComponentId | None = None,
        parallelism: int | None = None,
        native: bool | None = None,
    ) -> SpoutDefinition:
        """Declare a spout; the id defaults to the snake_case class name."""
        spout = SpoutDefinition(
            implementation=resolve_implementation(component_class, native),
            id=underscore(component_class) if id is None else normalize_id(id),
            parallelism=(
                get_settings().default_spout_parallelism if parallelism is None else parallelism
            ),
        )
        self._register(spout)
        return spout

    def bolt(
        self,
        component_class: type,
        *,
        id: ComponentId | None = None,
        parallelism: int | None = None,
        native: bool | None = None,
        sources: SourcesCallback | Iterable[tuple[Any, Any]] | None = None,
    ) -> BoltDefinition:
        """Declare a bolt.

        ``sources`` is either a callback receiving the new ``BoltDefinition``
        (which calls ``.source(ref, grouping)`` on it) or an iterable of
        ``(ref, grouping)`` pairs.  Sources can also be chained on the
        returned definition.
        """
        bolt = BoltDefinition(
            implementation=resolve_implementation(component_class, native),
            id=underscore(component_class) if id is None else normalize_id(id),
            parallelism=(
                get_settings().default_bolt_parallelism if parallelism is None else parallelism
            ),
        )
        if callable(sources):
            sources(bolt)
        elif sources is not None:
            for source_ref, grouping in sources:
                bolt.source(source_ref, grouping)
        self._register(bolt)
        return bolt

    def configure(
        self,
        name: str | None = None,
        hook: ConfigureHook | None = None,
    ) -> TopologyDefinition:
        """Set the topology name and/or the configure hook; omitted values are kept."""
        if name is not None:
            self._name = name
        if hook is not None:
            if not callable(hook):
                raise TypeError(f"configure hook must be callable, got {type(hook).__name__}")
            self.configure_hook = hook
        return self

    def on_submit(self, hook: SubmitHook | str) -> SubmitHook | str:
        """Set the post-submit hook.

        Accepts a callable ``hook(submission, env)`` or the name of a method
        on this definition with the same signature.  Returns its argument, so
        it also works as a decorator.
        """
        if isinstance(hook, str):
            method = getattr(self, hook, None)
            if not callable(method):
                raise AttributeError(
                    f"{type(self).__name__} has no method '{hook}' to run on submit"
                )
            self.submit_hook = method
        elif callable(hook):
            self.submit_hook = hook
        else:
            raise TypeError(f"submit hook must be callable or a method name, got {type(hook).__name__}")
        return hook

    def _register(self, component: ComponentDefinition) -> None:
        self._components.append(component)
        logger.debug(
            "component_registered",
            topology=self.topology_name,
            kind=component.kind,
            component_id=component.id,
            component=component.class_name,
            native=component.is_native,
            parallelism=component.parallelism,
        )

    # =========================================================================
    # Inspection
    # =========================================================================

    @property
    def components(self) -> list[ComponentDefinition]:
        """All components in declaration order."""
        return self._components

    @property
    def spouts(self) -> list[SpoutDefinition]:
        return [c for c in self._components if isinstance(c, SpoutDefinition)]

    @property
    def bolts(self) -> list[BoltDefinition]:
        return [c for c in self._components if isinstance(c, BoltDefinition)]

    @property
    def topology_name(self) -> str:
        if self._name is None:
            return underscore(type(self))
        return self._name

    def get_component(self, component_id: ComponentId | type) -> ComponentDefinition | None:
        """Get a component by id (or by class, via its derived id)."""
        component_id = normalize_id(component_id)
        for component in self._components:
            if component.id == component_id:
                return component
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.topology_name,
            "spouts": [s.to_dict() for s in self.spouts],
            "bolts": [b.to_dict() for b in self.bolts],
        }

    def __len__(self) -> int:
        return len(self._components)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.topology_name!r}, "
            f"spouts={len(self.spouts)}, bolts={len(self.bolts)})"
        )
