"""Pydantic models for Topology YAML definitions.

Provides strong typing and validation for topologies declared in YAML
instead of Python.  A validated spec converts into the same
``TopologyDefinition`` that code-first authors build.

Usage::

    from streamspine.topology.topology_yaml import TopologySpec

    spec = TopologySpec.from_yaml_file("topologies/word_count.yaml")
    definition = spec.to_definition()

Example YAML::

    apiVersion: streamspine.io/v1
    kind: Topology
    metadata:
      name: word_count
      description: Count words in random sentences
    spec:
      config:
        num_workers: 4
        debug: true
      spouts:
        - class: examples.word_count:RandomSentenceSpout
          parallelism: 2
      bolts:
        - class: examples.word_count:SplitSentenceBolt
          sources:
            - id: random_sentence_spout
              grouping: shuffle
        - class: examples.word_count:WordCountBolt
          id: counter
          sources:
            - id: split_sentence_bolt
              grouping: {fields: [word]}

Manifesto:
    Operators should be able to rewire or rescale a topology without
    touching Python.  Class references are ``module:QualName`` strings
    imported at conversion time, so a YAML file is validated up front
    and fails before anything reaches the engine.

Tags:
    stream-spine, topology, yaml, declarative, config-driven

Doc-Types:
    api-reference
"""

from __future__ import annotations

import copy
import importlib
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from streamspine.core.naming import underscore
from streamspine.topology.definition import TopologyDefinition
from streamspine.topology.exceptions import UnknownGroupingError
from streamspine.topology.grouping import Grouping
from streamspine.topology.resolver import resolve_ids


def resolve_class_ref(ref: str) -> type:
    """Import and return the class identified by ``'module:QualName'``.

    Raises:
        ValueError: If the ref has no ``:`` separator.
        ImportError: If the module cannot be found.
        AttributeError: If the qualname path is invalid.
        TypeError: If the ref does not name a class.
    """
    module_path, _, attr_path = ref.partition(":")
    if not attr_path:
        raise ValueError(f"Invalid class ref (missing ':'): {ref!r}")
    obj: Any = importlib.import_module(module_path)
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    if not isinstance(obj, type):
        raise TypeError(f"{ref!r} resolved to non-class: {type(obj)}")
    return obj


def class_ref(cls: type) -> str:
    """Return the ``'module:QualName'`` ref of a class."""
    return f"{cls.__module__}:{cls.__qualname__}"


class TopologyMetadataSpec(BaseModel):
    """Metadata section of a topology spec."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Topology name submitted to the engine")
    description: str = Field(default="", description="Human-readable description")
    tags: list[str] = Field(default_factory=list, description="Optional tags for filtering")


class SourceSpec(BaseModel):
    """One upstream subscription of a bolt."""

    model_config = ConfigDict(extra="forbid")

    id: int | str = Field(..., description="Source component id")
    grouping: str | dict[str, Any] = Field(default="shuffle", description="Grouping policy")

    @field_validator("grouping")
    @classmethod
    def validate_grouping(cls, v: str | dict[str, Any]) -> str | dict[str, Any]:
        """Reject unknown groupings at load time."""
        try:
            Grouping.parse(v)
        except UnknownGroupingError as e:
            raise ValueError(e.message) from e
        return v


class ComponentSpec(BaseModel):
    """A spout or bolt declaration."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    class_ref: str = Field(..., alias="class", description="Component class (module:QualName)")
    id: int | str | None = Field(default=None, description="Explicit id (default: snake_case class name)")
    parallelism: int | None = Field(default=None, ge=1, description="Parallelism hint")
    native: bool | None = Field(default=None, description="Force native or adapted instantiation")

    @field_validator("class_ref")
    @classmethod
    def validate_ref(cls, v: str) -> str:
        if ":" not in v:
            raise ValueError(f"class must be 'module:QualName', got {v!r}")
        return v

    def effective_id(self) -> int | str:
        if self.id is not None:
            return self.id
        return underscore(self.class_ref.partition(":")[2])


class BoltSpec(ComponentSpec):
    """A bolt declaration with its sources."""

    sources: list[SourceSpec] = Field(default_factory=list, description="Upstream subscriptions")


class TopologySpecSection(BaseModel):
    """The 'spec' section containing components and engine config."""

    model_config = ConfigDict(extra="forbid")

    config: dict[str, Any] = Field(default_factory=dict, description="Engine config options")
    spouts: list[ComponentSpec] = Field(..., min_length=1, description="Stream sources")
    bolts: list[BoltSpec] = Field(default_factory=list, description="Processing stages")


class TopologySpec(BaseModel):
    """Complete YAML topology specification.

    This is the root model for parsing YAML topology definitions.
    """

    model_config = ConfigDict(extra="forbid")

    apiVersion: Literal["streamspine.io/v1"] = Field(
        default="streamspine.io/v1",
        description="API version, must be streamspine.io/v1",
    )
    kind: Literal["Topology"] = Field(default="Topology", description="Resource kind, must be Topology")
    metadata: TopologyMetadataSpec = Field(..., description="Topology metadata")
    spec: TopologySpecSection = Field(..., description="Topology specification")

    def to_definition(self) -> TopologyDefinition:
        """Import every class ref and declare the components in file order.

        The ``config`` mapping becomes the configure hook, applied through
        ``ConfigBuilder.update`` so options are validated at submission.
        Ids are checked with the same resolver ``start`` uses, on a copy,
        so the returned definition is still unresolved.

        Raises:
            DuplicateIdentifierError: Two components share an id.
            UnresolvedIdentifierError: A source names no declared component.
        """
        definition = TopologyDefinition(name=self.metadata.name)
        for spout in self.spec.spouts:
            definition.spout(
                resolve_class_ref(spout.class_ref),
                id=spout.id,
                parallelism=spout.parallelism,
                native=spout.native,
            )
        for bolt in self.spec.bolts:
            definition.bolt(
                resolve_class_ref(bolt.class_ref),
                id=bolt.id,
                parallelism=bolt.parallelism,
                native=bolt.native,
                sources=[(s.id, s.grouping) for s in bolt.sources],
            )
        if self.spec.config:
            options = dict(self.spec.config)
            definition.configure(hook=lambda config, env: config.update(**options))
        resolve_ids(copy.deepcopy(definition.components))
        return definition

    @classmethod
    def from_definition(cls, definition: TopologyDefinition) -> TopologySpec:
        """Build a spec from a declared (unresolved or resolved) definition.

        Hooks are code and are not carried over.
        """
        spouts = [
            ComponentSpec(
                class_ref=class_ref(s.component_class),
                id=s.id,
                parallelism=s.parallelism,
                native=s.is_native,
            )
            for s in definition.spouts
        ]
        bolts = [
            BoltSpec(
                class_ref=class_ref(b.component_class),
                id=b.id,
                parallelism=b.parallelism,
                native=b.is_native,
                sources=[
                    SourceSpec(id=source_id, grouping=_grouping_value(grouping))
                    for source_id, grouping in b.sources
                ],
            )
            for b in definition.bolts
        ]
        return cls(
            metadata=TopologyMetadataSpec(name=definition.topology_name),
            spec=TopologySpecSection(spouts=spouts, bolts=bolts),
        )

    def to_yaml(self) -> str:
        data = self.model_dump(by_alias=True, exclude_none=True)
        return yaml.safe_dump(data, sort_keys=False)

    @classmethod
    def from_yaml(cls, yaml_content: str) -> TopologySpec:
        """Parse and validate YAML content.

        Raises:
            ValueError: If YAML is invalid or doesn't match schema.
        """
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML: {e}") from e

        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: str | Path) -> TopologySpec:
        """Load and validate from a YAML file."""
        content = Path(path).read_text(encoding="utf-8")
        return cls.from_yaml(content)


def _grouping_value(grouping: Grouping) -> str | dict[str, Any]:
    if grouping.fields:
        return {"fields": list(grouping.fields)}
    return grouping.kind.value
