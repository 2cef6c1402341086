"""In-memory execution engine — records every call, runs nothing.

Manifesto:
Declaring and submitting a topology should be testable without a JVM, a
cluster or a network.  ``MemoryEngine`` implements every engine protocol
by recording what it was asked to do, so tests (and ``--dry-run``-style
CLI commands) can assert on the exact graph, configuration and submission
that a real engine would have received.

ARCHITECTURE
────────────
::

    MemoryEngine
      ├── builders[]    → MemoryTopologyBuilder
      │     ├── spouts{id: SpoutRecord}
      │     ├── bolts{id: BoltRecord}  ← MemoryEdgeDeclarer appends edges
      │     └── create_topology() → MemoryTopology (frozen snapshot)
      ├── configs[]     → MemoryConfig   (dict; setXxx(v) stores xxx=v)
      ├── clusters[]    → MemoryCluster
      ├── submitters[]  → MemorySubmitter
      └── calls[]       → ordered log of every engine-level call

    Failure injection:
      MemoryEngine(fail_on_submit=RuntimeError("boom"))

Example::

    engine = MemoryEngine()
    submission = TopologySubmitter(definition, engine).start("/app", "local")
    assert engine.clusters[0].submissions[0].name == "word_count"

Tags:
    stream-spine, topology, engine, testing, in-memory

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from streamspine.core.naming import underscore


@dataclass(frozen=True)
class AdaptedComponent:
    """Stand-in for an adapter-wrapped component."""

    kind: str
    base_path: str
    qualified_name: str


@dataclass
class SpoutRecord:
    id: int
    spout: Any
    parallelism: int


@dataclass
class BoltRecord:
    id: int
    bolt: Any
    parallelism: int
    edges: list[tuple[str, int, tuple[str, ...]]] = field(default_factory=list)


class MemoryEdgeDeclarer:
    """Appends ``(grouping, source_id, fields)`` to a bolt record."""

    def __init__(self, record: BoltRecord) -> None:
        self._record = record

    def _add(self, grouping: str, source_id: int, fields: tuple[str, ...] = ()) -> MemoryEdgeDeclarer:
        self._record.edges.append((grouping, source_id, fields))
        return self

    def fields_grouping(self, source_id: int, fields: list[str]) -> MemoryEdgeDeclarer:
        return self._add("fields", source_id, tuple(fields))

    def global_grouping(self, source_id: int) -> MemoryEdgeDeclarer:
        return self._add("global", source_id)

    def shuffle_grouping(self, source_id: int) -> MemoryEdgeDeclarer:
        return self._add("shuffle", source_id)

    def none_grouping(self, source_id: int) -> MemoryEdgeDeclarer:
        return self._add("none", source_id)

    def all_grouping(self, source_id: int) -> MemoryEdgeDeclarer:
        return self._add("all", source_id)

    def direct_grouping(self, source_id: int) -> MemoryEdgeDeclarer:
        return self._add("direct", source_id)


@dataclass(frozen=True)
class MemoryTopology:
    """Snapshot produced by ``create_topology``."""

    spouts: dict[int, SpoutRecord]
    bolts: dict[int, BoltRecord]

    @property
    def component_ids(self) -> list[int]:
        return sorted([*self.spouts, *self.bolts])

    def edges(self) -> list[tuple[int, int, str, tuple[str, ...]]]:
        """All edges as ``(source_id, bolt_id, grouping, fields)``."""
        return [
            (source_id, bolt_id, grouping, fields)
            for bolt_id, record in self.bolts.items()
            for grouping, source_id, fields in record.edges
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "spouts": {i: r.parallelism for i, r in self.spouts.items()},
            "bolts": {
                i: {
                    "parallelism": r.parallelism,
                    "edges": [
                        {"source": s, "grouping": g, "fields": list(f)} for g, s, f in r.edges
                    ],
                }
                for i, r in self.bolts.items()
            },
        }


class MemoryTopologyBuilder:
    def __init__(self) -> None:
        self.spouts: dict[int, SpoutRecord] = {}
        self.bolts: dict[int, BoltRecord] = {}
        self.created: MemoryTopology | None = None

    def set_spout(self, component_id: int, spout: Any, parallelism: int) -> SpoutRecord:
        record = SpoutRecord(component_id, spout, parallelism)
        self.spouts[component_id] = record
        return record

    def set_bolt(self, component_id: int, bolt: Any, parallelism: int) -> MemoryEdgeDeclarer:
        record = BoltRecord(component_id, bolt, parallelism)
        self.bolts[component_id] = record
        return MemoryEdgeDeclarer(record)

    def create_topology(self) -> MemoryTopology:
        self.created = MemoryTopology(dict(self.spouts), dict(self.bolts))
        return self.created


class MemoryConfig(dict):
    """Engine config double.

    Any ``setXxx(value)`` call stores ``value`` under ``underscore("Xxx")``::

        config.setNumWorkers(4)
        config["num_workers"]  # 4
    """

    def __getattr__(self, name: str) -> Any:
        if name.startswith("set") and len(name) > 3 and name[3].isupper():
            key = underscore(name[3:])

            def setter(value: Any) -> None:
                self[key] = value

            return setter
        raise AttributeError(name)


@dataclass
class SubmittedTopology:
    name: str
    config: Any
    topology: Any


@dataclass
class MemoryCluster:
    """Local in-process cluster double."""

    submissions: list[SubmittedTopology] = field(default_factory=list)
    fail_with: BaseException | None = None

    def submit_topology(self, name: str, config: Any, topology: Any) -> SubmittedTopology:
        if self.fail_with is not None:
            raise self.fail_with
        submitted = SubmittedTopology(name, config, topology)
        self.submissions.append(submitted)
        return submitted


@dataclass
class MemorySubmitter(MemoryCluster):
    """Remote cluster submission client double."""


class MemoryEngine:
    """Execution engine that records instead of executing."""

    def __init__(self, *, fail_on_submit: BaseException | None = None) -> None:
        self.fail_on_submit = fail_on_submit
        self.builders: list[MemoryTopologyBuilder] = []
        self.configs: list[MemoryConfig] = []
        self.clusters: list[MemoryCluster] = []
        self.submitters: list[MemorySubmitter] = []
        self.calls: list[str] = []

    def topology_builder(self) -> MemoryTopologyBuilder:
        self.calls.append("topology_builder")
        builder = MemoryTopologyBuilder()
        self.builders.append(builder)
        return builder

    def config(self) -> MemoryConfig:
        self.calls.append("config")
        config = MemoryConfig()
        self.configs.append(config)
        return config

    def local_cluster(self) -> MemoryCluster:
        self.calls.append("local_cluster")
        cluster = MemoryCluster(fail_with=self.fail_on_submit)
        self.clusters.append(cluster)
        return cluster

    def submitter(self) -> MemorySubmitter:
        self.calls.append("submitter")
        submitter = MemorySubmitter(fail_with=self.fail_on_submit)
        self.submitters.append(submitter)
        return submitter

    def spout_adapter(self, base_path: str, qualified_name: str) -> AdaptedComponent:
        self.calls.append("spout_adapter")
        return AdaptedComponent("spout", base_path, qualified_name)

    def bolt_adapter(self, base_path: str, qualified_name: str) -> AdaptedComponent:
        self.calls.append("bolt_adapter")
        return AdaptedComponent("bolt", base_path, qualified_name)

    @property
    def submissions(self) -> list[SubmittedTopology]:
        """Every topology submitted through any client, in order."""
        return [s for client in [*self.clusters, *self.submitters] for s in client.submissions]
