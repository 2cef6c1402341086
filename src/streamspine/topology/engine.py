"""Execution engine protocols.

stream-spine only declares, resolves and hands over a topology.  Building
the runnable graph, holding engine configuration and running it locally or
on a cluster are the engine's job.  These protocols describe the narrow
surface the submitter uses; ``memory_engine.MemoryEngine`` implements all of
them in memory.

ARCHITECTURE
────────────
::

    ExecutionEngine
      ├── topology_builder()  -> TopologyBuilder
      │     ├── set_spout(id, spout, parallelism)
      │     ├── set_bolt(id, bolt, parallelism) -> EdgeDeclarer
      │     └── create_topology()
      ├── config()            -> EngineConfig        (setXxx(value) mutators)
      ├── local_cluster()     -> LocalCluster        (in-process)
      ├── submitter()         -> RemoteSubmitter     (cluster)
      ├── spout_adapter(base_path, qualified_name)
      └── bolt_adapter(base_path, qualified_name)

Tags:
    stream-spine, topology, engine, protocol

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class EdgeDeclarer(Protocol):
    """Returned by ``set_bolt``; receives one call per bolt source."""

    def fields_grouping(self, source_id: int, fields: list[str]) -> Any: ...

    def global_grouping(self, source_id: int) -> Any: ...

    def shuffle_grouping(self, source_id: int) -> Any: ...

    def none_grouping(self, source_id: int) -> Any: ...

    def all_grouping(self, source_id: int) -> Any: ...

    def direct_grouping(self, source_id: int) -> Any: ...


@runtime_checkable
class TopologyBuilder(Protocol):
    def set_spout(self, component_id: int, spout: Any, parallelism: int) -> Any: ...

    def set_bolt(self, component_id: int, bolt: Any, parallelism: int) -> EdgeDeclarer: ...

    def create_topology(self) -> Any: ...


class EngineConfig(Protocol):
    """Engine configuration object.

    Options are written through setter methods named ``set`` + CamelCase of
    the option name (``setNumWorkers``), which a Protocol cannot enumerate;
    ``ConfigBuilder`` looks them up with ``getattr``.
    """

    def __getattr__(self, name: str) -> Any: ...


@runtime_checkable
class LocalCluster(Protocol):
    def submit_topology(self, name: str, config: Any, topology: Any) -> Any: ...


@runtime_checkable
class RemoteSubmitter(Protocol):
    def submit_topology(self, name: str, config: Any, topology: Any) -> Any: ...


@runtime_checkable
class ExecutionEngine(Protocol):
    def topology_builder(self) -> TopologyBuilder: ...

    def config(self) -> Any: ...

    def local_cluster(self) -> LocalCluster: ...

    def submitter(self) -> RemoteSubmitter: ...

    def spout_adapter(self, base_path: str, qualified_name: str) -> Any: ...

    def bolt_adapter(self, base_path: str, qualified_name: str) -> Any: ...
