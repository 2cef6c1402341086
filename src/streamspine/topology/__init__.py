"""
Topology declaration, resolution and submission.

Exports:
- TopologyDefinition: ordered registry of spouts, bolts and hooks
- SpoutDefinition / BoltDefinition: declared components
- Grouping / GroupingKind: per-edge routing policies
- resolve_ids: symbolic ids -> smallest free integers
- ConfigBuilder / CONFIG_SCHEMA: validated engine options
- TopologySubmitter / start: the submission state machine
- MemoryEngine: recording engine for tests and dry runs
- TopologySpec: YAML topology definitions

Example::

    from streamspine.topology import TopologyDefinition, start

    topology = TopologyDefinition(name="word_count")
    topology.spout(RandomSentenceSpout, parallelism=2)
    topology.bolt(SplitSentenceBolt).source(RandomSentenceSpout, "shuffle")
    topology.bolt(WordCountBolt).source(SplitSentenceBolt, {"fields": ["word"]})

    submission = start(topology, "/app", "local")
"""

from streamspine.topology.components import (
    AdaptedImpl,
    BoltDefinition,
    ComponentDefinition,
    NativeImpl,
    SpoutDefinition,
    resolve_implementation,
)
from streamspine.topology.config_builder import (
    CONFIG_SCHEMA,
    ConfigBuilder,
    ConfigOption,
    register_option,
)
from streamspine.topology.definition import TopologyDefinition
from streamspine.topology.engine import (
    EdgeDeclarer,
    ExecutionEngine,
    LocalCluster,
    RemoteSubmitter,
    TopologyBuilder,
)
from streamspine.topology.exceptions import (
    DuplicateIdentifierError,
    InvalidTransitionError,
    UnknownGroupingError,
    UnresolvedIdentifierError,
    UnsupportedEnvironmentError,
)
from streamspine.topology.grouping import Grouping, GroupingKind, apply_groupings
from streamspine.topology.identifiers import ComponentId, is_numeric, normalize_id
from streamspine.topology.memory_engine import MemoryEngine
from streamspine.topology.resolver import resolve_ids
from streamspine.topology.submitter import (
    Environment,
    Submission,
    SubmissionState,
    TopologySubmitter,
    start,
)
from streamspine.topology.topology_yaml import TopologySpec
from streamspine.topology.visualizer import visualize_mermaid, visualize_summary

__all__ = [
    # Components
    "AdaptedImpl",
    "BoltDefinition",
    "ComponentDefinition",
    "NativeImpl",
    "SpoutDefinition",
    "resolve_implementation",
    # Identifiers
    "ComponentId",
    "is_numeric",
    "normalize_id",
    "resolve_ids",
    # Grouping
    "Grouping",
    "GroupingKind",
    "apply_groupings",
    # Declaration
    "TopologyDefinition",
    "TopologySpec",
    # Config
    "CONFIG_SCHEMA",
    "ConfigBuilder",
    "ConfigOption",
    "register_option",
    # Engine
    "EdgeDeclarer",
    "ExecutionEngine",
    "LocalCluster",
    "RemoteSubmitter",
    "TopologyBuilder",
    "MemoryEngine",
    # Submission
    "Environment",
    "Submission",
    "SubmissionState",
    "TopologySubmitter",
    "start",
    # Errors
    "DuplicateIdentifierError",
    "InvalidTransitionError",
    "UnknownGroupingError",
    "UnresolvedIdentifierError",
    "UnsupportedEnvironmentError",
    # Visualization
    "visualize_mermaid",
    "visualize_summary",
]
