"""
stream-spine - declare, resolve and submit stream-processing topologies.

- streamspine.core: errors, logging, settings and naming primitives
- streamspine.topology: declaration API, identifier resolver, submitter
- streamspine.cli: the ``stream-spine`` command line
"""

__version__ = "0.1.0"

from streamspine.topology import (  # noqa: E402
    Environment,
    Grouping,
    GroupingKind,
    MemoryEngine,
    Submission,
    TopologyDefinition,
    TopologySubmitter,
    start,
)

__all__ = [
    "__version__",
    "Environment",
    "Grouping",
    "GroupingKind",
    "MemoryEngine",
    "Submission",
    "TopologyDefinition",
    "TopologySubmitter",
    "start",
]
