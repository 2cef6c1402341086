"""Topology Visualizer — render topologies as Mermaid diagrams or summaries.

Generates visual representations of a topology's component graph for
documentation, debugging, and CLI output.  Works on resolved and
unresolved definitions alike; edges are labelled with their grouping.

Architecture::

    TopologyDefinition
    ├── .spouts
    └── .bolts[].sources
        │
        ▼
    visualize_mermaid(definition)  → str (Mermaid graph LR)
    visualize_summary(definition)  → dict (metadata)

    Mermaid component shapes:
    - spout → ([label])   (stadium)
    - bolt  → [label]     (rectangle)

Example::

    print(visualize_mermaid(WordCountTopology()))
    # graph LR
    #     random_sentence_spout(["random_sentence_spout<br/>RandomSentenceSpout x2"])
    #     split_sentence_bolt["split_sentence_bolt<br/>SplitSentenceBolt"]
    #
    #     random_sentence_spout -->|shuffle| split_sentence_bolt
"""

from __future__ import annotations

import re
from typing import Any

from streamspine.topology.components import ComponentDefinition, SpoutDefinition
from streamspine.topology.definition import TopologyDefinition

_UNSAFE = re.compile(r"[^0-9A-Za-z_]")

_STYLES = {
    "spout": "fill:#e3f2fd,stroke:#1565c0",
    "bolt": "fill:#f3e5f5,stroke:#7b1fa2",
}


# ---------------------------------------------------------------------------
# Mermaid rendering
# ---------------------------------------------------------------------------

def _node_name(component_id: Any) -> str:
    """Mermaid-safe node name for a component id."""
    name = _UNSAFE.sub("_", str(component_id))
    return f"c{name}" if name[:1].isdigit() else name


def _mermaid_node(component: ComponentDefinition) -> str:
    name = _node_name(component.id)
    label = f"{component.id}<br/>{component.class_name}"
    if component.parallelism > 1:
        label += f" x{component.parallelism}"
    if isinstance(component, SpoutDefinition):
        return f'    {name}(["{label}"])'
    return f'    {name}["{label}"]'


def visualize_mermaid(
    definition: TopologyDefinition,
    *,
    direction: str = "LR",
    include_styles: bool = True,
    title: str | None = None,
) -> str:
    """Render a topology as a Mermaid graph.

    Parameters
    ----------
    definition
        The topology to visualize.
    direction
        Graph direction: ``"LR"`` (left-right), ``"TD"`` (top-down).
    include_styles
        If True, colour spouts and bolts differently.
    title
        Optional title displayed above the graph.
    """
    lines: list[str] = []

    if title:
        lines.extend(["---", f"title: {title}", "---"])

    lines.append(f"graph {direction}")
    for component in definition.components:
        lines.append(_mermaid_node(component))

    lines.append("")

    for bolt in definition.bolts:
        for source_id, grouping in bolt.sources:
            lines.append(f"    {_node_name(source_id)} -->|{grouping}| {_node_name(bolt.id)}")

    if include_styles and definition.components:
        lines.append("")
        for component in definition.components:
            lines.append(f"    style {_node_name(component.id)} {_STYLES[component.kind]}")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Summary / metadata
# ---------------------------------------------------------------------------

def visualize_summary(definition: TopologyDefinition) -> dict[str, Any]:
    """Return metadata about the topology's structure.

    Includes component and edge counts, grouping distribution, total
    parallelism, sink bolts (no downstream) and the longest spout-to-sink
    path length.
    """
    edges = [(source_id, bolt.id) for bolt in definition.bolts for source_id, _ in bolt.sources]

    grouping_counts: dict[str, int] = {}
    for bolt in definition.bolts:
        for _, grouping in bolt.sources:
            kind = grouping.kind.value
            grouping_counts[kind] = grouping_counts.get(kind, 0) + 1

    upstream = {source_id for source_id, _ in edges}
    sinks = [bolt.id for bolt in definition.bolts if bolt.id not in upstream]

    return {
        "topology_name": definition.topology_name,
        "spout_count": len(definition.spouts),
        "bolt_count": len(definition.bolts),
        "edge_count": len(edges),
        "groupings": grouping_counts,
        "total_parallelism": sum(c.parallelism for c in definition.components),
        "native_components": [c.id for c in definition.components if c.is_native],
        "sinks": sinks,
        "max_depth": _compute_max_depth(definition),
    }


def _compute_max_depth(definition: TopologyDefinition) -> int:
    """Longest chain of components, counting spouts as depth 1.

    Cycles are cut at the first revisited component.
    """
    if not definition.components:
        return 0

    parents: dict[Any, list[Any]] = {c.id: [] for c in definition.components}
    for bolt in definition.bolts:
        parents[bolt.id] = [source_id for source_id, _ in bolt.sources]

    depths: dict[Any, int] = {}

    def depth(component_id: Any, visiting: frozenset) -> int:
        if component_id in depths:
            return depths[component_id]
        upstream = [p for p in parents.get(component_id, []) if p in parents and p not in visiting]
        result = 1 + max((depth(p, visiting | {component_id}) for p in upstream), default=0)
        depths[component_id] = result
        return result

    return max(depth(c.id, frozenset()) for c in definition.components)
