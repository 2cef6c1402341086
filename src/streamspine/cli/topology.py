"""
CLI: ``stream-spine topology`` — inspect, visualize and submit topologies.

Every command takes a Python file exposing a ``TopologyDefinition`` (or a
subclass) under ``--var`` (default ``topology``), or a YAML topology spec.
Nothing here needs a running engine: ``submit`` defaults to the in-memory
engine and reports what a real engine would have received.
"""

from __future__ import annotations

import copy
import json
import os

import typer

from streamspine.cli.utils import (
    component_rows,
    console,
    load_engine,
    load_topology,
    print_dict,
    print_table,
    report_error,
)
from streamspine.core.errors import StreamSpineError
from streamspine.core.settings import get_settings

app = typer.Typer(no_args_is_help=True)


# ── stream-spine topology show ───────────────────────────────────────


@app.command("show")
def show_cmd(
    topology_file: str = typer.Argument(
        ...,
        help="Python file with a TopologyDefinition variable, or a YAML spec.",
    ),
    variable: str = typer.Option("topology", "--var", "-v", help="Name of the topology variable."),
    resolve: bool = typer.Option(False, "--resolve", "-r", help="Show resolved numeric ids."),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
) -> None:
    """Show a topology's components, ids and edges.

    Example:
        stream-spine topology show word_count.py
        stream-spine topology show word_count.yaml --resolve --json
    """
    definition = load_topology(topology_file, variable)

    components = definition.components
    mapping: dict[str, int] = {}
    if resolve:
        from streamspine.topology.resolver import resolve_ids

        components = copy.deepcopy(definition.components)
        try:
            mapping = resolve_ids(components)
        except StreamSpineError as e:
            report_error(e)

    if json_out:
        data = {
            "name": definition.topology_name,
            "components": [c.to_dict() | {"kind": c.kind} for c in components],
            "id_mapping": mapping,
        }
        typer.echo(json.dumps(data, indent=2, default=str))
        return

    print_table(component_rows(components), title=f"Topology: {definition.topology_name}")
    if mapping:
        print_dict(mapping, title="Resolved ids")


# ── stream-spine topology visualize ──────────────────────────────────


@app.command("visualize")
def visualize_cmd(
    topology_file: str = typer.Argument(..., help="Python file or YAML spec."),
    variable: str = typer.Option("topology", "--var", "-v"),
    fmt: str = typer.Option(
        "mermaid",
        "--format",
        "-f",
        help="Output format: mermaid, summary.",
    ),
    output_file: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write output to file instead of stdout.",
    ),
) -> None:
    """Visualize a topology's component graph.

    Example:
        stream-spine topology visualize word_count.py
        stream-spine topology visualize word_count.py -f summary -o summary.json
    """
    from streamspine.topology.visualizer import visualize_mermaid, visualize_summary

    if fmt not in {"mermaid", "summary"}:
        typer.echo(f"Unknown format: {fmt}. Use: mermaid, summary", err=True)
        raise typer.Exit(code=1)

    definition = load_topology(topology_file, variable)

    if fmt == "mermaid":
        text = visualize_mermaid(definition, title=definition.topology_name)
    else:
        text = json.dumps(visualize_summary(definition), indent=2, default=str)

    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(text)
        typer.echo(f"Written to {output_file}")
    else:
        typer.echo(text)


# ── stream-spine topology submit ─────────────────────────────────────


@app.command("submit")
def submit_cmd(
    topology_file: str = typer.Argument(..., help="Python file or YAML spec."),
    variable: str = typer.Option("topology", "--var", "-v"),
    env: str | None = typer.Option(
        None,
        "--env",
        "-e",
        help="Target environment: local or cluster (default from settings).",
    ),
    base_path: str | None = typer.Option(
        None,
        "--base-path",
        "-b",
        help="Base path handed to the engine adapter (default: the file's directory).",
    ),
    engine_ref: str | None = typer.Option(
        None,
        "--engine",
        help="Execution engine as module:attr (default: in-memory engine).",
    ),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON."),
) -> None:
    """Resolve, build, configure and submit a topology.

    Example:
        stream-spine topology submit word_count.py --env local
        stream-spine topology submit word_count.yaml --env cluster --engine myengine:Engine
    """
    from streamspine.topology.memory_engine import MemoryEngine
    from streamspine.topology.submitter import TopologySubmitter

    definition = load_topology(topology_file, variable)
    engine = load_engine(engine_ref) if engine_ref else MemoryEngine()
    env = env or get_settings().default_environment
    base_path = base_path or os.path.dirname(os.path.abspath(topology_file))

    try:
        submission = TopologySubmitter(definition, engine).start(base_path, env)
    except StreamSpineError as e:
        report_error(e)

    if json_out:
        typer.echo(json.dumps(submission.to_dict(), indent=2, default=str))
        return

    console.print(
        f"[bold green]Submitted[/bold green] {submission.topology_name} "
        f"to {submission.environment}"
    )
    print_table(component_rows(definition.components), title="Components")
    if submission.options:
        print_dict(submission.options, title="Config")
