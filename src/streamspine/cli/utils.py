"""
CLI utility helpers — topology loading and output formatting.
"""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from streamspine.core.errors import StreamSpineError
from streamspine.topology.components import BoltDefinition, ComponentDefinition
from streamspine.topology.definition import TopologyDefinition

console = Console()
err_console = Console(stderr=True)

_YAML_SUFFIXES = {".yaml", ".yml"}


# ── Loading ──────────────────────────────────────────────────────────────


def load_topology(filepath: str, variable: str = "topology") -> TopologyDefinition:
    """Load a topology from a YAML spec or a Python file.

    For Python files ``variable`` names either a ``TopologyDefinition``
    instance or a ``TopologyDefinition`` subclass, which is instantiated.
    """
    path = Path(filepath)
    if not path.exists():
        fail(f"File not found: {filepath}")

    if path.suffix.lower() in _YAML_SUFFIXES:
        return _load_yaml(path)

    # Module name is the file stem: adapters import ``stem.Class`` from base_path.
    module_name = path.stem
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        fail(f"Cannot load module from: {filepath}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module

    try:
        spec.loader.exec_module(module)
    except Exception as e:
        fail(f"Error loading {filepath}: {e}", cause=e)

    obj = getattr(module, variable, None)
    if obj is None:
        fail(
            f"Variable '{variable}' not found in {filepath}. "
            f"Available: {[n for n in dir(module) if not n.startswith('_')]}"
        )
    if isinstance(obj, type) and issubclass(obj, TopologyDefinition):
        obj = obj()
    if not isinstance(obj, TopologyDefinition):
        fail(f"'{variable}' in {filepath} is a {type(obj).__name__}, not a TopologyDefinition")
    return obj


def _load_yaml(path: Path) -> TopologyDefinition:
    from streamspine.topology.topology_yaml import TopologySpec

    try:
        return TopologySpec.from_yaml_file(path).to_definition()
    except StreamSpineError as e:
        report_error(e)
    except (ValidationError, ValueError, ImportError, AttributeError, TypeError) as e:
        fail(f"Invalid topology spec {path}: {e}", cause=e)


def load_engine(ref: str) -> Any:
    """Import ``'module:attr'``; classes and factories are called with no arguments."""
    module_path, _, attr_path = ref.partition(":")
    if not attr_path:
        fail(f"Invalid engine ref (missing ':'): {ref!r}")
    try:
        obj: Any = importlib.import_module(module_path)
        for part in attr_path.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as e:
        fail(f"Cannot load engine {ref!r}: {e}", cause=e)
    if isinstance(obj, type) or (callable(obj) and not hasattr(obj, "topology_builder")):
        obj = obj()
    return obj


# ── Output helpers ───────────────────────────────────────────────────────


def fail(message: str, *, cause: BaseException | None = None) -> Any:
    """Print an error and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red]: {escape(message)}")
    if cause is not None:
        raise typer.Exit(code=1) from cause
    raise typer.Exit(code=1)


def report_error(error: StreamSpineError) -> None:
    """Print a typed error with its category and exit with status 1."""
    err_console.print(
        f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}"
    )
    raise typer.Exit(code=1) from error


def component_rows(components: list[ComponentDefinition]) -> list[dict[str, Any]]:
    rows = []
    for component in components:
        sources = ""
        if isinstance(component, BoltDefinition):
            sources = ", ".join(f"{source_id} ({grouping})" for source_id, grouping in component.sources)
        rows.append(
            {
                "id": str(component.id),
                "kind": component.kind,
                "class": component.class_name,
                "native": "yes" if component.is_native else "no",
                "parallelism": str(component.parallelism),
                "sources": sources,
            }
        )
    return rows


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
