"""
Root Typer application for the stream-spine CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from streamspine.core.logging import configure_logging
from streamspine.core.settings import get_settings

app = Typer(
    name="stream-spine",
    help="stream-spine — declare, resolve and submit stream topologies.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("stream-spine")
        except PackageNotFoundError:
            from streamspine import __version__ as v
        typer.echo(f"stream-spine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(  # noqa: UP007
        None,
        "--log-level",
        "-l",
        help="Log level for structured logs on stderr (default: STREAMSPINE_LOG_LEVEL).",
    ),
) -> None:
    """stream-spine CLI — inspect, visualize and submit topologies."""
    if log_level is not None and log_level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise typer.BadParameter(f"Unknown log level: {log_level}", param_hint="--log-level")
    settings = get_settings()
    configure_logging(level=log_level or settings.log_level, json_format=settings.log_format == "json")


# ── Sub-command registration ─────────────────────────────────────────────

from streamspine.cli.topology import app as topology_app  # noqa: E402

app.add_typer(topology_app, name="topology", help="Topology inspection and submission.")
