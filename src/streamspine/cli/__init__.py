"""
CLI layer for stream-spine.

Provides a Typer application whose sub-commands load a topology (from a
Python file or a YAML spec) and inspect, visualize or submit it.  All
topology logic lives in ``streamspine.topology``; this package handles
only terminal transport: argument parsing, coloured output, and tables.

Entry point::

    stream-spine --help
"""

from streamspine.cli.app import app

__all__ = ["app"]
