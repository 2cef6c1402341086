"""
Test support utilities for stream-spine tests.

Helpers that don't fit as pytest fixtures but are useful across multiple
test files.  Component classes live in ``tests._support.components`` so
YAML specs can reference them as ``tests._support.components:Name``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

COMPONENTS_MODULE = "tests._support.components"


def ref(name: str) -> str:
    """``module:QualName`` ref for a class in ``tests._support.components``."""
    return f"{COMPONENTS_MODULE}:{name}"


def write_temp_yaml(temp_dir: Path, name: str, content: dict[str, Any]) -> Path:
    """
    Write a dictionary to a temporary YAML file.

    Args:
        temp_dir: Temporary directory path
        name: Filename (without extension)
        content: Dictionary to serialize

    Returns:
        Path to created file
    """
    file_path = temp_dir / f"{name}.yaml"
    with open(file_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(content, f, default_flow_style=False, sort_keys=False)
    return file_path


def word_count_spec(name: str = "word_count", **config: Any) -> dict[str, Any]:
    """A three-component topology spec as a plain dict."""
    spec: dict[str, Any] = {
        "apiVersion": "streamspine.io/v1",
        "kind": "Topology",
        "metadata": {"name": name},
        "spec": {
            "spouts": [{"class": ref("RandomSentenceSpout"), "parallelism": 2}],
            "bolts": [
                {
                    "class": ref("SplitSentenceBolt"),
                    "sources": [{"id": "random_sentence_spout", "grouping": "shuffle"}],
                },
                {
                    "class": ref("WordCountBolt"),
                    "parallelism": 3,
                    "sources": [{"id": "split_sentence_bolt", "grouping": {"fields": ["word"]}}],
                },
            ],
        },
    }
    if config:
        spec["spec"]["config"] = config
    return spec
