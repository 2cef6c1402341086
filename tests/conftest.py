"""
Shared pytest fixtures and configuration for stream-spine tests.

This module provides:
- Settings cache cleanup for test isolation
- Sample topology definitions
- A recording in-memory engine

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments
    (pytest injects them automatically).

    def test_something(word_count_topology, memory_engine):
        ...
"""

import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure streamspine and tests._support are importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from streamspine.core.settings import clear_settings_cache
from streamspine.topology import MemoryEngine, TopologyDefinition

from tests._support.components import (
    RandomSentenceSpout,
    ReportBolt,
    SplitSentenceBolt,
    WordCountBolt,
)


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.path).relative_to(Path(__file__).parent)

        if "integration" in str(test_path) or str(test_path).startswith("cli"):
            item.add_marker(pytest.mark.integration)

        # Mark all tests without explicit markers as unit tests
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Clear cached settings before and after each test.

    ``STREAMSPINE_*`` variables from the developer's shell would otherwise
    leak into declaration defaults.
    """
    for name in (
        "STREAMSPINE_DEFAULT_SPOUT_PARALLELISM",
        "STREAMSPINE_DEFAULT_BOLT_PARALLELISM",
        "STREAMSPINE_NATIVE_NAMESPACES",
        "STREAMSPINE_DEFAULT_ENVIRONMENT",
        "STREAMSPINE_LOG_LEVEL",
        "STREAMSPINE_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Sample Topology Fixtures
# =============================================================================


@pytest.fixture
def memory_engine() -> MemoryEngine:
    return MemoryEngine()


@pytest.fixture
def word_count_topology() -> TopologyDefinition:
    """
    Classic word count, all ids symbolic:

        random_sentence_spout -shuffle-> split_sentence_bolt
            -fields(word)-> word_count_bolt -global-> report_bolt
    """
    topology = TopologyDefinition(name="word_count")
    topology.spout(RandomSentenceSpout, parallelism=2)
    topology.bolt(SplitSentenceBolt, parallelism=4).source(RandomSentenceSpout, "shuffle")
    topology.bolt(WordCountBolt, parallelism=3).source(SplitSentenceBolt, {"fields": ["word"]})
    topology.bolt(ReportBolt).source(WordCountBolt, "global")
    return topology


@pytest.fixture
def mixed_id_topology() -> TopologyDefinition:
    """
    Explicit numeric ids 1 and 3 mixed with symbolic ids.

    Symbolic components resolve to 2 and 4.
    """
    topology = TopologyDefinition(name="mixed")
    topology.spout(RandomSentenceSpout, id=1)
    topology.spout(RandomSentenceSpout, id="second_spout")
    topology.bolt(SplitSentenceBolt, id=3).source(1, "shuffle").source("second_spout", "shuffle")
    topology.bolt(WordCountBolt).source(3, {"fields": ["word"]})
    return topology
