"""Tests for streamspine.cli.topology — show, visualize and submit commands."""

from __future__ import annotations

import importlib
import json
import textwrap
from pathlib import Path

from typer.testing import CliRunner

from streamspine.cli.app import app

from tests._support import word_count_spec, write_temp_yaml

runner = CliRunner()

WORD_COUNT_PY = """
    from streamspine.topology import TopologyDefinition
    from tests._support.components import (
        RandomSentenceSpout,
        SplitSentenceBolt,
        WordCountBolt,
    )

    topology = TopologyDefinition(name="word_count")
    topology.spout(RandomSentenceSpout, parallelism=2)
    topology.bolt(SplitSentenceBolt).source(RandomSentenceSpout, "shuffle")
    topology.bolt(WordCountBolt).source(SplitSentenceBolt, {"fields": ["word"]})
    topology.configure(hook=lambda config, env: config.update(num_workers=3))


    class WordCountTopology(TopologyDefinition):
        def define(self):
            self.spout(RandomSentenceSpout)
            self.bolt(SplitSentenceBolt, id=7).source(RandomSentenceSpout, "all")


    not_a_topology = 42
"""


def _write_topology_file(tmp_dir: Path, content: str = WORD_COUNT_PY, filename: str = "topo.py") -> Path:
    """Write a Python file with topology content and return path."""
    filepath = tmp_dir / filename
    filepath.write_text(textwrap.dedent(content))
    return filepath


def _flat(output: str) -> str:
    """Collapse Rich line wrapping so messages can be matched as one line."""
    return " ".join(output.split())


# ── show command ─────────────────────────────────────────────────────


class TestShowCommand:
    def test_show_table(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "show", str(f)])
        assert result.exit_code == 0, result.output
        assert "Topology: word_count" in result.output

    def test_show_json(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "show", str(f), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "word_count"
        assert [c["id"] for c in data["components"]] == [
            "random_sentence_spout",
            "split_sentence_bolt",
            "word_count_bolt",
        ]
        assert data["id_mapping"] == {}

    def test_show_resolved_does_not_mutate(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "show", str(f), "--resolve", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["id_mapping"] == {
            "random_sentence_spout": 1,
            "split_sentence_bolt": 2,
            "word_count_bolt": 3,
        }
        assert data["components"][2]["sources"] == [{"id": 2, "grouping": {"fields": ["word"]}}]

    def test_show_subclass_variable(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "show", str(f), "--var", "WordCountTopology", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "word_count_topology"
        assert data["components"][1]["id"] == 7

    def test_show_yaml(self, tmp_path):
        f = write_temp_yaml(tmp_path, "wc", word_count_spec())
        result = runner.invoke(app, ["topology", "show", str(f), "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["components"][0]["parallelism"] == 2

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["topology", "show", str(tmp_path / "nope.py")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_missing_variable(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "show", str(f), "--var", "missing"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_wrong_variable_type(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "show", str(f), "--var", "not_a_topology"])
        assert result.exit_code == 1
        assert "not a TopologyDefinition" in _flat(result.output)

    def test_invalid_yaml_spec(self, tmp_path):
        data = word_count_spec()
        data["kind"] = "Workflow"
        f = write_temp_yaml(tmp_path, "bad", data)
        result = runner.invoke(app, ["topology", "show", str(f)])
        assert result.exit_code == 1
        assert "Invalid topology spec" in _flat(result.output)

    def test_yaml_duplicate_ids(self, tmp_path):
        data = word_count_spec()
        data["spec"]["bolts"][1]["id"] = "split_sentence_bolt"
        f = write_temp_yaml(tmp_path, "dup", data)
        result = runner.invoke(app, ["topology", "show", str(f)])
        assert result.exit_code == 1
        assert "(TOPOLOGY)" in _flat(result.output)
        assert "duplicate id" in _flat(result.output)

    def test_resolve_error(self, tmp_path):
        f = _write_topology_file(
            tmp_path,
            """
            from streamspine.topology import TopologyDefinition
            from tests._support.components import RandomSentenceSpout, SplitSentenceBolt

            topology = TopologyDefinition(name="broken")
            topology.spout(RandomSentenceSpout)
            topology.bolt(SplitSentenceBolt).source("ghost", "shuffle")
            """,
        )
        result = runner.invoke(app, ["topology", "show", str(f), "--resolve"])
        assert result.exit_code == 1
        assert "TOPOLOGY" in result.output


# ── visualize command ────────────────────────────────────────────────


class TestVisualizeCommand:
    def test_mermaid(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "visualize", str(f)])
        assert result.exit_code == 0, result.output
        assert "graph LR" in result.output
        assert "random_sentence_spout -->|shuffle| split_sentence_bolt" in result.output

    def test_summary(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "visualize", str(f), "-f", "summary"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["edge_count"] == 2

    def test_output_file(self, tmp_path):
        f = _write_topology_file(tmp_path)
        out = tmp_path / "graph.mmd"
        result = runner.invoke(app, ["topology", "visualize", str(f), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8").splitlines()[3] == "graph LR"

    def test_unknown_format(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "visualize", str(f), "-f", "ascii"])
        assert result.exit_code == 1


# ── submit command ───────────────────────────────────────────────────


class TestSubmitCommand:
    def test_submit_local_json(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "submit", str(f), "--env", "local", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["state"] == "post_submit_run"
        assert data["environment"] == "local"
        assert data["options"] == {"num_workers": 3}
        assert data["base_path"] == str(tmp_path)

    def test_submit_table(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "submit", str(f), "-e", "cluster", "-b", "/srv/app"])
        assert result.exit_code == 0, result.output
        assert "Submitted" in result.output

    def test_submit_yaml(self, tmp_path):
        f = write_temp_yaml(tmp_path, "wc", word_count_spec(debug=True))
        result = runner.invoke(app, ["topology", "submit", str(f), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["options"] == {"debug": True}
        assert data["id_mapping"]["word_count_bolt"] == 3

    def test_submit_explicit_engine(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(
            app,
            [
                "topology", "submit", str(f), "--json",
                "--engine", "streamspine.topology.memory_engine:MemoryEngine",
            ],
        )
        assert result.exit_code == 0, result.output

    def test_bad_engine_ref(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "submit", str(f), "--engine", "no_such_module:Engine"])
        assert result.exit_code == 1
        assert "Cannot load engine" in _flat(result.output)

    def test_unsupported_environment(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "submit", str(f), "--env", "staging"])
        assert result.exit_code == 1
        assert "SUBMISSION" in result.output


class TestRootApp:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "stream-spine" in result.output

    def test_bad_log_level(self, tmp_path):
        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["--log-level", "LOUD", "topology", "show", str(f)])
        assert result.exit_code != 0

    def test_log_level_defaults_to_settings(self, tmp_path, monkeypatch):
        cli_app = importlib.import_module("streamspine.cli.app")
        from streamspine.core.settings import clear_settings_cache

        calls = []
        monkeypatch.setattr(cli_app, "configure_logging", lambda **kw: calls.append(kw))
        monkeypatch.setenv("STREAMSPINE_LOG_LEVEL", "error")
        clear_settings_cache()

        f = _write_topology_file(tmp_path)
        result = runner.invoke(app, ["topology", "show", str(f), "--json"])
        assert result.exit_code == 0, result.output
        assert calls[-1]["level"] == "ERROR"

        result = runner.invoke(app, ["-l", "debug", "topology", "show", str(f), "--json"])
        assert result.exit_code == 0, result.output
        assert calls[-1]["level"] == "debug"


# ── module loading ───────────────────────────────────────────────────


class TestLoadTopology:
    def test_components_qualified_by_file_stem(self, tmp_path):
        from streamspine.cli.utils import load_topology
        from streamspine.topology import MemoryEngine, start

        f = _write_topology_file(
            tmp_path,
            """
            from streamspine.topology import TopologyDefinition

            class MySpout:
                pass

            class MyBolt:
                pass

            topology = TopologyDefinition(name="wc")
            topology.spout(MySpout)
            topology.bolt(MyBolt).source(MySpout, "shuffle")
            """,
            filename="wc.py",
        )
        definition = load_topology(str(f))
        assert definition.spouts[0].implementation.qualified_name == "wc.MySpout"

        engine = MemoryEngine()
        start(definition, str(tmp_path), "local", engine=engine)
        builder = engine.builders[0]
        assert builder.spouts[1].spout.qualified_name == "wc.MySpout"
        assert builder.spouts[1].spout.base_path == str(tmp_path)
        assert builder.bolts[2].bolt.qualified_name == "wc.MyBolt"
