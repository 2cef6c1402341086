"""Tests for streamspine.topology.submitter — the submission state machine."""

import pytest

from streamspine.core.errors import InvalidConfigError
from streamspine.core.settings import clear_settings_cache
from streamspine.topology import TopologyDefinition
from streamspine.topology.exceptions import (
    DuplicateIdentifierError,
    InvalidTransitionError,
    UnresolvedIdentifierError,
    UnsupportedEnvironmentError,
)
from streamspine.topology.memory_engine import AdaptedComponent, MemoryEngine
from streamspine.topology.submitter import (
    Environment,
    Submission,
    SubmissionState,
    TopologySubmitter,
    start,
)

from tests._support.components import (
    NativeKafkaSpout,
    RandomSentenceSpout,
    SplitSentenceBolt,
    WordCountBolt,
)

ALL_STATES = [
    SubmissionState.RESOLVED,
    SubmissionState.GRAPH_BUILT,
    SubmissionState.CONFIG_BUILT,
    SubmissionState.SUBMITTED,
    SubmissionState.POST_SUBMIT_RUN,
]


class TestSuccessfulSubmission:
    def test_local_submission(self, word_count_topology, memory_engine):
        submitter = TopologySubmitter(word_count_topology, memory_engine)
        submission = submitter.start("/app", "local")

        assert submission.state is SubmissionState.POST_SUBMIT_RUN
        assert submission.completed
        assert [state for state, _ in submission.history] == ALL_STATES
        assert submission.id_mapping["random_sentence_spout"] == 1

        assert len(memory_engine.clusters) == 1
        assert memory_engine.submitters == []
        submitted = memory_engine.clusters[0].submissions[0]
        assert submitted.name == "word_count"
        assert submitted.topology is submission.topology

    def test_local_cluster_is_retained(self, word_count_topology, memory_engine):
        submitter = TopologySubmitter(word_count_topology, memory_engine)
        submission = submitter.start("/app", "local")
        assert submitter.cluster is memory_engine.clusters[0]
        assert submission.cluster is submitter.cluster

    def test_cluster_submission(self, word_count_topology, memory_engine):
        submitter = TopologySubmitter(word_count_topology, memory_engine)
        submission = submitter.start("/app", Environment.CLUSTER)

        assert memory_engine.clusters == []
        assert memory_engine.submitters[0].submissions[0].name == "word_count"
        assert submitter.cluster is None
        assert submission.environment == "cluster"

    def test_graph_matches_declarations(self, word_count_topology, memory_engine):
        submission = TopologySubmitter(word_count_topology, memory_engine).start("/app", "local")
        topology = submission.topology

        assert topology.component_ids == [1, 2, 3, 4]
        assert topology.spouts[1].parallelism == 2
        assert topology.bolts[2].parallelism == 4
        assert sorted(topology.edges()) == [
            (1, 2, "shuffle", ()),
            (2, 3, "fields", ("word",)),
            (3, 4, "global", ()),
        ]

    def test_fields_order_is_preserved(self, memory_engine):
        topology = TopologyDefinition(name="fields")
        topology.spout(RandomSentenceSpout)
        topology.bolt(WordCountBolt).source(RandomSentenceSpout, {"fields": ["user_id", "session"]})
        submission = start(topology, "/app", "local", engine=memory_engine)
        assert submission.topology.edges() == [(1, 2, "fields", ("user_id", "session"))]

    def test_adapted_and_native_components(self, memory_engine):
        topology = TopologyDefinition(name="mixed")
        topology.spout(NativeKafkaSpout)
        topology.bolt(SplitSentenceBolt).source(NativeKafkaSpout, "shuffle")
        submission = start(topology, "/opt/topologies", "local", engine=memory_engine)

        assert isinstance(submission.topology.spouts[1].spout, NativeKafkaSpout)
        assert submission.topology.bolts[2].bolt == AdaptedComponent(
            "bolt", "/opt/topologies", "tests._support.components.SplitSentenceBolt"
        )
        assert memory_engine.calls.count("spout_adapter") == 0
        assert memory_engine.calls.count("bolt_adapter") == 1

    def test_default_environment_from_settings(self, word_count_topology, memory_engine, monkeypatch):
        monkeypatch.setenv("STREAMSPINE_DEFAULT_ENVIRONMENT", "cluster")
        clear_settings_cache()
        submission = TopologySubmitter(word_count_topology, memory_engine).start("/app")
        assert submission.environment == "cluster"
        assert len(memory_engine.submitters) == 1

    def test_module_start_defaults_to_memory_engine(self, word_count_topology):
        submission = start(word_count_topology, "/app", "local")
        assert submission.completed
        assert submission.cluster.submissions[0].name == "word_count"

    def test_to_dict(self, word_count_topology, memory_engine):
        data = TopologySubmitter(word_count_topology, memory_engine).start("/app", "local").to_dict()
        assert data["state"] == "post_submit_run"
        assert data["history"] == [s.value for s in ALL_STATES]
        assert data["environment"] == "local"
        assert data["error"] is None
        assert data["duration_seconds"] >= 0


class TestHooks:
    def test_configure_hook_receives_builder_and_env(self, word_count_topology, memory_engine):
        seen = {}

        def configure(config, env):
            seen["env"] = env
            config.debug = env == "local"
            config.update(num_workers=2)

        word_count_topology.configure(hook=configure)
        submission = start(word_count_topology, "/app", "local", engine=memory_engine)

        assert seen["env"] == "local"
        assert memory_engine.configs[0] == {"debug": True, "num_workers": 2}
        assert submission.options == {"debug": True, "num_workers": 2}
        assert memory_engine.clusters[0].submissions[0].config is memory_engine.configs[0]

    def test_submit_hook_runs_after_submission(self, word_count_topology, memory_engine):
        seen = []

        @word_count_topology.on_submit
        def after(submission, env):
            seen.append((submission.state, env, len(memory_engine.submissions)))

        start(word_count_topology, "/app", "local", engine=memory_engine)
        assert seen == [(SubmissionState.SUBMITTED, "local", 1)]

    def test_invalid_config_aborts_before_submit(self, word_count_topology, memory_engine):
        word_count_topology.configure(hook=lambda config, env: config.set("num_wrokers", 2))
        with pytest.raises(InvalidConfigError):
            start(word_count_topology, "/app", "local", engine=memory_engine)
        assert memory_engine.submissions == []
        assert "local_cluster" not in memory_engine.calls


class TestFailures:
    def test_unsupported_environment(self, word_count_topology, memory_engine):
        submitter = TopologySubmitter(word_count_topology, memory_engine)
        with pytest.raises(UnsupportedEnvironmentError) as exc_info:
            submitter.start("/app", "staging")

        assert "staging" in exc_info.value.message
        assert "local_cluster" not in memory_engine.calls
        assert "submitter" not in memory_engine.calls
        assert submitter.submission.state is SubmissionState.CONFIG_BUILT
        assert submitter.submission.error is not None

    def test_dangling_source_builds_no_graph(self, memory_engine):
        topology = TopologyDefinition(name="broken")
        topology.spout(RandomSentenceSpout)
        topology.bolt(SplitSentenceBolt).source("ghost", "shuffle")
        submitter = TopologySubmitter(topology, memory_engine)

        with pytest.raises(UnresolvedIdentifierError):
            submitter.start("/app", "local")
        assert memory_engine.builders == []
        assert submitter.submission.state is SubmissionState.DECLARED

    def test_duplicate_id_builds_no_graph(self, memory_engine):
        topology = TopologyDefinition(name="dup")
        topology.spout(RandomSentenceSpout)
        topology.spout(RandomSentenceSpout)
        with pytest.raises(DuplicateIdentifierError):
            start(topology, "/app", "local", engine=memory_engine)
        assert memory_engine.calls == []

    def test_engine_errors_propagate_unchanged(self, word_count_topology):
        boom = RuntimeError("engine down")
        engine = MemoryEngine(fail_on_submit=boom)
        submitter = TopologySubmitter(word_count_topology, engine)
        with pytest.raises(RuntimeError) as exc_info:
            submitter.start("/app", "cluster")
        assert exc_info.value is boom
        assert submitter.submission.state is SubmissionState.CONFIG_BUILT

    def test_submit_hook_error_propagates(self, word_count_topology, memory_engine):
        def after(submission, env):
            raise ValueError("hook failed")

        word_count_topology.on_submit(after)
        submitter = TopologySubmitter(word_count_topology, memory_engine)
        with pytest.raises(ValueError, match="hook failed"):
            submitter.start("/app", "local")
        assert submitter.submission.state is SubmissionState.SUBMITTED

    def test_start_twice_is_rejected(self, word_count_topology, memory_engine):
        submitter = TopologySubmitter(word_count_topology, memory_engine)
        submitter.start("/app", "local")
        with pytest.raises(InvalidTransitionError):
            submitter.start("/app", "local")
        assert len(memory_engine.submissions) == 1


class TestStateMachine:
    def test_advance_forward_only(self):
        submission = Submission(topology_name="t", environment="local", base_path="/")
        submission.advance(SubmissionState.RESOLVED)
        with pytest.raises(InvalidTransitionError):
            submission.advance(SubmissionState.CONFIG_BUILT)
        with pytest.raises(InvalidTransitionError):
            submission.advance(SubmissionState.DECLARED)
        assert submission.state is SubmissionState.RESOLVED

    def test_no_transition_after_last_state(self):
        submission = Submission(topology_name="t", environment="local", base_path="/")
        for state in ALL_STATES:
            submission.advance(state)
        with pytest.raises(InvalidTransitionError):
            submission.advance(SubmissionState.POST_SUBMIT_RUN)


class TestEnvironment:
    def test_parse(self):
        assert Environment.parse("local") is Environment.LOCAL
        assert Environment.parse("CLUSTER") is Environment.CLUSTER
        assert Environment.parse(Environment.LOCAL) is Environment.LOCAL

    def test_parse_unknown(self):
        with pytest.raises(UnsupportedEnvironmentError):
            Environment.parse("prod")

    def test_is_str(self):
        assert Environment.LOCAL == "local"
