"""Submission Orchestrator — resolve, build, configure, submit.

Manifesto:
Submitting a topology is a fixed sequence: resolve identifiers, build
the engine graph, build the engine config, hand both to a local or
remote client, then run the post-submit hook.  Each stage is a state
in a forward-only machine so a failure always tells you exactly how
far the submission got, and a graph is never built from ids that did
not resolve.

ARCHITECTURE
────────────
::

    TopologySubmitter(definition, engine)
      └── .start(base_path, env) -> Submission

    DECLARED ─► RESOLVED ─► GRAPH_BUILT ─► CONFIG_BUILT ─► SUBMITTED ─► POST_SUBMIT_RUN
       │            │              │               │             │
     resolve_ids  set_spout /    ConfigBuilder   local_cluster  submit_hook
                  set_bolt /     + configure_    or submitter   (submission, env)
                  apply_groupings  hook          .submit_topology
                  create_topology

    start(definition, base_path, env, engine=None)  ── MemoryEngine by default

Any error aborts the sequence and propagates unchanged; the Submission
keeps the last state reached.

Example::

    from streamspine.topology import TopologySubmitter, MemoryEngine

    engine = MemoryEngine()
    submission = TopologySubmitter(WordCountTopology(), engine).start("/app", "local")
    submission.state            # SubmissionState.POST_SUBMIT_RUN
    submission.id_mapping       # {"random_sentence_spout": 1, ...}

Tags:
    stream-spine, topology, submission, state-machine, orchestration

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from streamspine.core.logging import LogContext, get_logger
from streamspine.core.settings import StreamSpineSettings, get_settings
from streamspine.topology.components import NativeImpl
from streamspine.topology.config_builder import ConfigBuilder
from streamspine.topology.definition import TopologyDefinition
from streamspine.topology.engine import ExecutionEngine
from streamspine.topology.exceptions import InvalidTransitionError, UnsupportedEnvironmentError
from streamspine.topology.grouping import apply_groupings
from streamspine.topology.resolver import resolve_ids

logger = get_logger(__name__)


class Environment(str, Enum):
    """Where a topology is submitted."""

    LOCAL = "local"  # In-process cluster, retained on the submitter
    CLUSTER = "cluster"  # Remote submission client

    @classmethod
    def parse(cls, value: Environment | str) -> Environment:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedEnvironmentError(value) from None


class SubmissionState(str, Enum):
    """Stages of a submission, in order."""

    DECLARED = "declared"
    RESOLVED = "resolved"
    GRAPH_BUILT = "graph_built"
    CONFIG_BUILT = "config_built"
    SUBMITTED = "submitted"
    POST_SUBMIT_RUN = "post_submit_run"


_STATE_ORDER = list(SubmissionState)


@dataclass
class Submission:
    """Record of one submission attempt."""

    topology_name: str
    environment: str
    base_path: str
    state: SubmissionState = SubmissionState.DECLARED
    history: list[tuple[SubmissionState, datetime]] = field(default_factory=list)
    id_mapping: dict[str, int] = field(default_factory=dict)
    config: Any = None
    options: dict[str, Any] = field(default_factory=dict)
    topology: Any = None
    cluster: Any = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    error: str | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    @property
    def completed(self) -> bool:
        return self.state is SubmissionState.POST_SUBMIT_RUN

    def advance(self, target: SubmissionState) -> None:
        """Move exactly one state forward.

        Raises:
            InvalidTransitionError: If ``target`` is not the next state
        """
        index = _STATE_ORDER.index(self.state)
        if index + 1 >= len(_STATE_ORDER) or _STATE_ORDER[index + 1] is not target:
            raise InvalidTransitionError(self.state.value, target.value)
        self.state = target
        self.history.append((target, datetime.now(UTC)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging/storage."""
        return {
            "topology_name": self.topology_name,
            "environment": self.environment,
            "base_path": self.base_path,
            "state": self.state.value,
            "history": [state.value for state, _ in self.history],
            "id_mapping": dict(self.id_mapping),
            "options": dict(self.options),
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "error": self.error,
        }


class TopologySubmitter:
    """Drives one definition through resolution, build and submission."""

    def __init__(
        self,
        definition: TopologyDefinition,
        engine: ExecutionEngine,
        settings: StreamSpineSettings | None = None,
    ) -> None:
        self.definition = definition
        self.engine = engine
        self.settings = settings or get_settings()
        self.cluster: Any = None
        self.submission: Submission | None = None

    def start(self, base_path: str, env: Environment | str | None = None) -> Submission:
        """Resolve, build, configure and submit the topology.

        Args:
            base_path: Passed to the engine adapter for adapted components.
            env: ``"local"`` or ``"cluster"``; defaults to
                ``settings.default_environment``.

        Raises:
            InvalidTransitionError: If this submitter already ran.
            DuplicateIdentifierError, UnresolvedIdentifierError: Resolution failed.
            UnknownGroupingError: An edge has an unsupported grouping.
            InvalidConfigError: The configure hook set a bad option.
            UnsupportedEnvironmentError: ``env`` is not local or cluster.
        """
        if self.submission is not None:
            raise InvalidTransitionError(self.submission.state.value, SubmissionState.RESOLVED.value)

        if env is None:
            env = self.settings.default_environment
        name = self.definition.topology_name
        submission = Submission(topology_name=name, environment=str(getattr(env, "value", env)), base_path=base_path)
        self.submission = submission

        with LogContext(topology=name, environment=submission.environment):
            logger.info("topology_start", base_path=base_path, components=len(self.definition))
            try:
                self._resolve(submission)
                self._build_graph(submission, base_path)
                self._build_config(submission, env)
                self._submit(submission, env)
                self._post_submit(submission, env)
            except Exception as exc:
                submission.error = str(exc)
                logger.error(
                    "topology_submission_failed",
                    state=submission.state.value,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise
            submission.completed_at = datetime.now(UTC)
            logger.info(
                "topology_complete",
                duration_seconds=submission.duration_seconds,
            )
        return submission

    # =========================================================================
    # Stages
    # =========================================================================

    def _resolve(self, submission: Submission) -> None:
        submission.id_mapping = resolve_ids(self.definition.components)
        submission.advance(SubmissionState.RESOLVED)
        logger.info("topology_resolved", id_mapping=submission.id_mapping)

    def _build_graph(self, submission: Submission, base_path: str) -> None:
        builder = self.engine.topology_builder()
        for spout in self.definition.spouts:
            impl = self._instance(spout.implementation, base_path, self.engine.spout_adapter)
            builder.set_spout(spout.id, impl, spout.parallelism)
        for bolt in self.definition.bolts:
            impl = self._instance(bolt.implementation, base_path, self.engine.bolt_adapter)
            declarer = builder.set_bolt(bolt.id, impl, bolt.parallelism)
            apply_groupings(declarer, bolt.sources)
        submission.topology = builder.create_topology()
        submission.advance(SubmissionState.GRAPH_BUILT)
        logger.debug(
            "topology_graph_built",
            spouts=len(self.definition.spouts),
            bolts=len(self.definition.bolts),
        )

    @staticmethod
    def _instance(implementation: Any, base_path: str, adapter: Any) -> Any:
        if isinstance(implementation, NativeImpl):
            return implementation.instantiate()
        return adapter(base_path, implementation.qualified_name)

    def _build_config(self, submission: Submission, env: Environment | str) -> None:
        builder = ConfigBuilder(self.engine.config())
        self.definition.configure_hook(builder, env)
        submission.config = builder.config
        submission.options = dict(builder.options)
        submission.advance(SubmissionState.CONFIG_BUILT)
        logger.debug("topology_config_built", options=submission.options)

    def _submit(self, submission: Submission, env: Environment | str) -> None:
        environment = Environment.parse(env)
        if environment is Environment.LOCAL:
            self.cluster = self.engine.local_cluster()
            submission.cluster = self.cluster
            client = self.cluster
        else:
            client = self.engine.submitter()
        client.submit_topology(submission.topology_name, submission.config, submission.topology)
        submission.advance(SubmissionState.SUBMITTED)
        logger.info("topology_submitted", environment=environment.value)

    def _post_submit(self, submission: Submission, env: Environment | str) -> None:
        self.definition.submit_hook(submission, env)
        submission.advance(SubmissionState.POST_SUBMIT_RUN)


def start(
    definition: TopologyDefinition,
    base_path: str,
    env: Environment | str | None = None,
    *,
    engine: ExecutionEngine | None = None,
) -> Submission:
    """Submit ``definition`` with a fresh submitter (``MemoryEngine`` by default)."""
    if engine is None:
        from streamspine.topology.memory_engine import MemoryEngine

        engine = MemoryEngine()
    return TopologySubmitter(definition, engine).start(base_path, env)
