"""Topology exceptions — structured error hierarchy.

All topology exceptions inherit from the ``streamspine.core.errors`` families
so that callers can catch them with a single ``except`` clause.  Every one of
them is fatal: ``TopologySubmitter.start`` aborts on the first one raised.

Hierarchy::

    TopologyError  (from streamspine.core.errors)
      ├── DuplicateIdentifierError    ── same id declared by two components
      ├── UnresolvedIdentifierError   ── id or edge source matches no component
      └── InvalidTransitionError      ── submission state machine misuse
    ConfigError
      └── UnknownGroupingError        ── grouping outside the closed set
    SubmissionError
      └── UnsupportedEnvironmentError ── env is neither local nor cluster
"""

from __future__ import annotations

from typing import Any

from streamspine.core.errors import ConfigError, SubmissionError, TopologyError


class DuplicateIdentifierError(TopologyError):
    """Raised when two components declare the same identifier."""

    def __init__(self, identifier: int | str, component: str):
        self.identifier = identifier
        self.component = component
        super().__init__(f"duplicate id in {component} on id={identifier}")
        self.with_context(component=component, component_id=identifier)


class UnresolvedIdentifierError(TopologyError):
    """Raised when a component id or a bolt source cannot be resolved."""

    def __init__(self, identifier: int | str, component: str, *, source: bool = False):
        self.identifier = identifier
        self.component = component
        self.source = source
        what = "source id" if source else "id"
        super().__init__(f"cannot resolve {component} {what}={identifier}")
        self.with_context(component=component, component_id=identifier)


class InvalidTransitionError(TopologyError):
    """Raised when the submission state machine is driven out of order."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"invalid submission transition {current} -> {target}")


class UnknownGroupingError(ConfigError):
    """Raised when an edge names a grouping outside the supported set."""

    def __init__(self, grouping: Any):
        self.grouping = grouping
        super().__init__(f"unknown grouper={grouping!r}")


class UnsupportedEnvironmentError(SubmissionError):
    """Raised when submission targets an unrecognized environment."""

    def __init__(self, environment: Any):
        self.environment = environment
        super().__init__(
            f"unsupported env={environment!r}, expecting 'local' or 'cluster'"
        )
        self.with_context(environment=str(environment))
