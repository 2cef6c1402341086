"""
Structured error types for stream-spine.

Every failure raised while declaring, resolving, building or submitting a
topology is a ``StreamSpineError``.  Errors carry a category for routing and
reporting, a structured context (topology, component, environment) and an
optional chained cause.

Manifesto:
    - **Typed Error Hierarchy:** One subclass per failure domain
    - **Fatal by default:** Nothing in the topology layer is retried
    - **Rich Context:** Errors carry metadata for logging and the CLI
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                   StreamSpineError                        │
        │          (category, context, cause)                       │
        ├──────────────────────────────────────────────────────────┤
        │                                                           │
        │  ConfigError         TopologyError      SubmissionError   │
        │  (CONFIG)            (TOPOLOGY)         (SUBMISSION)      │
        │       │                                                   │
        │  InvalidConfigError                                       │
        └──────────────────────────────────────────────────────────┘

    Topology-specific subclasses live in ``streamspine.topology.exceptions``.

Examples:
    >>> error = TopologyError("cannot resolve id=ghost")
    >>> error.with_context(topology="word_count", component="SplitBolt")
    TopologyError('cannot resolve id=ghost', category=TOPOLOGY)
    >>> error.context.topology
    'word_count'

Tags:
    error-handling, exception-hierarchy, error-context, stream-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and reporting.

    Attributes:
        CONFIG: Unknown or invalid configuration, unknown grouping
        VALIDATION: Malformed declarations
        TOPOLOGY: Identifier resolution and graph consistency
        SUBMISSION: Environment dispatch and engine submission
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    CONFIG = "CONFIG"
    VALIDATION = "VALIDATION"
    TOPOLOGY = "TOPOLOGY"
    SUBMISSION = "SUBMISSION"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields are serialized by ``to_dict()``; anything that has no
    dedicated field goes into ``metadata``.

    Attributes:
        topology: Topology name
        component: Component class name
        component_id: Component identifier (symbolic or numeric)
        environment: Target environment tag
        metadata: Additional key-value pairs
    """

    topology: str | None = None
    component: str | None = None
    component_id: int | str | None = None
    environment: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["topology", "component", "component_id", "environment"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class StreamSpineError(Exception):
    """
    Base exception for all stream-spine errors.

    Subclasses set ``default_category`` to classify themselves.  The topology
    layer never retries, so there is no retry metadata here.

    Examples:
        >>> error = StreamSpineError("Test error", category=ErrorCategory.VALIDATION)
        >>> error.to_dict()["category"]
        'VALIDATION'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> StreamSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise TopologyError("Failed").with_context(
                topology="word_count",
                component="SplitSentenceBolt",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(StreamSpineError):
    """
    Configuration error.

    Never recoverable at this layer - the declaration must be fixed.
    """

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# TOPOLOGY / SUBMISSION ERRORS
# =============================================================================


class TopologyError(StreamSpineError):
    """Topology definition or resolution error."""

    default_category = ErrorCategory.TOPOLOGY


class SubmissionError(StreamSpineError):
    """Environment dispatch or engine submission error."""

    default_category = ErrorCategory.SUBMISSION


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, StreamSpineError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    if isinstance(error, (KeyError, AttributeError)):
        return ErrorCategory.CONFIG
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "StreamSpineError",
    "ConfigError",
    "InvalidConfigError",
    "TopologyError",
    "SubmissionError",
    "categorize_error",
]
