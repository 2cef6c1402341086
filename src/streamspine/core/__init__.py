"""
stream-spine core primitives: errors, logging, settings and naming helpers.
"""

from streamspine.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    StreamSpineError,
    SubmissionError,
    TopologyError,
    categorize_error,
)
from streamspine.core.logging import LogContext, configure_logging, get_logger
from streamspine.core.naming import camel_case, qualified_name, underscore
from streamspine.core.settings import StreamSpineSettings, clear_settings_cache, get_settings

__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "StreamSpineError",
    "ConfigError",
    "InvalidConfigError",
    "TopologyError",
    "SubmissionError",
    "categorize_error",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # Naming
    "underscore",
    "camel_case",
    "qualified_name",
    # Settings
    "StreamSpineSettings",
    "get_settings",
    "clear_settings_cache",
]
