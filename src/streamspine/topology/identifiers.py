"""Component identifiers.

A ``ComponentId`` is either numeric (a positive ``int``, already meaningful to
the engine) or symbolic (a non-empty ``str`` such as a class-derived name).
The resolver turns every symbolic id into a numeric one.
"""

from __future__ import annotations

from typing import Union

from streamspine.core.naming import underscore

ComponentId = Union[int, str]


def is_numeric(identifier: ComponentId) -> bool:
    """True for resolved (numeric) identifiers."""
    return isinstance(identifier, int) and not isinstance(identifier, bool)


def normalize_id(value: ComponentId | type) -> ComponentId:
    """Validate a declared identifier; classes become their derived name.

    Raises:
        TypeError: If the value is not an int, str or class
        ValueError: If a numeric id is not positive or a symbolic id is empty
    """
    if isinstance(value, type):
        return underscore(value)
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"Component id must be int or str, got {type(value).__name__}")
    if isinstance(value, int) and value < 1:
        raise ValueError(f"Numeric component id must be positive, got {value}")
    if isinstance(value, str) and not value:
        raise ValueError("Symbolic component id must not be empty")
    return value
