"""Name derivation helpers.

Component ids default to a snake_case form of the component's class name and
configuration setters are named ``set`` + CamelCase of the option name.  Both
are pure string transformations so the same type name always yields the same
derived name.

Examples::

    >>> underscore("SplitSentenceBolt")
    'split_sentence_bolt'
    >>> underscore("examples.word_count.SplitSentenceBolt")
    'split_sentence_bolt'
    >>> camel_case("max_task_parallelism")
    'MaxTaskParallelism'
"""

from __future__ import annotations

import re

_NAMESPACE_SEPARATOR = re.compile(r"::|\.")
_WORD_BOUNDARY = re.compile(r"(.)([A-Z])")
_PATH_SEGMENT = re.compile(r"/(.?)")
_SNAKE_SEGMENT = re.compile(r"(?:^|_)(.)")


def underscore(name: str | type) -> str:
    """Convert a (possibly namespaced) type name to snake_case.

    Only the last path segment is converted; ``.`` and ``::`` both separate
    namespaces.  Every uppercase letter preceded by another character gets an
    underscore in front of it, so acronyms split letter-wise
    (``HTTPServer`` -> ``h_tt_pserver``).
    """
    if isinstance(name, type):
        name = name.__qualname__
    last = _NAMESPACE_SEPARATOR.split(str(name))[-1]
    return _WORD_BOUNDARY.sub(r"\1_\2", last).lower()


def camel_case(name: str) -> str:
    """Convert a snake_case option name to CamelCase (``a/b`` -> ``A::B``)."""
    name = _PATH_SEGMENT.sub(lambda m: "::" + m.group(1).upper(), str(name))
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), name)


def qualified_name(cls: type) -> str:
    """Return the importable ``module.QualName`` of a class."""
    return f"{cls.__module__}.{cls.__qualname__}"
