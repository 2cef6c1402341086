"""Identifier Resolver — symbolic ids to engine-ready integers.

Manifesto:
Developers name components (``"word_spout"``) or pin them to explicit
integers.  The engine only understands integers.  The resolver assigns
every symbolic id the smallest positive integer not already taken,
in declaration order, and rewrites every bolt source to match.  The
same declarations always produce the same numbering.

ARCHITECTURE
────────────
::

    resolve_ids(components)
      1. partition      ── numeric vs symbolic ids
      2. reserve        ── used = {numeric ids}      (repeat -> Duplicate)
      3. assign         ── name -> smallest free int (repeat -> Duplicate)
      4. rewrite ids    ── symbolic -> mapping       (miss -> Unresolved)
      5. rewrite edges  ── bolt sources              (miss -> Unresolved)

Steps 1-3 touch nothing, so a duplicate leaves every component exactly as
declared.  Step 5 also rejects numeric sources naming no component.

Example::

    spouts: 1, "a"      bolts: 3, "b"
    -> a = 2, b = 4

Tags:
    stream-spine, topology, resolver, identifiers

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Sequence

from streamspine.core.logging import get_logger
from streamspine.topology.components import BoltDefinition, ComponentDefinition
from streamspine.topology.exceptions import (
    DuplicateIdentifierError,
    UnresolvedIdentifierError,
)
from streamspine.topology.identifiers import is_numeric

logger = get_logger(__name__)


def resolve_ids(components: Sequence[ComponentDefinition]) -> dict[str, int]:
    """Resolve all component ids in place.

    Args:
        components: Spouts and bolts in declaration order.

    Returns:
        Mapping of each symbolic name to the integer it was given (empty when
        everything was already numeric).

    Raises:
        DuplicateIdentifierError: Two components share an id.
        UnresolvedIdentifierError: A bolt source names no declared component.
    """
    numeric = [c for c in components if is_numeric(c.id)]
    symbolic = [c for c in components if not is_numeric(c.id)]

    used: set[int] = set()
    for component in numeric:
        if component.id in used:
            raise DuplicateIdentifierError(component.id, component.class_name)
        used.add(component.id)

    mapping: dict[str, int] = {}
    counter = 1
    for component in symbolic:
        if component.id in mapping:
            raise DuplicateIdentifierError(component.id, component.class_name)
        # used only grows, so the counter never needs to move back
        while counter in used:
            counter += 1
        used.add(counter)
        mapping[component.id] = counter

    rewrites: list[tuple[BoltDefinition, list]] = []
    for component in components:
        if not isinstance(component, BoltDefinition):
            continue
        rewritten = []
        for source_id, grouping in component.sources:
            if is_numeric(source_id):
                if source_id not in used:
                    raise UnresolvedIdentifierError(source_id, component.class_name, source=True)
                rewritten.append((source_id, grouping))
            elif source_id in mapping:
                rewritten.append((mapping[source_id], grouping))
            else:
                raise UnresolvedIdentifierError(source_id, component.class_name, source=True)
        rewrites.append((component, rewritten))

    # Nothing is mutated until every source has resolved.
    for component in symbolic:
        component.id = mapping[component.id]
    for bolt, rewritten in rewrites:
        bolt.sources[:] = rewritten

    logger.debug(
        "ids_resolved",
        components=len(components),
        assigned=mapping,
    )
    return mapping
