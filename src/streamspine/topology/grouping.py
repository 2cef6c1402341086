"""Grouping Model — how tuples travel along a topology edge.

Manifesto:
Every bolt subscribes to its upstream components through an edge, and
every edge carries exactly one grouping policy.  The set of policies is
closed: an unknown grouping is a configuration error caught at declaration,
not something the engine discovers at runtime.

ARCHITECTURE
────────────
::

    GroupingKind        ── enum: FIELDS, GLOBAL, SHUFFLE, NONE, ALL, DIRECT
    Grouping            ── frozen (kind, fields) value
      ├── .fields_on(*names)   ── hash partition on named fields
      ├── .of(kind)            ── any field-less kind
      └── .parse(value)        ── user forms -> Grouping
    apply_groupings()   ── one EdgeDeclarer call per (source_id, grouping)

Accepted user forms for ``Grouping.parse``::

    Grouping.shuffle()                        # already a Grouping
    GroupingKind.SHUFFLE                      # the kind itself
    "shuffle"                                 # kind string
    {"fields": ["user_id", "session"]}        # single-entry mapping
    {"fields": "word"}                        # single field, bare string

Tags:
    stream-spine, topology, grouping, edges

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from streamspine.core.logging import get_logger
from streamspine.topology.exceptions import UnknownGroupingError

if TYPE_CHECKING:
    from streamspine.topology.engine import EdgeDeclarer
    from streamspine.topology.identifiers import ComponentId

logger = get_logger(__name__)


class GroupingKind(str, Enum):
    """Stream grouping policy."""

    FIELDS = "fields"  # Hash-partition on the named fields
    GLOBAL = "global"  # Everything to the lowest task id
    SHUFFLE = "shuffle"  # Random, evenly distributed
    NONE = "none"  # Engine's choice
    ALL = "all"  # Broadcast to every task
    DIRECT = "direct"  # Producer picks the consumer task


@dataclass(frozen=True)
class Grouping:
    """An edge grouping: a kind plus, for ``FIELDS``, the field names."""

    kind: GroupingKind
    fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.kind, GroupingKind):
            raise UnknownGroupingError(self.kind)
        if self.kind is GroupingKind.FIELDS:
            if not self.fields:
                raise ValueError("fields grouping requires at least one field name")
            if not all(isinstance(f, str) and f for f in self.fields):
                raise ValueError(f"field names must be non-empty strings: {self.fields!r}")
        elif self.fields:
            raise ValueError(f"{self.kind.value} grouping takes no fields")

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def fields_on(cls, *names: str) -> Grouping:
        return cls(GroupingKind.FIELDS, tuple(names))

    @classmethod
    def of(cls, kind: GroupingKind | str) -> Grouping:
        return cls(_to_kind(kind))

    @classmethod
    def shuffle(cls) -> Grouping:
        return cls(GroupingKind.SHUFFLE)

    @classmethod
    def global_(cls) -> Grouping:
        return cls(GroupingKind.GLOBAL)

    @classmethod
    def none(cls) -> Grouping:
        return cls(GroupingKind.NONE)

    @classmethod
    def all(cls) -> Grouping:
        return cls(GroupingKind.ALL)

    @classmethod
    def direct(cls) -> Grouping:
        return cls(GroupingKind.DIRECT)

    @classmethod
    def parse(cls, value: Any) -> Grouping:
        """Normalize any accepted user form into a ``Grouping``.

        Raises:
            UnknownGroupingError: If the kind is not one of ``GroupingKind``
            ValueError: If a fields grouping has no usable field names
        """
        if isinstance(value, Grouping):
            return value
        if isinstance(value, Mapping):
            if len(value) != 1:
                raise UnknownGroupingError(value)
            ((kind, fields),) = value.items()
            kind = _to_kind(kind)
            if kind is not GroupingKind.FIELDS:
                if fields:
                    raise ValueError(f"{kind.value} grouping takes no fields")
                return cls(kind)
            if fields is None:
                return cls(kind)
            if isinstance(fields, str):
                return cls(kind, (fields,))
            if isinstance(fields, Iterable):
                return cls(kind, tuple(fields))
            raise ValueError(f"field names must be a name or a list of names: {fields!r}")
        return cls(_to_kind(value))

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        if self.kind is GroupingKind.FIELDS:
            return {"fields": list(self.fields)}
        return {self.kind.value: None}

    def __str__(self) -> str:
        if self.kind is GroupingKind.FIELDS:
            return f"fields({', '.join(self.fields)})"
        return self.kind.value


def _to_kind(value: Any) -> GroupingKind:
    if isinstance(value, GroupingKind):
        return value
    if isinstance(value, str):
        try:
            return GroupingKind(value.lower())
        except ValueError:
            raise UnknownGroupingError(value) from None
    raise UnknownGroupingError(value)


def apply_groupings(
    declarer: EdgeDeclarer,
    sources: Iterable[tuple[ComponentId, Grouping]],
) -> None:
    """Translate each (source_id, grouping) into one declarer call.

    ``FIELDS`` passes its field names as a list in declared order; every other
    kind passes only the source id.
    """
    for source_id, grouping in sources:
        kind = getattr(grouping, "kind", None)
        if kind is GroupingKind.FIELDS:
            declarer.fields_grouping(source_id, list(grouping.fields))
        elif kind is GroupingKind.GLOBAL:
            declarer.global_grouping(source_id)
        elif kind is GroupingKind.SHUFFLE:
            declarer.shuffle_grouping(source_id)
        elif kind is GroupingKind.NONE:
            declarer.none_grouping(source_id)
        elif kind is GroupingKind.ALL:
            declarer.all_grouping(source_id)
        elif kind is GroupingKind.DIRECT:
            declarer.direct_grouping(source_id)
        else:
            raise UnknownGroupingError(grouping)
        logger.debug("edge_declared", source_id=source_id, grouping=str(grouping))
