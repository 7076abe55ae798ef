"""Typed contracts for scoped search results."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Mapping


class MatchProvenance(Enum):
    """How a hit was found."""

    DIRECT = "direct"  # A configured field of the record itself matched
    ALIAS = "alias"  # A record in the alias collection matched and resolved here


@dataclass(frozen=True)
class ContextEntry:
    id: str
    name: str | None
    category: str | None
    collection: str


@dataclass(frozen=True)
class QueryHit:
    record: Mapping[str, Any]
    collection_key: str
    score: float
    match_provenance: MatchProvenance = MatchProvenance.DIRECT
    context: tuple[ContextEntry, ...] | None = None
    alias_fields: dict[str, Any] | None = None

    @property
    def record_id(self) -> str | None:
        value = self.record.get("id")
        return str(value) if value is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "record": dict(self.record),
            "collection_key": self.collection_key,
            "score": self.score,
            "match_provenance": self.match_provenance.value,
            "context": (
                [asdict(entry) for entry in self.context]
                if self.context is not None
                else None
            ),
            "alias_fields": self.alias_fields,
        }


@dataclass(frozen=True)
class HitGroup:
    collection_key: str
    results: tuple[QueryHit, ...]


@dataclass(frozen=True)
class QueryResult:
    groups: tuple[HitGroup, ...] = ()
    total: int = 0
    normalized_query: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "groups": [
                {
                    "collection_key": group.collection_key,
                    "results": [hit.to_dict() for hit in group.results],
                }
                for group in self.groups
            ],
            "total": self.total,
            "normalized_query": self.normalized_query,
        }


@dataclass(frozen=True)
class QueryOptions:
    """Per-query filters.

    `collection` is "all" or one collection key. `category` narrows the
    categorized fan-out to a single category. `ancestors` maps a collection
    key to a record id and keeps only hits at or below that record.
    """

    collection: str = "all"
    category: str | None = None
    ancestors: dict[str, str] = field(default_factory=dict)
    limit: int | None = None
