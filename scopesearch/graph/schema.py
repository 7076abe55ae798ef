"""Dataset schema definitions for scoped search.

Describes which collection holds the primary (categorized) records, how flat
hierarchical collections reference their parents, and which collection carries
aliases that resolve back to primary records.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class Connection:
    """Edge declared on a primary record."""

    target_id: str
    edge_type: str | None = None


@dataclass(frozen=True)
class ParentLink:
    """A field on a flat record that references a record in another collection."""

    field: str
    collection: str


@dataclass(frozen=True)
class FlatCollection:
    """Hierarchical record type with a fixed search field list."""

    key: str
    parents: tuple[ParentLink, ...]
    search_fields: tuple[str, ...]


@dataclass(frozen=True)
class AliasCollection:
    """Secondary identifier records that point at an owning primary record."""

    key: str = "securities"
    owner_field: str = "entity_id"
    search_fields: tuple[str, ...] = ("ticker", "cusip", "isin", "security_name")
    display_fields: tuple[str, ...] = ("ticker", "security_name")


@dataclass(frozen=True)
class DatasetSchema:
    """Shape of the in-memory dataset handed to the engine."""

    primary: str = "assets"
    category_field: str = "category"
    connections_field: str = "connections"
    name_field: str = "name"
    primary_search_fields: tuple[str, ...] = (
        "name",
        "code",
        "activities",
        "description",
    )
    flat: tuple[FlatCollection, ...] = field(default_factory=tuple)
    alias: AliasCollection = field(default_factory=AliasCollection)

    def flat_keys(self) -> list[str]:
        return [collection.key for collection in self.flat]

    def get_flat(self, key: str) -> FlatCollection | None:
        for collection in self.flat:
            if collection.key == key:
                return collection
        return None

    def declared_keys(self) -> list[str]:
        """Every collection key the schema knows about, primary first."""
        return [self.primary, *self.flat_keys(), self.alias.key]

    def ancestor_collections(self, key: str) -> set[str]:
        """All collections a record in `key` can descend from."""
        found: set[str] = set()
        pending = [key]
        while pending:
            current = self.get_flat(pending.pop())
            if current is None:
                continue
            for link in current.parents:
                if link.collection not in found:
                    found.add(link.collection)
                    pending.append(link.collection)
        return found


DEFAULT_SCHEMA = DatasetSchema(
    flat=(
        FlatCollection(
            key="regulatory_affairs",
            parents=(ParentLink("assetId", "assets"),),
            search_fields=("name", "type", "category", "authority", "description"),
        ),
        FlatCollection(
            key="renewals",
            parents=(ParentLink("affairId", "regulatory_affairs"),),
            search_fields=("name", "type", "responsiblePerson", "notes"),
        ),
        FlatCollection(
            key="attachments",
            parents=(
                ParentLink("renewalId", "renewals"),
                ParentLink("assetId", "assets"),
            ),
            search_fields=("name", "type", "notes", "uploadedBy"),
        ),
    ),
)


def record_id(record: Any) -> str | None:
    """Return a record's id as a non-empty string, or None."""
    if not isinstance(record, Mapping):
        return None
    value = record.get("id")
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parent_reference(
    record: Mapping[str, Any], links: Iterable[ParentLink]
) -> tuple[ParentLink, str] | None:
    """Pick the first parent link whose field is set on the record."""
    for link in links:
        value = record.get(link.field)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return link, text
    return None


def iter_connections(
    record: Mapping[str, Any], field_name: str = "connections"
) -> Iterable[Connection]:
    """Yield well-formed connections declared on a record."""
    raw = record.get(field_name)
    if not isinstance(raw, (list, tuple)):
        return
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        target = item.get("id")
        if target is None or not str(target).strip():
            continue
        edge_type = item.get("type")
        yield Connection(
            target_id=str(target).strip(),
            edge_type=str(edge_type) if edge_type is not None else None,
        )
