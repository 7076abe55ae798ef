"""Scope filtering of a dataset through graph reachability."""

import logging
from typing import Any, Iterable, Mapping

from ..search.access import Actor
from .builder import build_graph
from .schema import (
    DEFAULT_SCHEMA,
    DatasetSchema,
    FlatCollection,
    parent_reference,
    record_id,
)
from .traversal import reachable

log = logging.getLogger(__name__)


def _records(dataset: Mapping[str, Any], key: str) -> list:
    value = dataset.get(key)
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def flat_collections_parent_first(schema: DatasetSchema) -> list[FlatCollection]:
    """Order flat collections so every parent collection comes before its children."""
    ordered: list[FlatCollection] = []
    placed = {schema.primary}
    pending = list(schema.flat)

    while pending:
        progressed = False
        for collection in list(pending):
            parents = {link.collection for link in collection.parents}
            if parents <= placed | {collection.key}:
                ordered.append(collection)
                placed.add(collection.key)
                pending.remove(collection)
                progressed = True
        if not progressed:
            log.warning(
                "Flat collections reference undeclared or cyclic parents: "
                f"{[c.key for c in pending]}"
            )
            ordered.extend(pending)
            break

    return ordered


def empty_scoped_dataset(
    dataset: Mapping[str, Any], *, schema: DatasetSchema = DEFAULT_SCHEMA
) -> dict[str, Any]:
    """Same shape as `dataset` with every declared collection emptied."""
    scoped = dict(dataset)
    for key in schema.declared_keys():
        if key in scoped:
            scoped[key] = []
    return scoped


def compute_scoped_dataset(
    dataset: Mapping[str, Any],
    scope_root_ids: Iterable[str] | None,
    *,
    max_depth: int = 1,
    allowed_edge_types: Iterable[str] | None = None,
    schema: DatasetSchema = DEFAULT_SCHEMA,
) -> dict[str, Any]:
    """Prune a dataset to what is reachable from `scope_root_ids`.

    Primary records are kept when reachable within `max_depth`. Flat records
    are kept when their parent was kept, cascading through the hierarchy.
    Alias records follow their owner. Collections the schema does not declare
    pass through untouched. An empty root list yields an empty dataset.
    """
    roots = [r for r in (scope_root_ids or []) if r]
    if not roots:
        return empty_scoped_dataset(dataset, schema=schema)

    primary_records = _records(dataset, schema.primary)
    graph = build_graph(primary_records, schema=schema)
    visible = reachable(
        roots,
        graph,
        max_depth=max_depth,
        allowed_edge_types=allowed_edge_types,
    )

    scoped = dict(dataset)
    kept_ids: dict[str, set[str]] = {}

    kept_primary = [r for r in primary_records if record_id(r) in visible]
    kept_ids[schema.primary] = {record_id(r) for r in kept_primary}
    if schema.primary in dataset:
        scoped[schema.primary] = kept_primary

    for collection in flat_collections_parent_first(schema):
        kept: list = []
        for record in _records(dataset, collection.key):
            reference = parent_reference(record, collection.parents)
            if reference is None:
                continue
            link, parent_id = reference
            if parent_id in kept_ids.get(link.collection, ()):
                kept.append(record)
        kept_ids[collection.key] = {
            rid for rid in (record_id(r) for r in kept) if rid is not None
        }
        if collection.key in dataset:
            scoped[collection.key] = kept

    alias = schema.alias
    if alias.key in dataset:
        scoped[alias.key] = [
            record
            for record in _records(dataset, alias.key)
            if isinstance(record, Mapping)
            and str(record.get(alias.owner_field) or "") in kept_ids[schema.primary]
        ]

    log.debug(
        f"Scoped dataset from {len(roots)} roots at depth {max_depth}: "
        f"{len(kept_primary)}/{len(primary_records)} primary records visible"
    )
    return scoped


def scoped_dataset_for_actor(
    dataset: Mapping[str, Any],
    actor: Actor | None,
    *,
    max_depth: int = 1,
    allowed_edge_types: Iterable[str] | None = None,
    schema: DatasetSchema = DEFAULT_SCHEMA,
) -> Mapping[str, Any]:
    """Apply the actor's scope to a dataset.

    Unrestricted actors and actors without scoping see the dataset unchanged.
    A scoped actor with no roots sees nothing.
    """
    if actor is None or actor.unrestricted or not actor.scoped:
        return dataset

    if not actor.scope_root_ids:
        log.warning(f"Scoped actor {actor.id} has no scope roots; granting no access")
        return empty_scoped_dataset(dataset, schema=schema)

    return compute_scoped_dataset(
        dataset,
        actor.scope_root_ids,
        max_depth=max_depth,
        allowed_edge_types=allowed_edge_types,
        schema=schema,
    )
