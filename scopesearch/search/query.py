"""Query execution against one index generation."""

import logging
import time
from dataclasses import replace
from typing import Any, Mapping

from ..graph.schema import parent_reference, record_id
from .access import accessible_categories
from .fuzzy import FuzzyHit, FuzzyIndex
from .index import UNKNOWN_CATEGORY, IndexGeneration
from .tokenize import normalize_whitespace, split_tokens
from .types import (
    ContextEntry,
    HitGroup,
    MatchProvenance,
    QueryHit,
    QueryOptions,
    QueryResult,
)

log = logging.getLogger(__name__)

_PROVENANCE_RANK = {MatchProvenance.DIRECT: 0, MatchProvenance.ALIAS: 1}


def search_with_token_intersection(
    index: FuzzyIndex | None, query: str
) -> list[FuzzyHit]:
    """Search every token and keep items matched by all of them.

    An item's combined score is its worst per-token score. When no item
    matches every token, the untokenized query is searched as one phrase.
    """
    if index is None:
        return []

    tokens = split_tokens(query)
    if len(tokens) <= 1:
        return index.search(query)

    per_token = [index.search(token) for token in tokens]

    matched: dict[int, tuple[FuzzyHit, int, float]] = {}
    for results in per_token:
        for hit in results:
            entry = matched.get(hit.ref_index)
            if entry is None:
                matched[hit.ref_index] = (hit, 1, hit.score)
            else:
                first, count, worst = entry
                matched[hit.ref_index] = (first, count + 1, max(worst, hit.score))

    intersection = [
        replace(hit, score=worst)
        for hit, count, worst in matched.values()
        if count == len(tokens)
    ]
    if not intersection:
        return index.search(query)

    intersection.sort(key=lambda hit: (hit.score, hit.ref_index))
    return intersection


def ancestor_chain(
    generation: IndexGeneration,
    collection_key: str,
    record: Mapping[str, Any],
) -> tuple[ContextEntry, ...] | None:
    """Ancestors of a flat record, nearest first, up to its primary record.

    Returns None when any link of the chain cannot be resolved.
    """
    schema = generation.config.schema
    chain: list[ContextEntry] = []
    seen: set[tuple[str, str]] = set()
    current_key, current = collection_key, record

    while current_key != schema.primary:
        collection = schema.get_flat(current_key)
        if collection is None:
            return None
        reference = parent_reference(current, collection.parents)
        if reference is None:
            return None
        link, parent_id = reference
        if (link.collection, parent_id) in seen:
            return None
        seen.add((link.collection, parent_id))

        parent = generation.lookup(link.collection, parent_id)
        if parent is None:
            return None
        chain.append(
            ContextEntry(
                id=parent_id,
                name=parent.get(schema.name_field),
                category=parent.get(schema.category_field),
                collection=link.collection,
            )
        )
        current_key, current = link.collection, parent

    return tuple(chain)


def _matches_ancestors(
    generation: IndexGeneration,
    ancestors: Mapping[str, str],
    collection_key: str,
    record: Mapping[str, Any],
    chain: tuple[ContextEntry, ...] | None,
) -> bool:
    if not ancestors:
        return True
    schema = generation.config.schema
    above = schema.ancestor_collections(collection_key)

    for filter_key, filter_id in ancestors.items():
        if filter_key == collection_key:
            if record_id(record) != filter_id:
                return False
        elif filter_key in above:
            if not chain or not any(
                entry.collection == filter_key and entry.id == filter_id
                for entry in chain
            ):
                return False
    return True


def _prefer(candidate: QueryHit, existing: QueryHit | None) -> bool:
    if existing is None:
        return True
    if candidate.score != existing.score:
        return candidate.score < existing.score
    return (
        _PROVENANCE_RANK[candidate.match_provenance]
        < _PROVENANCE_RANK[existing.match_provenance]
    )


def _search_primary(
    generation: IndexGeneration,
    query: str,
    options: QueryOptions,
    category_filter: str | None,
    limit: int,
) -> list[QueryHit]:
    config = generation.config
    schema = config.schema
    alias = config.alias_search

    categories = accessible_categories(config, generation.actor)
    if categories is None:
        categories = list(generation.category_indexes)
    if category_filter is not None:
        categories = [c for c in categories if c == category_filter]

    merged: dict[str, QueryHit] = {}
    for category in categories:
        index = generation.category_indexes.get(category)
        if index is None:
            continue

        for hit in search_with_token_intersection(index, query):
            rid = record_id(hit.item)
            candidate = QueryHit(
                record=hit.item, collection_key=schema.primary, score=hit.score
            )
            if _prefer(candidate, merged.get(rid)):
                merged[rid] = candidate

        if not (alias.enabled and category == alias.target_category):
            continue

        for hit in search_with_token_intersection(generation.alias_index, query):
            owner_id = hit.item.get(schema.alias.owner_field)
            if not owner_id or str(owner_id) in merged:
                continue
            owner = generation.lookup(schema.primary, str(owner_id))
            if owner is None:
                continue
            if str(owner.get(schema.category_field) or UNKNOWN_CATEGORY) != category:
                continue
            merged[str(owner_id)] = QueryHit(
                record=owner,
                collection_key=schema.primary,
                score=hit.score,
                match_provenance=MatchProvenance.ALIAS,
                alias_fields={
                    name: hit.item.get(name) for name in schema.alias.display_fields
                },
            )

    hits = [
        hit
        for hit in merged.values()
        if _matches_ancestors(
            generation, options.ancestors, schema.primary, hit.record, None
        )
    ]
    hits.sort(key=lambda hit: (hit.score, _PROVENANCE_RANK[hit.match_provenance]))
    return hits[:limit]


def _search_flat(
    generation: IndexGeneration,
    collection_key: str,
    query: str,
    options: QueryOptions,
    limit: int,
) -> list[QueryHit]:
    results: list[QueryHit] = []
    index = generation.flat_indexes.get(collection_key)

    for hit in search_with_token_intersection(index, query):
        if len(results) >= limit:
            break
        chain = ancestor_chain(generation, collection_key, hit.item)
        if not _matches_ancestors(
            generation, options.ancestors, collection_key, hit.item, chain
        ):
            continue
        results.append(
            QueryHit(
                record=hit.item,
                collection_key=collection_key,
                score=hit.score,
                context=chain,
            )
        )
    return results


def run_query(
    generation: IndexGeneration,
    text: str | None,
    options: QueryOptions | None = None,
) -> QueryResult:
    """Run a query against one generation and group hits by collection."""
    started = time.perf_counter()
    options = options or QueryOptions()
    config = generation.config
    schema = config.schema

    query = normalize_whitespace(text)
    if len(query) < config.min_query_length:
        return QueryResult(normalized_query=query)

    limit = options.limit if options.limit is not None else config.suggestion_limit
    limit = max(0, limit)

    collection = options.collection or "all"
    category = options.category
    if (
        collection != "all"
        and collection not in schema.declared_keys()
        and collection in generation.category_indexes
    ):
        collection, category = schema.primary, collection

    groups: list[HitGroup] = []

    if collection in ("all", schema.primary) and config.collection_enabled(
        schema.primary
    ):
        hits = _search_primary(generation, query, options, category, limit)
        if hits:
            groups.append(HitGroup(schema.primary, tuple(hits)))

    for flat in schema.flat:
        if collection not in ("all", flat.key):
            continue
        if not config.collection_enabled(flat.key):
            continue
        hits = _search_flat(generation, flat.key, query, options, limit)
        if hits:
            groups.append(HitGroup(flat.key, tuple(hits)))

    total = sum(len(group.results) for group in groups)

    elapsed_ms = (time.perf_counter() - started) * 1000.0
    if elapsed_ms > config.slow_query_ms:
        log.warning(
            f'Query "{query}" took {elapsed_ms:.2f}ms '
            f"(threshold: {config.slow_query_ms:.0f}ms)"
        )

    return QueryResult(groups=tuple(groups), total=total, normalized_query=query)
