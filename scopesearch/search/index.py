"""Index generations and the store that publishes them."""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from ..graph.schema import record_id
from .access import Actor
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .fuzzy import FuzzyIndex, SequenceMatcherIndex

log = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "unknown"

IndexFactory = Callable[[SearchConfig], FuzzyIndex]


class SearchNotInitializedError(RuntimeError):
    """Raised when querying a store that has never been given data."""


def default_index_factory(config: SearchConfig) -> FuzzyIndex:
    return SequenceMatcherIndex(
        threshold=config.match_threshold,
        min_match_chars=config.min_match_chars,
    )


@dataclass(frozen=True)
class IndexGeneration:
    """One complete, immutable build of every index."""

    config: SearchConfig
    actor: Actor | None
    category_indexes: dict[str, FuzzyIndex]
    flat_indexes: dict[str, FuzzyIndex]
    records_by_id: dict[str, dict[str, Mapping[str, Any]]]
    alias_index: FuzzyIndex | None = None
    alias_by_owner: dict[str, tuple[Mapping[str, Any], ...]] = field(
        default_factory=dict
    )

    def lookup(self, collection: str, rid: str) -> Mapping[str, Any] | None:
        return self.records_by_id.get(collection, {}).get(rid)

    def aliases_for(self, owner_id: str) -> tuple[Mapping[str, Any], ...]:
        """Alias records owned by a primary record."""
        return self.alias_by_owner.get(owner_id, ())


def _collection(dataset: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    value = dataset.get(key)
    if not isinstance(value, (list, tuple)):
        return []
    return [record for record in value if isinstance(record, Mapping)]


def _build(
    factory: IndexFactory,
    config: SearchConfig,
    records: list[Mapping[str, Any]],
    fields: tuple[str, ...],
) -> FuzzyIndex:
    index = factory(config)
    index.build(records, fields)
    return index


def build_generation(
    dataset: Mapping[str, Any] | None,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
    actor: Actor | None = None,
    *,
    index_factory: IndexFactory = default_index_factory,
) -> IndexGeneration:
    """Build every index for `dataset` without touching any prior generation."""
    dataset = dataset or {}
    schema = config.schema

    records_by_id: dict[str, dict[str, Mapping[str, Any]]] = {}
    for key in (schema.primary, *schema.flat_keys()):
        lookup: dict[str, Mapping[str, Any]] = {}
        for record in _collection(dataset, key):
            rid = record_id(record)
            if rid is not None:
                lookup[rid] = record
        records_by_id[key] = lookup

    by_category: dict[str, list[Mapping[str, Any]]] = defaultdict(list)
    for record in _collection(dataset, schema.primary):
        if record_id(record) is None:
            log.debug(f"Skipping {schema.primary} record without id")
            continue
        category = record.get(schema.category_field) or UNKNOWN_CATEGORY
        by_category[str(category)].append(record)

    category_indexes: dict[str, FuzzyIndex] = {}
    if config.collection_enabled(schema.primary):
        for category, records in by_category.items():
            category_indexes[category] = _build(
                index_factory, config, records, config.fields_for_category(category)
            )

    flat_indexes: dict[str, FuzzyIndex] = {}
    for collection in schema.flat:
        if not config.collection_enabled(collection.key):
            log.debug(f"Collection {collection.key} disabled by configuration")
            continue
        flat_indexes[collection.key] = _build(
            index_factory,
            config,
            _collection(dataset, collection.key),
            collection.search_fields,
        )

    alias_index: FuzzyIndex | None = None
    alias_by_owner: dict[str, tuple[Mapping[str, Any], ...]] = {}
    alias_records = _collection(dataset, schema.alias.key)
    if config.alias_search.enabled and alias_records:
        owners: dict[str, list[Mapping[str, Any]]] = defaultdict(list)
        for alias in alias_records:
            owner_id = alias.get(schema.alias.owner_field)
            if owner_id:
                owners[str(owner_id)].append(alias)
        alias_by_owner = {owner: tuple(items) for owner, items in owners.items()}
        alias_index = _build(index_factory, config, alias_records, config.alias_fields())

    return IndexGeneration(
        config=config,
        actor=actor,
        category_indexes=category_indexes,
        flat_indexes=flat_indexes,
        records_by_id=records_by_id,
        alias_index=alias_index,
        alias_by_owner=alias_by_owner,
    )


class IndexStore:
    """Holds the current index generation for one tenant.

    A rebuild runs to completion before the new generation replaces the old
    one, so readers always see exactly one complete generation.
    """

    def __init__(self, index_factory: IndexFactory = default_index_factory):
        self._index_factory = index_factory
        self._lock = threading.Lock()
        self._generation: IndexGeneration | None = None

    @property
    def is_ready(self) -> bool:
        return self._generation is not None

    def set_index_data(
        self,
        dataset: Mapping[str, Any] | None,
        config: SearchConfig | Mapping[str, Any] | None = None,
        actor: Actor | Mapping[str, Any] | None = None,
    ) -> IndexGeneration:
        """Rebuild every index and publish the new generation."""
        if not isinstance(config, SearchConfig):
            config = SearchConfig.from_mapping(config)
        if actor is not None and not isinstance(actor, Actor):
            actor = Actor.from_mapping(actor)

        generation = build_generation(
            dataset, config, actor, index_factory=self._index_factory
        )
        with self._lock:
            self._generation = generation

        log.info(
            f"Published index generation: {len(generation.category_indexes)} categories, "
            f"{len(generation.flat_indexes)} flat collections, "
            f"alias index {'on' if generation.alias_index is not None else 'off'}"
        )
        return generation

    def peek(self) -> IndexGeneration | None:
        """The current generation, or None before the first build."""
        with self._lock:
            return self._generation

    def current(self) -> IndexGeneration:
        generation = self.peek()
        if generation is None:
            raise SearchNotInitializedError(
                "Index store has no data. Call set_index_data before querying."
            )
        return generation
