"""Composition root for scoped search.

A `SearchEngine` owns one `IndexStore`; create one per tenant or test instead
of sharing process-wide state.
"""

from dataclasses import replace
from typing import Any, Iterable, Mapping

from ..graph.scope import compute_scoped_dataset, scoped_dataset_for_actor
from .access import Actor
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .index import IndexFactory, IndexGeneration, IndexStore, default_index_factory
from .query import run_query
from .tokenize import normalize_whitespace
from .types import QueryOptions, QueryResult


class SearchEngine:
    """Index, scope and query one in-memory dataset."""

    def __init__(
        self,
        index_factory: IndexFactory = default_index_factory,
        defaults: SearchConfig = DEFAULT_SEARCH_CONFIG,
    ):
        self.store = IndexStore(index_factory)
        self.defaults = defaults

    def set_index_data(
        self,
        dataset: Mapping[str, Any] | None,
        configuration: SearchConfig | Mapping[str, Any] | None = None,
        actor: Actor | Mapping[str, Any] | None = None,
    ) -> IndexGeneration:
        """Rebuild every index; returns once the new generation is live.

        A mapping configuration inherits the engine's schema and tunables.
        """
        if not isinstance(configuration, SearchConfig):
            configuration = SearchConfig.from_mapping(
                configuration,
                schema=self.defaults.schema,
                **self.defaults.tunables(),
            )
        return self.store.set_index_data(dataset, configuration, actor)

    def query(
        self,
        text: str | None,
        options: QueryOptions | None = None,
        **kwargs: Any,
    ) -> QueryResult:
        """Search the current generation.

        Keyword arguments are shorthand for `QueryOptions` fields and override
        the matching fields of `options` when both are given. Raises
        `SearchNotInitializedError` when no data has been indexed yet.
        """
        if options is None:
            options = QueryOptions(**kwargs)
        elif kwargs:
            options = replace(options, **kwargs)

        generation = self.store.peek()
        config = generation.config if generation is not None else self.defaults

        normalized = normalize_whitespace(text)
        if len(normalized) < config.min_query_length:
            return QueryResult(normalized_query=normalized)

        return run_query(self.store.current(), normalized, options)

    def compute_scoped_dataset(
        self,
        dataset: Mapping[str, Any],
        scope_root_ids: Iterable[str] | None,
        *,
        max_depth: int = 1,
        allowed_edge_types: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        return compute_scoped_dataset(
            dataset,
            scope_root_ids,
            max_depth=max_depth,
            allowed_edge_types=allowed_edge_types,
            schema=self.defaults.schema,
        )

    def scoped_dataset_for_actor(
        self,
        dataset: Mapping[str, Any],
        actor: Actor | Mapping[str, Any] | None,
        *,
        max_depth: int = 1,
        allowed_edge_types: Iterable[str] | None = None,
    ) -> Mapping[str, Any]:
        if actor is not None and not isinstance(actor, Actor):
            actor = Actor.from_mapping(actor)
        return scoped_dataset_for_actor(
            dataset,
            actor,
            max_depth=max_depth,
            allowed_edge_types=allowed_edge_types,
            schema=self.defaults.schema,
        )
