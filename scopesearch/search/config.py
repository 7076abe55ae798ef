"""Configuration for scoped entity search."""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from ..graph.schema import DEFAULT_SCHEMA, AliasCollection, DatasetSchema

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AliasSearchConfig:
    """Resolve hits in the alias collection back to their owning record."""

    enabled: bool = False
    target_category: str | None = None
    search_fields: tuple[str, ...] | None = None


TUNABLE_FIELDS = (
    "min_query_length",
    "match_threshold",
    "min_match_chars",
    "suggestion_limit",
    "page_limit",
    "slow_query_ms",
)


@dataclass(frozen=True)
class SearchConfig:
    """Constants and resolved settings controlling indexing and querying."""

    schema: DatasetSchema = DEFAULT_SCHEMA

    # category -> configured search fields
    category_fields: dict[str, tuple[str, ...]] = field(default_factory=dict)
    searchable_categories: tuple[str, ...] | None = None
    role_restrictions: dict[str, tuple[str, ...]] = field(default_factory=dict)
    collection_types: tuple[str, ...] | None = None
    alias_search: AliasSearchConfig = field(default_factory=AliasSearchConfig)

    min_query_length: int = 2
    match_threshold: float = 0.35
    min_match_chars: int = 2
    suggestion_limit: int = 3
    page_limit: int = 20
    slow_query_ms: float = 100.0

    def tunables(self) -> dict[str, Any]:
        """Numeric knobs, for carrying over onto a config parsed from a mapping."""
        return {name: getattr(self, name) for name in TUNABLE_FIELDS}

    def fields_for_category(self, category: str) -> tuple[str, ...]:
        """Configured fields for a category, or the generic primary list."""
        configured = self.category_fields.get(category)
        if configured:
            return configured
        return self.schema.primary_search_fields

    def alias_fields(self) -> tuple[str, ...]:
        return self.alias_search.search_fields or self.schema.alias.search_fields

    def collection_enabled(self, key: str) -> bool:
        """Whether configuration allows evaluating a collection at all."""
        if not self.collection_types:
            return True
        return key in self.collection_types

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any] | None,
        *,
        schema: DatasetSchema = DEFAULT_SCHEMA,
        **overrides: Any,
    ) -> "SearchConfig":
        """Build a config from a provider mapping.

        Expected shape::

            entities:
              company: {search_fields: [name, code]}
            search:
              collection_types: [assets]
              page_limit: 50
              searchable_categories: [company, board_seat]
              role_restrictions: {board_seat: [admin]}
              alias_search:
                enabled: true
                target_category: company
                collection: securities
                owner_field: entity_id
                search_fields: [ticker, isin]
                display_fields: [ticker]

        Numeric tunables such as `page_limit` may sit in the `search` section;
        they take precedence over the same names passed as keyword arguments.
        Malformed values are logged and replaced by defaults.
        """
        raw = raw if isinstance(raw, Mapping) else {}

        category_fields: dict[str, tuple[str, ...]] = {}
        entities = raw.get("entities") or {}
        if isinstance(entities, Mapping):
            for category, entity in entities.items():
                if not isinstance(entity, Mapping):
                    continue
                fields = _string_tuple(entity.get("search_fields"), f"entities.{category}")
                if fields:
                    category_fields[str(category)] = fields

        search = raw.get("search") or {}
        if not isinstance(search, Mapping):
            log.warning("Ignoring malformed 'search' configuration section")
            search = {}

        searchable = search.get("searchable_categories")
        searchable_categories = (
            _string_tuple(searchable, "search.searchable_categories")
            if searchable is not None
            else None
        )

        role_restrictions: dict[str, tuple[str, ...]] = {}
        restrictions = search.get("role_restrictions") or {}
        if isinstance(restrictions, Mapping):
            for category, roles in restrictions.items():
                allowed = _string_tuple(roles, f"search.role_restrictions.{category}")
                role_restrictions[str(category)] = tuple(r.lower() for r in allowed)

        tunables = dict(overrides)
        for name in TUNABLE_FIELDS:
            value = search.get(name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                log.warning(
                    f"Ignoring malformed configuration value at search.{name}: {value!r}"
                )
                continue
            tunables[name] = value

        collection_types = search.get("collection_types")
        if collection_types is not None:
            collection_types = (
                _string_tuple(collection_types, "search.collection_types") or None
            )

        alias_search = AliasSearchConfig()
        alias_raw = search.get("alias_search")
        if isinstance(alias_raw, Mapping):
            alias_fields = _string_tuple(
                alias_raw.get("search_fields"), "search.alias_search.search_fields"
            )
            alias_search = AliasSearchConfig(
                enabled=bool(alias_raw.get("enabled", False)),
                target_category=alias_raw.get("target_category"),
                search_fields=alias_fields or None,
            )
            display_fields = _string_tuple(
                alias_raw.get("display_fields"), "search.alias_search.display_fields"
            )
            if (
                alias_raw.get("collection")
                or alias_raw.get("owner_field")
                or display_fields
            ):
                schema = replace(
                    schema,
                    alias=AliasCollection(
                        key=str(alias_raw.get("collection") or schema.alias.key),
                        owner_field=str(
                            alias_raw.get("owner_field") or schema.alias.owner_field
                        ),
                        search_fields=schema.alias.search_fields,
                        display_fields=display_fields or schema.alias.display_fields,
                    ),
                )

        return cls(
            schema=schema,
            category_fields=category_fields,
            searchable_categories=searchable_categories,
            role_restrictions=role_restrictions,
            collection_types=collection_types,
            alias_search=alias_search,
            **tunables,
        )


def _string_tuple(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        log.warning(f"Ignoring malformed configuration value at {where}: {value!r}")
        return ()
    return tuple(str(item) for item in value if item is not None and str(item).strip())


DEFAULT_SEARCH_CONFIG = SearchConfig()
