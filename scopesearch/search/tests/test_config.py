"""Tests for configuration parsing and role-based category access."""

import logging

from scopesearch.search.access import Actor, accessible_categories
from scopesearch.search.config import DEFAULT_SEARCH_CONFIG, SearchConfig


def test_category_fields_fall_back_to_default():
    config = SearchConfig.from_mapping({"entities": {"company": {"search_fields": ["name"]}}})

    assert config.fields_for_category("company") == ("name",)
    assert config.fields_for_category("plant") == DEFAULT_SEARCH_CONFIG.schema.primary_search_fields


def test_alias_settings_override_schema(company_config):
    config = SearchConfig.from_mapping(company_config)

    assert config.alias_search.enabled is True
    assert config.alias_search.target_category == "company"
    assert config.schema.alias.key == "aliases"
    assert config.schema.alias.owner_field == "ownerId"
    assert config.schema.alias.display_fields == ("code",)
    assert config.alias_fields() == ("code",)


def test_malformed_values_degrade_to_defaults(caplog):
    with caplog.at_level(logging.WARNING, logger="scopesearch.search.config"):
        config = SearchConfig.from_mapping(
            {
                "entities": {"company": {"search_fields": 42}, "fund": "bad"},
                "search": {"role_restrictions": {"board_seat": 7}},
            }
        )

    assert config.category_fields == {}
    assert config.role_restrictions == {"board_seat": ()}
    assert config.searchable_categories is None
    assert "malformed" in caplog.text


def test_missing_configuration_is_default():
    config = SearchConfig.from_mapping(None)

    assert config.collection_enabled("renewals") is True
    assert config.alias_search.enabled is False


def test_collection_gating():
    config = SearchConfig.from_mapping({"search": {"collection_types": ["assets"]}})

    assert config.collection_enabled("assets") is True
    assert config.collection_enabled("renewals") is False


class TestAccessibleCategories:
    def test_all_categories_when_none_declared(self):
        assert accessible_categories(DEFAULT_SEARCH_CONFIG, Actor()) is None

    def test_role_restricted_category_hidden_from_other_roles(self, company_config):
        config = SearchConfig.from_mapping(company_config)

        assert accessible_categories(config, Actor.from_mapping({"role": "analyst"})) == [
            "company"
        ]
        assert accessible_categories(config, None) == ["company"]

    def test_role_match_is_case_insensitive(self, company_config):
        config = SearchConfig.from_mapping(company_config)
        actor = Actor.from_mapping({"roles": ["Viewer", "ADMIN"]})

        assert accessible_categories(config, actor) == ["company", "board_seat"]


def test_actor_from_mapping():
    actor = Actor.from_mapping(
        {"id": 7, "role": "Attorney", "scopes": {"access_all": True}}
    )

    assert actor.id == "7"
    assert actor.roles == frozenset({"attorney"})
    assert actor.unrestricted is True
    assert actor.scoped is True
    assert actor.scope_root_ids == ()


def test_tunables_come_from_search_section():
    config = SearchConfig.from_mapping(
        {"search": {"page_limit": 50, "suggestion_limit": 5}},
        suggestion_limit=1,
        match_threshold=0.2,
    )

    assert config.page_limit == 50
    assert config.suggestion_limit == 5
    assert config.match_threshold == 0.2


def test_malformed_tunable_keeps_base_value(caplog):
    with caplog.at_level(logging.WARNING):
        config = SearchConfig.from_mapping({"search": {"page_limit": "many"}})

    assert config.page_limit == DEFAULT_SEARCH_CONFIG.page_limit
    assert "search.page_limit" in caplog.text
