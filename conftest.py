"""Shared fixtures: small regulatory-affairs and company datasets."""

import pytest


@pytest.fixture
def ra_dataset() -> dict:
    """Assets A1 -> A2 -> A3 chained, A9 isolated, with dependent records."""
    return {
        "assets": [
            {
                "id": "A1",
                "name": "Riverside Plant",
                "category": "plant",
                "code": "RP-01",
                "connections": [{"id": "A2", "type": "supplies"}],
            },
            {
                "id": "A2",
                "name": "Harbor Warehouse",
                "category": "warehouse",
                "code": "HW-02",
                "connections": [{"id": "A3", "type": "ships_to"}],
            },
            {"id": "A3", "name": "Northern Clinic", "category": "plant", "code": "NC-03"},
            {"id": "A9", "name": "Isolated Depot", "category": "warehouse", "code": "ID-09"},
        ],
        "regulatory_affairs": [
            {
                "id": "RA1",
                "assetId": "A1",
                "name": "Sanitary License",
                "type": "license",
                "authority": "Health Ministry",
            },
            {"id": "RA3", "assetId": "A3", "name": "Pharmacy Permit", "type": "permit"},
            {"id": "RA9", "assetId": "A9", "name": "Storage Permit", "type": "permit"},
        ],
        "renewals": [
            {
                "id": "RN1",
                "affairId": "RA1",
                "name": "Sanitary License Renewal 2025",
                "responsiblePerson": "Dana Ruiz",
            },
            {"id": "RN9", "affairId": "RA9", "name": "Storage Permit Renewal"},
        ],
        "attachments": [
            {"id": "AT1", "renewalId": "RN1", "name": "Inspection Report"},
            {"id": "AT2", "assetId": "A1", "name": "Floor Plan"},
            {"id": "AT9", "renewalId": "RN9", "name": "Storage Inspection"},
            {"id": "ATX", "renewalId": "RN404", "name": "Orphan Inspection Memo"},
        ],
        "metadata": {"business": "demo"},
    }


@pytest.fixture
def company_dataset() -> dict:
    return {
        "assets": [
            {"id": "X1", "name": "Blue Ocean Partners", "category": "company"},
            {"id": "X2", "name": "Ocean View Trading", "category": "company"},
            {"id": "B1", "name": "Ocean Board Seat", "category": "board_seat"},
            {"id": "F1", "name": "Harbor Ocean Fund", "category": "fund"},
        ],
        "aliases": [
            {"id": "AL1", "code": "ACM", "ownerId": "X1"},
            {"id": "AL2", "code": "OCEAN1", "ownerId": "X1"},
            {"id": "AL3", "code": "HOFX", "ownerId": "F1"},
        ],
    }


@pytest.fixture
def company_config() -> dict:
    return {
        "entities": {
            "company": {"search_fields": ["name"]},
            "board_seat": {"search_fields": ["name"]},
        },
        "search": {
            "collection_types": ["assets"],
            "searchable_categories": ["company", "board_seat"],
            "role_restrictions": {"board_seat": ["admin"]},
            "alias_search": {
                "enabled": True,
                "target_category": "company",
                "collection": "aliases",
                "owner_field": "ownerId",
                "search_fields": ["code"],
                "display_fields": ["code"],
            },
        },
    }
