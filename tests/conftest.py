"""
Test fixtures and shared setup.

Every fixture is an in-memory record collection shaped like the published
source files (camelCase keys for the JSON datasets, capitalised headers for
the CSV ones). Nothing here touches the filesystem or the network.
"""

import os

import pytest

# ── Override settings BEFORE importing engine modules ─────────────────────────
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from concept_wiki.schemas.catalog import ActivityRecord, FundingSource, ServiceRecord
from concept_wiki.schemas.pricing import PriceRecord
from concept_wiki.services.hierarchy.builder import build_hierarchy
from concept_wiki.services.linking.cross_linker import link_tree


SERVICE_ROWS = [
    {
        "serviceGroupId": 1,
        "serviceGroupText": "Everyday Living",
        "serviceTypeId": 10,
        "serviceTypeText": "Domestic assistance",
        "serviceId": 100,
        "serviceText": "Domestic Assistance",
        "participantContributionCategory": "Independence",
        "unitType": "Hour",
        "classifications": [
            {"classificationType": "Ongoing", "classificationText": "Everyday living support"}
        ],
        "items": [
            {"itemText": "Vacuum cleaner"},
            {"itemText": "Vacuum cleaner"},
            {"itemText": "  "},
        ],
    },
    {
        "serviceGroupId": 1,
        "serviceGroupText": "Everyday Living",
        "serviceTypeId": 10,
        "serviceTypeText": "Domestic assistance",
        "serviceId": 101,
        "serviceText": "Laundry services",
        "participantContributionCategory": "Everyday Living",
        "unitType": "Hour",
    },
    {
        "serviceGroupId": 1,
        "serviceGroupText": "Everyday Living",
        "serviceTypeId": 11,
        "serviceTypeText": "Meals",
        "serviceId": 110,
        "serviceText": "Meal preparation",
        "participantContributionCategory": "Everyday Living",
        "unitType": "Hour",
    },
    {
        "serviceGroupId": 2,
        "serviceGroupText": "Clinical Supports",
        "serviceTypeId": 20,
        "serviceTypeText": "Nursing care",
        "serviceId": 200,
        "serviceText": "Nursing care",
        "participantContributionCategory": "Clinical Care Supports",
        "unitType": "Hour",
        "classifications": [
            {"classificationType": "Ongoing", "classificationText": "Clinical care"}
        ],
        "healthProfessionalTypes": [{"healthProfessionalTypeText": "Registered nurse"}],
    },
    {
        "serviceGroupId": 2,
        "serviceGroupText": "Clinical Supports",
        "serviceTypeId": 21,
        "serviceTypeText": "Allied health and therapy",
        "serviceId": 210,
        "serviceText": "Physiotherapy",
        "participantContributionCategory": "Clinical Care Supports",
        "unitType": "Hour",
        "wraparoundServices": [{"wraparoundServiceText": "Transport to appointments"}],
    },
]

FUNDING_ROWS = [
    {
        "fundingSourceCode": "ON",
        "fundingSourceText": "Ongoing services",
        "entryCategories": [{"entryCategoryCode": "CC", "entryCategoryText": "Clinical Care"}],
        "classifications": [
            {
                "classificationCode": "ON-CL",
                "classificationType": "Ongoing",
                "classificationText": "Clinical care",
            }
        ],
        "budgetClaimingSequence": [
            {"priority": 2, "budgetTypeCode": "QB", "budgetTypeText": "Quarterly budget"},
            {"priority": 1, "budgetTypeCode": "HCA", "budgetTypeText": "Home Care Account"},
        ],
    },
    {
        "fundingSourceCode": "RS",
        "fundingSourceText": "Restorative Care Pathway",
        "entryCategories": [{"entryCategoryCode": "IN", "entryCategoryText": "Independence"}],
        "classifications": [],
        "budgetClaimingSequence": [],
    },
]

CARE_ROWS = [
    {"Category": "Care planning", "Activity": "Develop a care plan"},
    {"Category": "Clinical", "Activity": "Coordinate nursing care"},
    {"Category": "Home", "Activity": "Arrange domestic assistance"},
]

RESTORATIVE_ROWS = [
    {"Category": "Mobility", "Activity": "Physiotherapy sessions", "Scope": "Included"},
    {"Category": "Mobility", "Activity": "Gym membership", "Scope": "Excluded"},
]

PRICE_ROWS = [
    {"Service": "Domestic Assistance", "Unit": "Hour", "Median": "$55.00", "Min": "$45.00", "Max": "$70.00", "Level": "3"},
    {"Service": "Nursing care", "Unit": "Hour", "Median": "$110.00", "Min": "$90.00", "Max": "$140.00", "Level": "2"},
    {"Service": "Meals", "Unit": "Meal", "Median": "$12.50", "Min": "$9.00", "Max": "$18.00", "Level": "2"},
]


# ── Record fixtures ────────────────────────────────────────────────────────────


@pytest.fixture
def service_records() -> list[ServiceRecord]:
    return [ServiceRecord.model_validate(row) for row in SERVICE_ROWS]


@pytest.fixture
def funding_sources() -> list[FundingSource]:
    return [FundingSource.model_validate(row) for row in FUNDING_ROWS]


@pytest.fixture
def care_activities() -> list[ActivityRecord]:
    return [ActivityRecord.model_validate(row) for row in CARE_ROWS]


@pytest.fixture
def restorative_activities() -> list[ActivityRecord]:
    return [ActivityRecord.model_validate(row) for row in RESTORATIVE_ROWS]


@pytest.fixture
def price_records() -> list[PriceRecord]:
    return [PriceRecord.model_validate(row) for row in PRICE_ROWS]


# ── Tree fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def base_tree(service_records):
    """Built but not yet cross-linked."""
    return build_hierarchy(service_records)


@pytest.fixture
def linked_tree(service_records, funding_sources, care_activities, restorative_activities):
    tree = build_hierarchy(service_records)
    return link_tree(tree, funding_sources, care_activities, restorative_activities)


@pytest.fixture
def leaves_by_id(linked_tree):
    from concept_wiki.services.hierarchy.nodes import iter_leaves

    return {leaf.meta.service_id: leaf for leaf in iter_leaves(linked_tree)}
