"""
Reference dataset records — the typed shapes the ingestion collaborators hand
to the engine.

Field aliases follow the published source files (camelCase JSON keys for the
service list and funding sources, capitalised CSV headers for the activity
catalogs), so a parsed row can be passed straight to `model_validate`.
Snake_case field names are accepted too.

Design principle: every text field is optional. Absent or blank text is
normalized to None and simply fails to match downstream — a record is never
rejected for missing text.
"""

from typing import Annotated, Any, Optional

from pydantic import BeforeValidator, ConfigDict, Field

from concept_wiki.schemas.common import RecordSchema, clean_str


def _as_list(value: Any) -> Any:
    return [] if value is None else value


Text = Annotated[Optional[str], BeforeValidator(clean_str)]


class NestedRecord(RecordSchema):
    """Nested collection entry; unknown source keys are kept for deep search."""

    model_config = ConfigDict(
        from_attributes=True, populate_by_name=True, frozen=True, extra="allow"
    )


# ── Service list ─────────────────────────────────────────────────────────────


class Classification(NestedRecord):
    classification_code: Text = Field(default=None, alias="classificationCode")
    classification_type: Text = Field(default=None, alias="classificationType")
    classification_text: Text = Field(default=None, alias="classificationText")


class Item(NestedRecord):
    item_id: Text = Field(default=None, alias="itemId")
    item_text: Text = Field(default=None, alias="itemText")


class WraparoundService(NestedRecord):
    wraparound_service_text: Text = Field(default=None, alias="wraparoundServiceText")


class ItemCategory(NestedRecord):
    item_category_text: Text = Field(default=None, alias="itemCategoryText")


class HealthProfessionalType(NestedRecord):
    health_professional_type_text: Text = Field(
        default=None, alias="healthProfessionalTypeText"
    )


class ServiceRecord(NestedRecord):
    """One row of the flat service catalog (group / type / service)."""

    service_group_id: Text = Field(default=None, alias="serviceGroupId")
    service_group_text: Text = Field(default=None, alias="serviceGroupText")
    service_type_id: Text = Field(default=None, alias="serviceTypeId")
    service_type_text: Text = Field(default=None, alias="serviceTypeText")
    service_id: Text = Field(default=None, alias="serviceId")
    service_text: Text = Field(default=None, alias="serviceText")
    participant_contribution_category: Text = Field(
        default=None, alias="participantContributionCategory"
    )
    unit_type: Text = Field(default=None, alias="unitType")

    classifications: Annotated[
        list[Classification], BeforeValidator(_as_list)
    ] = Field(default_factory=list)
    items: Annotated[list[Item], BeforeValidator(_as_list)] = Field(
        default_factory=list
    )
    wraparound_services: Annotated[
        list[WraparoundService], BeforeValidator(_as_list)
    ] = Field(default_factory=list, alias="wraparoundServices")
    item_categories: Annotated[
        list[ItemCategory], BeforeValidator(_as_list)
    ] = Field(default_factory=list, alias="itemCategories")
    health_professional_types: Annotated[
        list[HealthProfessionalType], BeforeValidator(_as_list)
    ] = Field(default_factory=list, alias="healthProfessionalTypes")


# ── Funding sources ──────────────────────────────────────────────────────────


class EntryCategory(NestedRecord):
    entry_category_code: Text = Field(default=None, alias="entryCategoryCode")
    entry_category_text: Text = Field(default=None, alias="entryCategoryText")


class FundingClassification(NestedRecord):
    classification_code: Text = Field(default=None, alias="classificationCode")
    classification_type: Text = Field(default=None, alias="classificationType")
    classification_text: Text = Field(default=None, alias="classificationText")


class BudgetClaimStep(NestedRecord):
    priority: int = 0
    budget_type_code: Text = Field(default=None, alias="budgetTypeCode")
    budget_type_text: Text = Field(default=None, alias="budgetTypeText")


class FundingSource(NestedRecord):
    funding_source_code: Text = Field(default=None, alias="fundingSourceCode")
    funding_source_text: Text = Field(default=None, alias="fundingSourceText")
    entry_categories: Annotated[
        list[EntryCategory], BeforeValidator(_as_list)
    ] = Field(default_factory=list, alias="entryCategories")
    classifications: Annotated[
        list[FundingClassification], BeforeValidator(_as_list)
    ] = Field(default_factory=list)
    budget_claiming_sequence: Annotated[
        list[BudgetClaimStep], BeforeValidator(_as_list)
    ] = Field(default_factory=list, alias="budgetClaimingSequence")

    def claiming_order(self) -> list[BudgetClaimStep]:
        """Budget types in the order they are drawn down (lowest priority first)."""
        return sorted(self.budget_claiming_sequence, key=lambda step: step.priority)

    def describe_claiming_order(self) -> str:
        """e.g. '1. Home Care Account → 2. Quarterly Budget'"""
        return " → ".join(
            f"{step.priority}. {step.budget_type_text or ''}".rstrip()
            for step in self.claiming_order()
        )


# ── Activity catalogs ────────────────────────────────────────────────────────


class ActivityScope:
    INCLUDED = "Included"
    EXCLUDED = "Excluded"


class ActivityRecord(NestedRecord):
    """
    One activity from the care-management or restorative catalog.
    Scope is only populated for restorative activities.
    """

    category: Text = Field(default=None, alias="Category")
    activity: Text = Field(default=None, alias="Activity")
    scope: Text = Field(default=None, alias="Scope")
