# Re-export the record types so callers can import them from one place
from concept_wiki.schemas.catalog import (  # noqa: F401
    ActivityRecord,
    ActivityScope,
    BudgetClaimStep,
    Classification,
    EntryCategory,
    FundingClassification,
    FundingSource,
    HealthProfessionalType,
    Item,
    ItemCategory,
    ServiceRecord,
    WraparoundService,
)
from concept_wiki.schemas.hierarchy import FundingLink, ServiceMeta  # noqa: F401
from concept_wiki.schemas.pricing import PriceLevel, PriceMatch, PriceMatchType, PriceRecord  # noqa: F401
