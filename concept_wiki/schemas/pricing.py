"""
Price reference schemas.

PriceRecord is one row of the indicative price table. The numeric columns
arrive as display strings ("$55.00", "1,200") and are normalized to float
here, so the resolver only ever compares clean numbers.
"""

from typing import Annotated, Any, Optional

from pydantic import BeforeValidator, Field

from concept_wiki.schemas.catalog import Text
from concept_wiki.schemas.common import BaseSchema, RecordSchema, clean_str


def _to_amount(value: Any) -> Any:
    """Strip currency formatting; leave anything else for pydantic to reject."""
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("$", "").replace(" ", "")
        return cleaned or None
    return value


Amount = Annotated[Optional[float], BeforeValidator(_to_amount)]
Level = Annotated[Optional[int], BeforeValidator(clean_str)]


class PriceLevel:
    SERVICE_TYPE = 2  # priced per service type
    SERVICE = 3  # priced per individual service


class PriceMatchType:
    EXACT_L3 = "ExactL3"  # service name == Level 3 price row
    EXACT_L2 = "ExactL2"  # service type name == Level 2 price row
    FUZZY_L3 = "FuzzyL3"  # service name ~ Level 3 price row
    FUZZY_L2 = "FuzzyL2"  # service type name ~ Level 2 price row


class PriceRecord(RecordSchema):
    service: Text = Field(default=None, alias="Service")
    unit: Text = Field(default=None, alias="Unit")
    median: Amount = Field(default=None, alias="Median")
    min: Amount = Field(default=None, alias="Min")
    max: Amount = Field(default=None, alias="Max")
    level: Level = Field(default=None, alias="Level")


class PriceMatch(BaseSchema):
    """
    A resolved indicative price for one service leaf.

    similarity_score is only set for fuzzy tiers (0.0–1.0, higher is closer).
    """

    service: Optional[str]
    unit: Optional[str]
    median: Optional[float]
    min: Optional[float]
    max: Optional[float]
    level: int
    match_type: str  # ExactL3 | ExactL2 | FuzzyL3 | FuzzyL2
    similarity_score: Optional[float] = None

    @property
    def is_exact(self) -> bool:
        return self.match_type in (PriceMatchType.EXACT_L3, PriceMatchType.EXACT_L2)

    @classmethod
    def from_record(
        cls,
        record: PriceRecord,
        match_type: str,
        similarity_score: Optional[float] = None,
    ) -> "PriceMatch":
        return cls(
            service=record.service,
            unit=record.unit,
            median=record.median,
            min=record.min,
            max=record.max,
            level=record.level,
            match_type=match_type,
            similarity_score=similarity_score,
        )
