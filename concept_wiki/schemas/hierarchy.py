"""
Leaf metadata schemas — what a Service leaf carries once the catalog is built.

ServiceMeta starts as a copy of the ServiceRecord with empty link lists. It is
frozen like every record: the CrossLinker swaps in a linked copy per leaf, and
filtered trees share that copy with the canonical tree.
"""

from typing import Optional

from pydantic import Field

from concept_wiki.schemas.catalog import ActivityRecord, Item, ServiceRecord
from concept_wiki.schemas.common import RecordSchema


class FundingLink(RecordSchema):
    """
    A funding source reached from a service leaf.
    Exactly one of the matched_* fields is set, naming the rule that fired.
    """

    funding_source_text: Optional[str] = None
    matched_entry_category_text: Optional[str] = None
    matched_classification_text: Optional[str] = None


class ServiceMeta(ServiceRecord):
    funding_links: list[FundingLink] = Field(default_factory=list)
    care_activity_links: list[ActivityRecord] = Field(default_factory=list)
    restorative_activity_links: list[ActivityRecord] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: ServiceRecord) -> "ServiceMeta":
        """Seed leaf metadata from a catalog row; link lists start empty."""
        return cls.model_validate(record.model_dump())

    def unique_items(self) -> list[Item]:
        """Items de-duplicated by text (first wins); items without text dropped."""
        seen: set[str] = set()
        unique = []
        for item in self.items:
            text = item.item_text
            if not text or text in seen:
                continue
            seen.add(text)
            unique.append(item)
        return unique
