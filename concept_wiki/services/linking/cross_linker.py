"""
CrossLinker — decorates every Service leaf with links into the reference datasets.

Per leaf:
  1. Funding links (rule-based, every source is checked):
       a. entry category  — leaf's participant contribution category contains
                            the entry category text (case-insensitive)
       b. classification  — at least one of the leaf's classifications contains
                            the funding classification text
     A source can be linked by both rules; both links are kept.
  2. Activity links (fuzzy): the leaf's service name is matched against the
     Activity text of the care-management catalog and, independently, of the
     restorative catalog. Top N of each are kept (N = activity_link_limit).

Each activity catalog is indexed once per linker, not once per leaf.
Linking replaces the link lists wholesale, so re-running with the same
inputs yields identical metadata.
"""

import logging
from typing import Iterable, Optional

from concept_wiki.schemas.catalog import ActivityRecord, FundingSource
from concept_wiki.schemas.hierarchy import FundingLink, ServiceMeta
from concept_wiki.services.errors import CatalogInputError, require_collection
from concept_wiki.services.hierarchy.nodes import BranchNode, LeafNode, Node, iter_leaves
from concept_wiki.services.matching.text_matcher import FuzzyIndex, contains_text
from concept_wiki.settings import settings

logger = logging.getLogger(__name__)


def funding_links_for(
    meta: ServiceMeta, funding_sources: Iterable[FundingSource]
) -> list[FundingLink]:
    """Apply the entry-category and classification rules for one leaf."""
    links: list[FundingLink] = []
    for source in funding_sources:
        for entry_category in source.entry_categories:
            if contains_text(
                meta.participant_contribution_category,
                entry_category.entry_category_text,
            ):
                links.append(
                    FundingLink(
                        funding_source_text=source.funding_source_text,
                        matched_entry_category_text=entry_category.entry_category_text,
                    )
                )

        for classification in source.classifications:
            if any(
                contains_text(
                    service_classification.classification_text,
                    classification.classification_text,
                )
                for service_classification in meta.classifications
            ):
                links.append(
                    FundingLink(
                        funding_source_text=source.funding_source_text,
                        matched_classification_text=classification.classification_text,
                    )
                )
    return links


class CrossLinker:
    """
    Usage:
        linker = CrossLinker(funding_sources, care_activities, restorative_activities)
        linker.link(tree)
    """

    def __init__(
        self,
        funding_sources: Iterable[FundingSource],
        care_activities: Iterable[ActivityRecord],
        restorative_activities: Iterable[ActivityRecord],
        min_similarity: Optional[float] = None,
        activity_limit: Optional[int] = None,
    ):
        self.funding_sources = require_collection(funding_sources, "funding_sources")
        self.activity_limit = (
            settings.activity_link_limit if activity_limit is None else activity_limit
        )
        self._care_index = FuzzyIndex(
            require_collection(care_activities, "care_activities"),
            key=lambda activity: activity.activity,
            min_similarity=min_similarity,
        )
        self._restorative_index = FuzzyIndex(
            require_collection(restorative_activities, "restorative_activities"),
            key=lambda activity: activity.activity,
            min_similarity=min_similarity,
        )

    def link(self, tree: Node) -> Node:
        """Give every leaf a linked (frozen) copy of its metadata; returns the same tree."""
        if not isinstance(tree, (BranchNode, LeafNode)):
            raise CatalogInputError(
                f"link() expects a hierarchy node, got {type(tree).__name__}"
            )

        leaf_count = 0
        funding_count = 0
        activity_count = 0
        for leaf in iter_leaves(tree):
            self.link_leaf(leaf)
            leaf_count += 1
            funding_count += len(leaf.meta.funding_links)
            activity_count += len(leaf.meta.care_activity_links) + len(
                leaf.meta.restorative_activity_links
            )

        logger.info(
            "Cross-linked %d services: %d funding links, %d activity links",
            leaf_count,
            funding_count,
            activity_count,
        )
        return tree

    def link_leaf(self, leaf: LeafNode) -> None:
        meta = leaf.meta
        leaf.meta = meta.model_copy(
            update={
                "funding_links": funding_links_for(meta, self.funding_sources),
                "care_activity_links": self._match_activities(self._care_index, leaf.name),
                "restorative_activity_links": self._match_activities(
                    self._restorative_index, leaf.name
                ),
            }
        )

    def _match_activities(
        self, index: FuzzyIndex[ActivityRecord], service_name: str
    ) -> list[ActivityRecord]:
        return [m.candidate for m in index.search(service_name, limit=self.activity_limit)]


def link_tree(
    tree: Node,
    funding_sources: Iterable[FundingSource],
    care_activities: Iterable[ActivityRecord],
    restorative_activities: Iterable[ActivityRecord],
) -> Node:
    """Cross-link every leaf of an already-built tree (in place)."""
    linker = CrossLinker(funding_sources, care_activities, restorative_activities)
    return linker.link(tree)
