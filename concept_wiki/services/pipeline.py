"""
Catalog build pipeline.

Pipeline steps (run once per load of the reference datasets):
  1. Validate the input collections (None is a caller error)
  2. Build the Group → Type → Service tree
  3. Cross-link every leaf (funding sources, care and restorative activities)
  4. Index the price table by level
  5. Precompute per-leaf search text and the filter options
  6. Publish — the tree is read-only from here on

Query-time operations (search/filter, price lookup) run against the
PublishedCatalog and never modify it.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

from concept_wiki.schemas.catalog import ActivityRecord, FundingSource, ServiceRecord
from concept_wiki.schemas.pricing import PriceMatch, PriceRecord
from concept_wiki.services.errors import require_collection
from concept_wiki.services.hierarchy.builder import HierarchyBuilder
from concept_wiki.services.hierarchy.nodes import BranchNode, LeafNode, Node, iter_leaves
from concept_wiki.services.linking.cross_linker import CrossLinker
from concept_wiki.services.pricing.price_resolver import PriceTable
from concept_wiki.services.search.tree_filter import (
    CatalogQuery,
    FilterOptions,
    build_haystacks,
    filter_options,
    find_node,
)

logger = logging.getLogger(__name__)


@dataclass
class PublishedCatalog:
    """The built, linked tree plus the read-only indexes queries run against."""

    tree: BranchNode
    price_table: PriceTable
    options: FilterOptions
    duplicate_service_ids: list[str] = field(default_factory=list)
    _haystacks: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def leaf_count(self) -> int:
        return len(self._haystacks)

    def leaves(self) -> list[LeafNode]:
        return list(iter_leaves(self.tree))

    def find(self, node_id: str) -> Optional[Node]:
        return find_node(self.tree, node_id)

    def query(
        self,
        search_term: str = "",
        service_group: Optional[str] = None,
        service_type: Optional[str] = None,
        contribution_category: Optional[str] = None,
    ) -> Optional[Node]:
        """Filtered, lineage-annotated tree; None when nothing matches."""
        overrides = {
            name: value
            for name, value in (
                ("service_group", service_group),
                ("service_type", service_type),
                ("contribution_category", contribution_category),
            )
            if value is not None
        }
        return self.run(CatalogQuery(search_term=search_term, **overrides))

    def run(self, query: CatalogQuery) -> Optional[Node]:
        return query.apply(self.tree, haystacks=self._haystacks)

    def price_for(self, leaf: LeafNode) -> Optional[PriceMatch]:
        return self.price_table.resolve(leaf.meta)


def build_catalog(
    service_records: Iterable[ServiceRecord],
    funding_sources: Iterable[FundingSource],
    care_activities: Iterable[ActivityRecord],
    restorative_activities: Iterable[ActivityRecord],
    price_records: Iterable[PriceRecord],
    root_name: Optional[str] = None,
    min_similarity: Optional[float] = None,
) -> PublishedCatalog:
    """
    Build, link and index the catalog in one synchronous pass.

    Args:
        service_records:        Flat service list, in display order.
        funding_sources:        Funding source reference.
        care_activities:        Care-management activity catalog.
        restorative_activities: Restorative activity catalog.
        price_records:          Indicative price table.
        root_name:              Override for the root node name.
        min_similarity:         Override for the fuzzy threshold (0.0–1.0).

    Raises:
        CatalogInputError: If any collection is None.
    """
    started = time.perf_counter()

    # ── Validate inputs ───────────────────────────────────────────────────────
    services = require_collection(service_records, "service_records")
    funding = require_collection(funding_sources, "funding_sources")
    care = require_collection(care_activities, "care_activities")
    restorative = require_collection(restorative_activities, "restorative_activities")
    prices = require_collection(price_records, "price_records")

    logger.info(
        "Starting catalog build: %d services, %d funding sources, "
        "%d care activities, %d restorative activities, %d price rows",
        len(services),
        len(funding),
        len(care),
        len(restorative),
        len(prices),
    )

    # ── Build → link → index ──────────────────────────────────────────────────
    builder = HierarchyBuilder(root_name=root_name)
    tree = builder.build(services)

    linker = CrossLinker(funding, care, restorative, min_similarity=min_similarity)
    linker.link(tree)

    price_table = PriceTable(prices, min_similarity=min_similarity)

    catalog = PublishedCatalog(
        tree=tree,
        price_table=price_table,
        options=filter_options(tree),
        duplicate_service_ids=list(builder.duplicate_service_ids),
        _haystacks=build_haystacks(tree),
    )

    logger.info(
        "Catalog published: %d services in %.1f ms",
        catalog.leaf_count,
        (time.perf_counter() - started) * 1000,
    )
    return catalog
