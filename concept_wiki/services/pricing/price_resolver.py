"""
Price resolution — tiered lookup of an indicative price for a service leaf.

Evaluation order (first success wins):
  1. ExactL3  — Level 3 row whose Service equals the service name
  2. ExactL2  — Level 2 row whose Service equals the service type name
  3. FuzzyL3  — best fuzzy Level 3 row for the service name
  4. FuzzyL2  — best fuzzy Level 2 row for the service type name
  5. None     — no price available (never a zero price)

An exact hit always pre-empts a fuzzy one, even when the fuzzy candidate
scores higher. Among equal exact rows the first row in the table wins.

PriceTable indexes the reference rows by level once; resolve_price() is a
pure read against it and safe to call for every visible row on every query.
"""

import logging
from typing import Iterable, Optional, Union

from concept_wiki.schemas.hierarchy import ServiceMeta
from concept_wiki.schemas.pricing import PriceLevel, PriceMatch, PriceMatchType, PriceRecord
from concept_wiki.services.errors import CatalogInputError, require_collection
from concept_wiki.services.hierarchy.nodes import LeafNode
from concept_wiki.services.matching.text_matcher import FuzzyIndex, normalize_text

logger = logging.getLogger(__name__)


class PriceTable:
    """
    The price reference, indexed per level for exact and fuzzy lookups.

    Usage:
        table = PriceTable(price_records)
        match = resolve_price(leaf, table)
    """

    def __init__(
        self,
        price_records: Iterable[PriceRecord],
        min_similarity: Optional[float] = None,
    ):
        records = require_collection(price_records, "price_records")
        self.records: tuple[PriceRecord, ...] = tuple(records)

        self._exact: dict[int, dict[str, PriceRecord]] = {
            PriceLevel.SERVICE: {},
            PriceLevel.SERVICE_TYPE: {},
        }
        by_level: dict[int, list[PriceRecord]] = {
            PriceLevel.SERVICE: [],
            PriceLevel.SERVICE_TYPE: [],
        }
        for record in self.records:
            if record.level not in by_level:
                continue
            by_level[record.level].append(record)
            key = normalize_text(record.service)
            if key:
                self._exact[record.level].setdefault(key, record)

        self._fuzzy: dict[int, FuzzyIndex[PriceRecord]] = {
            level: FuzzyIndex(rows, key=lambda r: r.service, min_similarity=min_similarity)
            for level, rows in by_level.items()
        }

        skipped = len(self.records) - sum(len(rows) for rows in by_level.values())
        if skipped:
            logger.warning(
                "Price table: %d rows ignored (level is neither 2 nor 3)", skipped
            )
        logger.debug(
            "Price table indexed: %d service rows, %d service type rows",
            len(by_level[PriceLevel.SERVICE]),
            len(by_level[PriceLevel.SERVICE_TYPE]),
        )

    def __len__(self) -> int:
        return len(self.records)

    def exact(self, level: int, name: Optional[str]) -> Optional[PriceRecord]:
        key = normalize_text(name)
        if not key:
            return None
        return self._exact.get(level, {}).get(key)

    def fuzzy(self, level: int, name: Optional[str]):
        index = self._fuzzy.get(level)
        if index is None:
            return None
        return index.best(name)

    def resolve(self, meta: ServiceMeta) -> Optional[PriceMatch]:
        service_name = meta.service_text
        type_name = meta.service_type_text

        # ── Tier 1 & 2: exact ────────────────────────────────────────────────
        record = self.exact(PriceLevel.SERVICE, service_name)
        if record is not None:
            return self._found(meta, PriceMatch.from_record(record, PriceMatchType.EXACT_L3))

        record = self.exact(PriceLevel.SERVICE_TYPE, type_name)
        if record is not None:
            return self._found(meta, PriceMatch.from_record(record, PriceMatchType.EXACT_L2))

        # ── Tier 3 & 4: fuzzy ────────────────────────────────────────────────
        match = self.fuzzy(PriceLevel.SERVICE, service_name)
        if match is not None:
            return self._found(
                meta,
                PriceMatch.from_record(match.candidate, PriceMatchType.FUZZY_L3, match.score),
            )

        match = self.fuzzy(PriceLevel.SERVICE_TYPE, type_name)
        if match is not None:
            return self._found(
                meta,
                PriceMatch.from_record(match.candidate, PriceMatchType.FUZZY_L2, match.score),
            )

        logger.debug("No price for service %r (type %r)", service_name, type_name)
        return None

    @staticmethod
    def _found(meta: ServiceMeta, match: PriceMatch) -> PriceMatch:
        logger.debug(
            "Price for service %r: %s -> %r", meta.service_text, match.match_type, match.service
        )
        return match


def resolve_price(
    leaf: Union[LeafNode, ServiceMeta],
    price_table: Union[PriceTable, Iterable[PriceRecord]],
) -> Optional[PriceMatch]:
    """
    Resolve the indicative price for a leaf (or its metadata).

    Pass a PriceTable built once per load; a plain record list is accepted
    but is re-indexed on every call.
    """
    if isinstance(leaf, LeafNode):
        meta = leaf.meta
    elif isinstance(leaf, ServiceMeta):
        meta = leaf
    else:
        raise CatalogInputError(
            f"resolve_price() expects a service leaf, got {type(leaf).__name__}"
        )

    table = price_table if isinstance(price_table, PriceTable) else PriceTable(price_table)
    return table.resolve(meta)
