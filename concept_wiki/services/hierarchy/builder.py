"""
HierarchyBuilder — folds the flat service catalog into Root → Group → Type → Service.

Single pass over the records:
  - first occurrence of a group id creates the Group branch
  - first occurrence of a type id within that group creates the Type branch
  - every service id within a type yields exactly one Service leaf

Children keep the first-seen order of their ids in the input.

Duplicate (group, type, service) keys: last write wins. The leaf keeps the
position of its first occurrence but its name and metadata are replaced by the
later record. The same service id under another group or type is a separate
leaf; its ids are scoped by group and type so they stay unique per build.
Each overwrite is logged and recorded in `duplicate_service_ids` so callers
can surface upstream data problems.

The id → node maps used here live only for the duration of one build; the
published tree holds plain child lists.
"""

import logging
from typing import Iterable, Optional

from concept_wiki.schemas.catalog import ServiceRecord
from concept_wiki.schemas.hierarchy import ServiceMeta
from concept_wiki.services.errors import require_collection
from concept_wiki.services.hierarchy.nodes import (
    ROOT_ID,
    BranchNode,
    LeafNode,
    NodeKind,
    node_id,
)
from concept_wiki.settings import settings

logger = logging.getLogger(__name__)


class HierarchyBuilder:
    """
    Usage:
        builder = HierarchyBuilder()
        root = builder.build(service_records)
        builder.duplicate_service_ids  # ids overwritten during the build
    """

    def __init__(
        self,
        root_name: Optional[str] = None,
        warn_on_duplicates: Optional[bool] = None,
    ):
        self.root_name = root_name if root_name is not None else settings.root_node_name
        self.warn_on_duplicates = (
            settings.warn_on_duplicate_service_ids
            if warn_on_duplicates is None
            else warn_on_duplicates
        )
        self.duplicate_service_ids: list[str] = []

    def build(self, service_records: Iterable[ServiceRecord]) -> BranchNode:
        records = require_collection(service_records, "service_records")
        self.duplicate_service_ids = []

        root = BranchNode(id=ROOT_ID, name=self.root_name, kind=NodeKind.ROOT)
        groups: dict[Optional[str], BranchNode] = {}
        types: dict[tuple[Optional[str], Optional[str]], BranchNode] = {}
        leaves: dict[tuple[Optional[str], Optional[str], Optional[str]], LeafNode] = {}

        for record in records:
            group = groups.get(record.service_group_id)
            if group is None:
                group = BranchNode(
                    id=node_id(NodeKind.GROUP, record.service_group_id),
                    name=record.service_group_text or "",
                    kind=NodeKind.GROUP,
                )
                groups[record.service_group_id] = group
                root.children.append(group)

            type_key = (record.service_group_id, record.service_type_id)
            service_type = types.get(type_key)
            if service_type is None:
                # Type ids are only unique within their group
                service_type = BranchNode(
                    id=node_id(
                        NodeKind.TYPE,
                        f"{record.service_group_id}/{record.service_type_id}",
                    ),
                    name=record.service_type_text or "",
                    kind=NodeKind.TYPE,
                )
                types[type_key] = service_type
                group.children.append(service_type)

            meta = ServiceMeta.from_record(record)
            leaf_key = (record.service_group_id, record.service_type_id, record.service_id)
            existing = leaves.get(leaf_key)
            if existing is not None:
                self._record_duplicate(record, existing)
                existing.name = record.service_text or ""
                existing.meta = meta
                continue

            leaf = LeafNode(
                id=node_id(
                    NodeKind.SERVICE,
                    f"{record.service_group_id}/{record.service_type_id}/{record.service_id}",
                ),
                name=record.service_text or "",
                meta=meta,
            )
            leaves[leaf_key] = leaf
            service_type.children.append(leaf)

        logger.info(
            "Built service hierarchy: %d groups, %d types, %d services "
            "(%d duplicate ids overwritten)",
            len(groups),
            len(types),
            len(leaves),
            len(self.duplicate_service_ids),
        )
        return root

    def _record_duplicate(self, record: ServiceRecord, existing: LeafNode) -> None:
        self.duplicate_service_ids.append(str(record.service_id))
        if self.warn_on_duplicates:
            logger.warning(
                "Duplicate service id %r: %r replaces %r (last write wins)",
                record.service_id,
                record.service_text,
                existing.name,
            )


def build_hierarchy(
    service_records: Iterable[ServiceRecord], root_name: Optional[str] = None
) -> BranchNode:
    """Build the base catalog tree (no cross-links yet)."""
    return HierarchyBuilder(root_name=root_name).build(service_records)
