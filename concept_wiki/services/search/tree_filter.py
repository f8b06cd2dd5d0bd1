"""
Tree search / filter — derives a pruned copy of the catalog tree per query.

A Service leaf survives iff:
  1. every categorical filter is the wildcard ("All") or equals the leaf's
     metadata field exactly, AND
  2. the search term is blank, or occurs (case-insensitive substring) in the
     leaf name joined with every string anywhere inside its metadata —
     nested records and link lists included.

A branch survives iff at least one descendant leaf survives, or the query is
fully unconstrained (blank term, all filters wildcard), in which case the
whole tree comes back unpruned.

Every node of the derived tree carries `lineage`: the derived nodes from the
root down to and including itself. The canonical tree is never modified;
leaf metadata is shared with it, read-only.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel

from concept_wiki.services.errors import CatalogInputError
from concept_wiki.services.hierarchy.nodes import (
    BranchNode,
    LeafNode,
    Node,
    NodeKind,
    iter_leaves,
    iter_nodes,
)
from concept_wiki.settings import settings

logger = logging.getLogger(__name__)


# Categorical filters offered on the catalog: query attribute → metadata field
FILTER_FIELDS: dict[str, str] = {
    "service_group": "service_group_text",
    "service_type": "service_type_text",
    "contribution_category": "participant_contribution_category",
}


def _wildcard() -> str:
    return settings.filter_all_token


@dataclass(frozen=True)
class CatalogQuery:
    """One search/filter request against the published tree."""

    search_term: str = ""
    service_group: str = field(default_factory=_wildcard)
    service_type: str = field(default_factory=_wildcard)
    contribution_category: str = field(default_factory=_wildcard)

    def filters(self) -> dict[str, str]:
        """Metadata field → required value, for the three categorical filters."""
        return {
            meta_field: getattr(self, attribute)
            for attribute, meta_field in FILTER_FIELDS.items()
        }

    def apply(self, tree: Node, haystacks: Optional[Mapping[str, str]] = None) -> Optional[Node]:
        return filter_tree(tree, self.search_term, self.filters(), haystacks=haystacks)


# ── Deep text search ─────────────────────────────────────────────────────────


def flatten_strings(value: Any) -> list[str]:
    """Every string reachable inside value (models, mappings, sequences), in order."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, BaseModel):
        return flatten_strings(value.model_dump())
    if isinstance(value, Mapping):
        return [s for item in value.values() for s in flatten_strings(item)]
    if isinstance(value, (list, tuple)):
        return [s for item in value for s in flatten_strings(item)]
    return []


def leaf_haystack(leaf: LeafNode) -> str:
    """Lower-cased searchable text of a leaf: its name plus all metadata strings."""
    return " ".join([leaf.name, *flatten_strings(leaf.meta)]).casefold()


def build_haystacks(tree: Node) -> dict[str, str]:
    """Precompute leaf_haystack for every leaf; pass to filter_tree for speed."""
    return {leaf.id: leaf_haystack(leaf) for leaf in iter_leaves(tree)}


def normalize_term(search_term: Optional[str]) -> str:
    return (search_term or "").strip().casefold()


def is_unconstrained(search_term: Optional[str], filters: Optional[Mapping[str, str]]) -> bool:
    wildcard = settings.filter_all_token
    return not normalize_term(search_term) and all(
        value == wildcard for value in (filters or {}).values()
    )


# ── Filtering ────────────────────────────────────────────────────────────────


def filter_tree(
    tree: Node,
    search_term: Optional[str] = "",
    filters: Optional[Mapping[str, str]] = None,
    haystacks: Optional[Mapping[str, str]] = None,
) -> Optional[Node]:
    """
    Return the pruned, lineage-annotated copy of tree, or None when nothing
    survives (the root itself is pruned).

    filters maps a metadata field name to a required value; the wildcard
    token ("All" by default) disables that filter.
    """
    if not isinstance(tree, (BranchNode, LeafNode)):
        raise CatalogInputError(
            f"filter_tree() expects a hierarchy node, got {type(tree).__name__}"
        )

    term = normalize_term(search_term)
    active_filters = {
        name: value
        for name, value in (filters or {}).items()
        if value != settings.filter_all_token
    }
    keep_all = not term and not active_filters

    def leaf_survives(leaf: LeafNode) -> bool:
        for name, value in active_filters.items():
            if getattr(leaf.meta, name, None) != value:
                return False
        if not term:
            return True
        hay = haystacks.get(leaf.id) if haystacks is not None else None
        if hay is None:
            hay = leaf_haystack(leaf)
        return term in hay

    def prune(node: Node, ancestors: tuple) -> Optional[Node]:
        if isinstance(node, LeafNode):
            if not leaf_survives(node):
                return None
            derived = replace(node)
            derived.lineage = ancestors + (derived,)
            return derived

        derived = BranchNode(id=node.id, name=node.name, kind=node.kind)
        derived.lineage = ancestors + (derived,)
        for child in node.children:
            kept = prune(child, derived.lineage)
            if kept is not None:
                derived.children.append(kept)
        if derived.children or keep_all:
            return derived
        return None

    result = prune(tree, ())
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Filter term=%r filters=%r -> %d services",
            term,
            active_filters,
            0 if result is None else sum(1 for _ in iter_leaves(result)),
        )
    return result


# ── Navigation helpers ───────────────────────────────────────────────────────


def find_node(tree: Optional[Node], node_id: str) -> Optional[Node]:
    """Depth-first lookup by node id; None if absent."""
    if tree is None:
        return None
    for node in iter_nodes(tree):
        if node.id == node_id:
            return node
    return None


def lineage_prefix(node: Node, index: int) -> tuple[Node, tuple[Node, ...]]:
    """
    Jump to an ancestor from a breadcrumb: returns (ancestor, path to it).
    index counts from the root (0) to the node itself (len(lineage) - 1).
    """
    if not node.lineage:
        raise CatalogInputError(
            f"Node {node.id!r} has no lineage; only filtered trees carry one"
        )
    if not 0 <= index < len(node.lineage):
        raise CatalogInputError(
            f"Breadcrumb index {index} out of range for lineage of {len(node.lineage)}"
        )
    return node.lineage[index], node.lineage[: index + 1]


def name_matches(node: Node, search_term: Optional[str]) -> bool:
    """Whether the node's own name contains the search term (for row highlighting)."""
    term = (search_term or "").casefold()
    return bool(term) and term in node.name.casefold()


# ── Filter options ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FilterOptions:
    """Selectable values per categorical filter, wildcard first."""

    service_groups: list[str]
    service_types: list[str]
    contribution_categories: list[str]


def _with_wildcard(values: Iterable[Optional[str]]) -> list[str]:
    options = [settings.filter_all_token]
    seen = set(options)
    for value in values:
        if value is None or value in seen:
            continue
        seen.add(value)
        options.append(value)
    return options


def filter_options(tree: Optional[Node]) -> FilterOptions:
    """Distinct group names, type names and contribution categories, first-seen order."""
    if tree is None:
        return FilterOptions(_with_wildcard([]), _with_wildcard([]), _with_wildcard([]))

    nodes = list(iter_nodes(tree))
    return FilterOptions(
        service_groups=_with_wildcard(
            n.name for n in nodes if n.kind == NodeKind.GROUP
        ),
        service_types=_with_wildcard(
            n.name for n in nodes if n.kind == NodeKind.TYPE
        ),
        contribution_categories=_with_wildcard(
            leaf.meta.participant_contribution_category for leaf in iter_leaves(tree)
        ),
    )
