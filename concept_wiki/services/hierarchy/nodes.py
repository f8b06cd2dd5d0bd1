"""
Hierarchy nodes — the catalog tree is Root → Group → Type → Service.

Branches hold an ordered child list; leaves hold ServiceMeta. Nodes carry no
parent pointers: ancestry is reconstructed per search pass and stored in
`lineage` on the derived (filtered) nodes only.
"""

from dataclasses import dataclass, field
from typing import Iterator, Union

from concept_wiki.schemas.hierarchy import ServiceMeta


class NodeKind:
    ROOT = "root"
    GROUP = "group"
    TYPE = "type"
    SERVICE = "svc"


ROOT_ID = "root"


def node_id(kind: str, source_id: object) -> str:
    """Composite id, unique per build: e.g. 'group:3', 'type:3/12', 'svc:3/12/104'."""
    return f"{kind}:{source_id}"


@dataclass
class BranchNode:
    id: str
    name: str
    kind: str  # root | group | type
    children: list["Node"] = field(default_factory=list)
    lineage: tuple["Node", ...] = field(default=(), repr=False, compare=False)

    @property
    def is_leaf(self) -> bool:
        return False


@dataclass
class LeafNode:
    id: str
    name: str
    meta: ServiceMeta
    lineage: tuple["Node", ...] = field(default=(), repr=False, compare=False)

    kind = NodeKind.SERVICE

    @property
    def is_leaf(self) -> bool:
        return True


Node = Union[BranchNode, LeafNode]


def iter_nodes(node: Node) -> Iterator[Node]:
    """Pre-order walk (node first, then children in display order)."""
    yield node
    if isinstance(node, BranchNode):
        for child in node.children:
            yield from iter_nodes(child)


def iter_leaves(node: Node) -> Iterator[LeafNode]:
    for candidate in iter_nodes(node):
        if isinstance(candidate, LeafNode):
            yield candidate
