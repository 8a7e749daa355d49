"""Composition tree storage with a pre-order, per-discriminant index."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from composer.element import discriminant_of
from composer.segment import Segment


class NodeState(Enum):
    """Expansion state of a tree node."""

    PENDING = "pending"  # not yet expanded
    EXPANDED_LEAF = "expanded_leaf"  # no renderer registered, terminal
    EXPANDED_INTERNAL = "expanded_internal"  # renderer ran, children attached


@dataclass(eq=False)
class TreeNode:
    """A Segment's position in the composition tree.

    Attributes:
        segment: The attached segment
        seed: Seed for the node's random source
        parent: Enclosing node (None for the root)
        index: Position among the parent's children
        path: Sibling indices from the root down to this node
        children: Child nodes in insertion order
        state: Expansion state
        order: Pre-order visit position (None until visited)
        discriminants: Discriminants of every element in the segment's wrap chain
    """

    segment: Segment
    seed: int
    parent: Optional["TreeNode"] = None
    index: int = 0
    path: Tuple[int, ...] = ()
    children: List["TreeNode"] = field(default_factory=list)
    state: NodeState = NodeState.PENDING
    order: Optional[int] = None
    discriminants: Tuple[str, ...] = ()

    @property
    def id(self) -> int:
        return self.segment.id

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def visited(self) -> bool:
        return self.order is not None

    def ancestors(self) -> Iterator["TreeNode"]:
        """Yield enclosing nodes, nearest first."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def is_descendant_of(self, other: "TreeNode") -> bool:
        """Check whether ``other`` is this node or one of its ancestors."""
        return other is self or any(a is other for a in self.ancestors())


@dataclass(frozen=True)
class IndexEntry:
    """A segment together with its position in the tree."""

    segment: Segment
    path: Tuple[int, ...]


class RenderTree:
    """Rooted tree of attached segments.

    Nodes are indexed by id on attachment, and by every discriminant of their
    wrap chain when visited, so the per-discriminant lists are always in
    pre-order.
    """

    def __init__(self) -> None:
        """Initialize an empty tree."""
        self.root: Optional[TreeNode] = None
        self._nodes: Dict[int, TreeNode] = {}
        self._visited: List[TreeNode] = []
        self._index: Dict[str, List[TreeNode]] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._nodes)

    def add(
        self,
        segment: Segment,
        parent: Optional[TreeNode],
        seed: int,
        segment_id: Optional[int] = None,
    ) -> TreeNode:
        """Attach a segment as the last child of ``parent`` (or as the root).

        Args:
            segment: Unattached segment to take ownership of
            parent: Parent node, or None for the root
            seed: Seed for the node's random source
            segment_id: Explicit id (when rebuilding a persisted tree);
                otherwise the next id in sequence

        Returns:
            The new pending node
        """
        if parent is None and self.root is not None:
            raise ValueError("Tree already has a root")

        if segment_id is None:
            segment_id = self._next_id
        if segment_id in self._nodes:
            raise ValueError(f"Duplicate segment id {segment_id}")
        self._next_id = max(self._next_id, segment_id + 1)

        discriminants = tuple(discriminant_of(e) for e in segment.element.element_chain())
        segment._attach(segment_id)

        if parent is None:
            node = TreeNode(segment=segment, seed=seed, discriminants=discriminants)
            self.root = node
        else:
            index = len(parent.children)
            node = TreeNode(
                segment=segment,
                seed=seed,
                parent=parent,
                index=index,
                path=parent.path + (index,),
                discriminants=discriminants,
            )
            parent.children.append(node)

        self._nodes[segment_id] = node
        return node

    def visit(self, node: TreeNode) -> None:
        """Record ``node`` as the next node in pre-order."""
        if node.visited:
            raise ValueError(f"Node {node.id} was already visited")
        node.order = len(self._visited)
        self._visited.append(node)
        for discriminant in node.discriminants:
            self._index.setdefault(discriminant, []).append(node)

    def node(self, segment_id: int) -> TreeNode:
        """Look up a node by segment id (raises KeyError)."""
        return self._nodes[segment_id]

    def visited_nodes(self, limit: Optional[int] = None) -> List[TreeNode]:
        """Return visited nodes in pre-order, optionally only those before ``limit``."""
        if limit is None:
            return list(self._visited)
        return self._visited[:limit]

    def indexed(self, discriminant: str, limit: Optional[int] = None) -> Iterator[TreeNode]:
        """Yield visited nodes of a discriminant in pre-order.

        Args:
            discriminant: Element discriminant (matched across wrap chains)
            limit: Only yield nodes whose visit order is below this value
        """
        for node in self._index.get(discriminant, ()):
            if limit is not None and node.order >= limit:
                break
            yield node

    def discriminants(self) -> List[str]:
        return list(self._index)
