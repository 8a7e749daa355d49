"""Finished composition: the expanded tree plus its flat index."""

from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, Union

from composer.config import ComposerOptions
from composer.element import Element, discriminant_of
from composer.interfaces.reader import ICompositionReader, SegmentKey
from composer.query import SegmentQuery
from composer.segment import Segment, SegmentRef
from composer.tree import IndexEntry, NodeState, RenderTree, TreeNode


class Composition(ICompositionReader):
    """Result of ``Composer.compose``.

    Attributes:
        options: Options the composition was rendered with
        seed: Global seed used for rendering
    """

    def __init__(self, tree: RenderTree, options: ComposerOptions, seed: int):
        """Initialize composition.

        Args:
            tree: Fully expanded (every node visited) tree
            options: Composer options in effect
            seed: Global composition seed
        """
        if tree.root is None:
            raise ValueError("Composition tree has no root")
        self._tree = tree
        self.options = options
        self.seed = seed

    @property
    def root(self) -> Segment:
        return self._tree.root.segment

    def __len__(self) -> int:
        return len(self._tree)

    def __iter__(self) -> Iterator[Segment]:
        return self.segments()

    def segments(self) -> Iterator[Segment]:
        for node in self._tree.visited_nodes():
            yield node.segment

    def leaves(self) -> List[Segment]:
        """Return every segment without children, in tree order."""
        return [node.segment for node in self._tree.visited_nodes() if not node.children]

    def get(self, segment_id: int) -> Segment:
        return self._tree.node(segment_id).segment

    def children(self, segment: SegmentKey) -> List[Segment]:
        return [child.segment for child in self._node(segment).children]

    def parent(self, segment: SegmentKey) -> Optional[Segment]:
        parent = self._node(segment).parent
        return parent.segment if parent is not None else None

    def path(self, segment: SegmentKey) -> Tuple[int, ...]:
        return self._node(segment).path

    def depth(self, segment: SegmentKey) -> int:
        return self._node(segment).depth

    def node_state(self, segment: SegmentKey) -> NodeState:
        """Return a segment's expansion state.

        A segment whose renderer returned no children is EXPANDED_INTERNAL;
        only segments without a renderer are EXPANDED_LEAF. The distinction
        is kept in the persisted form.
        """
        return self._node(segment).state

    def entries(self, discriminant: Union[str, Type[Element]]) -> List[IndexEntry]:
        return [
            IndexEntry(segment=node.segment, path=node.path)
            for node in self._tree.indexed(discriminant_of(discriminant))
        ]

    @property
    def index(self) -> Dict[str, List[IndexEntry]]:
        """Flat index: every discriminant's segments in tree order."""
        return {d: self.entries(d) for d in self._tree.discriminants()}

    def find(self, target: Union[str, Type[Element]]) -> SegmentQuery:
        """Query the whole finished tree.

        Unlike context queries, no timing filter applies unless
        ``with_timing`` is called.
        """
        return SegmentQuery(self._tree, target)

    def to_dict(self) -> Dict[str, Any]:
        from composer.serialization import composition_to_dict

        return composition_to_dict(self)

    def to_json(self, indent: Optional[int] = None) -> str:
        from composer.serialization import composition_to_json

        return composition_to_json(self, indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Composition":
        from composer.serialization import composition_from_dict

        return composition_from_dict(data)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "Composition":
        from composer.serialization import composition_from_json

        return composition_from_json(text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Composition):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Composition(root={self.root.discriminant}, segments={len(self)}, "
            f"seed={self.seed})"
        )

    def _node(self, segment: SegmentKey) -> TreeNode:
        if isinstance(segment, (Segment, SegmentRef)):
            if segment.id is None:
                raise KeyError("Segment is not attached to a composition")
            node = self._tree.node(segment.id)
            if node.segment is not segment and isinstance(segment, Segment):
                raise KeyError(f"Segment {segment.id} belongs to another composition")
            return node
        return self._tree.node(segment)
