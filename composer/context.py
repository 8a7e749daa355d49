"""Per-render query and randomness facade."""

import numbers
from typing import Hashable, Type, TypeVar, Union

import numpy as np

from composer.element import Element
from composer.query import SegmentQuery
from composer.seeding import derive_seed, make_rng
from composer.segment import SegmentRef
from composer.tree import RenderTree, TreeNode

E = TypeVar("E", bound=Element)


class CompositionContext:
    """Context handed to a Renderer alongside the segment it expands.

    Offers lookups over the part of the tree expanded so far, a random
    source seeded for the current node, and composition-wide constants.
    Visibility is a snapshot: only segments visited strictly before the
    current node in pre-order depth-first order can be found. Ancestors and
    earlier sibling subtrees are visible; later siblings, the current node
    and its own future children are not.

    A context is only valid for the duration of a single render call.
    """

    def __init__(self, tree: RenderTree, node: TreeNode, ticks_per_beat: int):
        """Initialize context for one node.

        Args:
            tree: Tree being composed
            node: Node being rendered (already visited)
            ticks_per_beat: Composition beat length in ticks
        """
        self._tree = tree
        self._node = node
        self._ticks_per_beat = ticks_per_beat

    def find(self, target: Union[str, Type[E]]) -> SegmentQuery[E]:
        """Start a lookup for segments of an element type (or discriminant)."""
        return SegmentQuery(self._tree, target, limit=self._node.order, origin=self._node)

    @property
    def beat_length(self) -> int:
        """Ticks per beat; a composition's tempo is relative to this value."""
        return self._ticks_per_beat

    @property
    def ticks_per_beat(self) -> int:
        return self._ticks_per_beat

    @property
    def seed(self) -> int:
        return self._node.seed

    @property
    def depth(self) -> int:
        return self._node.depth

    @property
    def segment(self) -> SegmentRef:
        """Untyped handle to the segment being rendered."""
        return self._node.segment.ref()

    def rng(self) -> np.random.Generator:
        """Create a random source seeded from the current node.

        Every call returns a new generator starting from the same state.
        """
        return make_rng(self._node.seed)

    def rng_with_seed(self, key: Hashable) -> np.random.Generator:
        """Create a random source seeded from the current node and ``key``.

        Args:
            key: Extra int or str mixed into the node seed
        """
        if not isinstance(key, (numbers.Integral, str)):
            key = repr(key)
        return make_rng(derive_seed(self._node.seed, key))
