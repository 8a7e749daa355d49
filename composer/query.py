"""Segment queries over a (possibly partial) composition tree."""

from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from composer.element import Element, discriminant_of, get_element_type
from composer.exceptions import NotFoundError, UnknownElementError
from composer.segment import SegmentRef
from composer.timing import Timing, TimingRelation
from composer.tree import RenderTree, TreeNode

E = TypeVar("E", bound=Element)

_WITHIN = "within"
_WITHIN_ANCESTOR = "within_ancestor"


def _registered_type(discriminant: str) -> Optional[Type[Element]]:
    # Unregistered discriminants simply have no segments to match
    try:
        return get_element_type(discriminant)
    except UnknownElementError:
        return None


class SegmentQuery(Generic[E]):
    """Builder for segment lookups by element type, timing and tree scope.

    Created by ``CompositionContext.find`` (scoped to the tree expanded so
    far) or ``Composition.find`` (the whole final tree). Matches are returned
    in tree (pre-order) order.
    """

    def __init__(
        self,
        tree: RenderTree,
        target: Union[str, Type[E]],
        limit: Optional[int] = None,
        origin: Optional[TreeNode] = None,
    ):
        """Initialize a query.

        Args:
            tree: Tree to search
            target: Element type or discriminant to search for
            limit: Only nodes visited before this pre-order position are visible
            origin: Node on whose behalf the search runs (supplies default
                timing filters and the anchor for ``within_ancestor``)
        """
        self._tree = tree
        self._discriminant = discriminant_of(target)
        self._element_type: Optional[Type[E]] = (
            target if isinstance(target, type) else _registered_type(self._discriminant)
        )
        self._limit = limit
        self._origin = origin
        self._timing: Optional[Tuple[TimingRelation, Timing]] = None
        self._scope: Optional[Tuple[str, str]] = None
        self._predicate: Optional[Callable[[E], bool]] = None

    def with_timing(self, relation: TimingRelation, reference: Any) -> "SegmentQuery[E]":
        """Only match segments standing in ``relation`` to ``reference``.

        Args:
            relation: Timing relation the match must satisfy
            reference: Anything ``Timing.of`` accepts (Timing, SegmentRef, pair)
        """
        self._timing = (relation, Timing.of(reference))
        return self

    def within(self, element_type: Union[str, Type[Element]]) -> "SegmentQuery[E]":
        """Only match segments inside (or being) a segment of ``element_type``."""
        self._scope = (_WITHIN, discriminant_of(element_type))
        return self

    def within_ancestor(self, element_type: Union[str, Type[Element]]) -> "SegmentQuery[E]":
        """Only match descendants of the origin's outermost ``element_type`` ancestor."""
        self._scope = (_WITHIN_ANCESTOR, discriminant_of(element_type))
        return self

    def matching(self, predicate: Callable[[E], bool]) -> "SegmentQuery[E]":
        """Only match segments whose element satisfies ``predicate``."""
        self._predicate = predicate
        return self

    def get(self) -> Optional[SegmentRef[E]]:
        """Return the first match, or None."""
        for ref in self._search(TimingRelation.DURING):
            return ref
        return None

    def get_all(self) -> List[SegmentRef[E]]:
        """Return every match (possibly none)."""
        return list(self._search(TimingRelation.OVERLAPPING))

    def require(self) -> SegmentRef[E]:
        """Return the first match.

        Raises:
            NotFoundError: If nothing matches
        """
        ref = self.get()
        if ref is None:
            raise NotFoundError(self._discriminant)
        return ref

    def require_all(self) -> List[SegmentRef[E]]:
        """Return every match.

        Raises:
            NotFoundError: If nothing matches
        """
        return self.require_at_least(1)

    def require_at_least(self, count: int) -> List[SegmentRef[E]]:
        """Return every match, requiring at least ``count`` of them.

        Raises:
            NotFoundError: If fewer than ``count`` segments match
        """
        found = self.get_all()
        if len(found) < count:
            raise NotFoundError(
                self._discriminant, f"required at least {count}, found {len(found)}"
            )
        return found

    def _search(self, default_relation: TimingRelation) -> Iterator[SegmentRef[E]]:
        if self._element_type is None:
            return

        timing = self._timing
        if timing is None and self._origin is not None:
            timing = (default_relation, self._origin.segment.timing)

        anchor: Optional[TreeNode] = None
        if self._scope is not None and self._scope[0] == _WITHIN_ANCESTOR:
            anchor = self._ancestor_anchor(self._scope[1])
            if anchor is None:
                return

        for node in self._tree.indexed(self._discriminant, self._limit):
            if timing is not None and not timing[0].matches(node.segment.timing, timing[1]):
                continue
            if not self._in_scope(node, anchor):
                continue
            ref = SegmentRef.from_segment(node.segment, self._element_type)
            if self._predicate is not None and not self._predicate(ref.element):
                continue
            yield ref

    def _ancestor_anchor(self, discriminant: str) -> Optional[TreeNode]:
        if self._origin is None:
            return None
        anchor = None
        for ancestor in self._origin.ancestors():
            if discriminant in ancestor.discriminants:
                anchor = ancestor
        return anchor

    def _in_scope(self, node: TreeNode, anchor: Optional[TreeNode]) -> bool:
        if self._scope is None:
            return True
        kind, discriminant = self._scope
        if kind == _WITHIN_ANCESTOR:
            return node.is_descendant_of(anchor)
        if discriminant in node.discriminants:
            return True
        return any(discriminant in a.discriminants for a in node.ancestors())
