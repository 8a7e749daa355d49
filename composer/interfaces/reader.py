"""Read interface for finished compositions."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple, Type, Union

if TYPE_CHECKING:
    from composer.element import Element
    from composer.query import SegmentQuery
    from composer.segment import Segment, SegmentRef
    from composer.tree import IndexEntry

SegmentKey = Union[int, "Segment", "SegmentRef"]


class ICompositionReader(ABC):
    """Read-only access to a fully expanded composition tree."""

    @property
    @abstractmethod
    def root(self) -> "Segment":
        """Return the root segment."""
        pass

    @abstractmethod
    def segments(self) -> Iterator["Segment"]:
        """Enumerate all segments in tree (pre-order depth-first) order."""
        pass

    @abstractmethod
    def children(self, segment: SegmentKey) -> List["Segment"]:
        """Return a segment's children in insertion order.

        Args:
            segment: Segment, SegmentRef or segment id

        Raises:
            KeyError: If the segment is not part of this composition
        """
        pass

    @abstractmethod
    def parent(self, segment: SegmentKey) -> Optional["Segment"]:
        """Return a segment's parent (None for the root)."""
        pass

    @abstractmethod
    def path(self, segment: SegmentKey) -> Tuple[int, ...]:
        """Return the sibling indices leading from the root to a segment."""
        pass

    @abstractmethod
    def entries(self, discriminant: str) -> List["IndexEntry"]:
        """Return the flat index for one discriminant, in tree order."""
        pass

    @abstractmethod
    def find(self, target: Union[str, Type["Element"]]) -> "SegmentQuery":
        """Query segments by element type with the context query primitives."""
        pass
