"""Composition tree nodes and the read-only handles passed to renderers."""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, Type, TypeVar

from composer.element import Element, discriminant_of
from composer.exceptions import SegmentError, TypeMismatchError
from composer.timing import Timing

E = TypeVar("E", bound=Element)


@dataclass(frozen=True)
class Segment:
    """An Element spanning a Timing, optionally named.

    Attributes:
        element: Payload owned by this segment
        timing: Tick interval the segment spans
        name: Optional human-readable name; same-named siblings are seeded
            identically
        id: Tree-scoped identifier, assigned once when the Composer attaches
            the segment (``None`` until then)
    """

    element: Element
    timing: Timing
    name: Optional[str] = None
    id: Optional[int] = field(default=None, init=False)
    _renamed: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate the payload and coerce the timing."""
        if not isinstance(self.element, Element):
            raise TypeError(
                f"Segment element must be an Element, got {type(self.element).__name__}"
            )
        object.__setattr__(self, "timing", Timing.of(self.timing))

    @property
    def discriminant(self) -> str:
        return discriminant_of(self.element)

    @property
    def attached(self) -> bool:
        return self.id is not None

    def rename(self, name: Optional[str]) -> "Segment":
        """Change (or clear, with ``None``) the name of an unattached segment.

        Only the code that created the segment may rename it, and only once.

        Returns:
            This segment, for chaining

        Raises:
            SegmentError: If already attached to a tree or already renamed
        """
        if self.attached:
            raise SegmentError(f"Segment {self.id} is attached and can no longer be renamed")
        if self._renamed:
            raise SegmentError("Segment name may only be changed once")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "_renamed", True)
        return self

    def clear_name(self) -> "Segment":
        return self.rename(None)

    def copy(self) -> "Segment":
        """Return an unattached copy sharing the (immutable) element."""
        return Segment(self.element, self.timing, self.name)

    def element_as(self, element_type: Type[E]) -> Optional[E]:
        return self.element.element_as(element_type)

    def ref(self, element_type: Optional[Type[E]] = None) -> "SegmentRef[E]":
        """Build a read-only handle, optionally typed to a wrapped element."""
        return SegmentRef.from_segment(self, element_type)

    def _attach(self, segment_id: int) -> None:
        if self.attached:
            raise SegmentError(f"Segment is already attached with id {self.id}")
        object.__setattr__(self, "id", segment_id)


@dataclass(frozen=True)
class SegmentRef(Generic[E]):
    """Immutable, typed view of a segment's payload, timing and name.

    Carries no tree structure; sibling and ancestor lookups go through the
    CompositionContext.
    """

    id: Optional[int]
    element: E
    timing: Timing
    name: Optional[str] = None

    @classmethod
    def from_segment(
        cls, segment: Segment, element_type: Optional[Type[E]] = None
    ) -> "SegmentRef[E]":
        """Create a ref, resolving ``element_type`` through the wrap chain.

        Raises:
            TypeMismatchError: If no element in the chain has the type
        """
        payload: Any = segment.element
        if element_type is not None:
            payload = segment.element.element_as(element_type)
            if payload is None:
                raise TypeMismatchError(
                    f"Segment {segment.id} ({segment.discriminant}) does not contain "
                    f"{element_type.__qualname__}"
                )
        return cls(id=segment.id, element=payload, timing=segment.timing, name=segment.name)

    @property
    def start(self) -> int:
        return self.timing.start

    @property
    def end(self) -> int:
        return self.timing.end

    def into_segment(self, timing: Any) -> Segment:
        """Copy the element (and name, if any) into a new segment over ``timing``."""
        return Segment(self.element, timing, name=self.name)

    def into_named_segment(self, name: str, timing: Any) -> Segment:
        return Segment(self.element, timing, name=name)
