"""Renderers and the discriminant-keyed engine that dispatches to them."""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Dict, Generic, Iterable, Iterator, List, Optional, Type, TypeVar, Union

from composer.element import Element, discriminant_of
from composer.exceptions import DuplicateRendererError
from composer.segment import Segment, SegmentRef

if TYPE_CHECKING:
    from composer.context import CompositionContext

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Element)


class Renderer(ABC, Generic[E]):
    """Expansion logic bound to exactly one Element type.

    Subclasses set ``element_type`` and implement ``render``. Renderers
    must be pure functions of their inputs and must not keep the segment
    ref or context after returning.
    """

    element_type: Type[E]

    @property
    def discriminant(self) -> str:
        return discriminant_of(self.element_type)

    @abstractmethod
    def render(self, segment: SegmentRef[E], context: "CompositionContext") -> List[Segment]:
        """Expand a segment into child segments.

        Args:
            segment: Read-only handle typed to ``element_type``
            context: Query/randomness facade for this render call

        Returns:
            Child segments in the order they should be expanded

        Raises:
            RenderError: If the segment cannot be expanded (e.g. required
                context is missing)
        """
        pass


RenderFunc = Callable[[SegmentRef, "CompositionContext"], Iterable[Segment]]


class AdhocRenderer(Renderer[E]):
    """Renderer backed by a plain function, for stateless expansion logic."""

    def __init__(self, element_type: Type[E], func: RenderFunc):
        """Initialize adhoc renderer.

        Args:
            element_type: Element type the function expands
            func: ``(segment_ref, context) -> segments``
        """
        self.element_type = element_type
        self._func = func

    def render(self, segment: SegmentRef[E], context: "CompositionContext") -> List[Segment]:
        return list(self._func(segment, context))

    def __repr__(self) -> str:
        return f"AdhocRenderer({self.element_type.__qualname__}, {self._func!r})"


class RendererGroup(Renderer[E]):
    """Several renderers for one element type, run as a single unit.

    Children are concatenated in renderer order; the first failure fails
    the whole group.
    """

    def __init__(self, element_type: Type[E], *renderers: Renderer[E]):
        """Initialize renderer group.

        Args:
            element_type: Element type every member renders
            renderers: Initial members
        """
        self.element_type = element_type
        self.renderers: List[Renderer[E]] = []
        for renderer in renderers:
            self.add(renderer)

    def add(self, renderer: Renderer[E]) -> "RendererGroup[E]":
        if renderer.discriminant != self.discriminant:
            raise ValueError(
                f"Cannot group a {renderer.discriminant} renderer with {self.discriminant} renderers"
            )
        self.renderers.append(renderer)
        return self

    def __add__(self, renderer: Renderer[E]) -> "RendererGroup[E]":
        group = RendererGroup(self.element_type, *self.renderers)
        return group.add(renderer)

    def render(self, segment: SegmentRef[E], context: "CompositionContext") -> List[Segment]:
        children: List[Segment] = []
        for renderer in self.renderers:
            children.extend(renderer.render(segment, context))
        return children


class RenderEngine:
    """Registry mapping element discriminants to their Renderer.

    At most one renderer per discriminant; use a RendererGroup to combine
    several. Engines compose by union with ``+`` or ``|``.
    """

    def __init__(self, renderers: Iterable[Renderer] = ()):
        """Initialize render engine.

        Args:
            renderers: Renderers to register

        Raises:
            DuplicateRendererError: If two renderers share a discriminant
        """
        self._renderers: Dict[str, Renderer] = {}
        for renderer in renderers:
            self.add_renderer(renderer)

    def add_renderer(self, renderer: Renderer) -> "RenderEngine":
        """Register a renderer.

        Raises:
            DuplicateRendererError: If the discriminant already has one
        """
        discriminant = renderer.discriminant
        if discriminant in self._renderers:
            raise DuplicateRendererError(discriminant)
        self._renderers[discriminant] = renderer
        logger.debug(f"Registered renderer for {discriminant!r}: {renderer!r}")
        return self

    @classmethod
    def union(cls, *engines: "RenderEngine") -> "RenderEngine":
        """Combine engines into a new one.

        Raises:
            DuplicateRendererError: If any discriminant is covered twice
        """
        combined = cls()
        for engine in engines:
            for renderer in engine._renderers.values():
                combined.add_renderer(renderer)
        return combined

    def __add__(self, other: Union[Renderer, "RenderEngine"]) -> "RenderEngine":
        if isinstance(other, RenderEngine):
            return RenderEngine.union(self, other)
        if isinstance(other, Renderer):
            return RenderEngine.union(self, RenderEngine([other]))
        return NotImplemented

    def __or__(self, other: "RenderEngine") -> "RenderEngine":
        if not isinstance(other, RenderEngine):
            return NotImplemented
        return RenderEngine.union(self, other)

    def __len__(self) -> int:
        return len(self._renderers)

    def __contains__(self, target: Union[str, Element, Type[Element]]) -> bool:
        return discriminant_of(target) in self._renderers

    def __iter__(self) -> Iterator[Renderer]:
        return iter(self._renderers.values())

    def __repr__(self) -> str:
        return f"RenderEngine({sorted(self._renderers)})"

    @property
    def discriminants(self) -> List[str]:
        return list(self._renderers)

    def renderer_for(self, target: Union[str, Element, Type[Element]]) -> Optional[Renderer]:
        """Return the renderer registered for exactly this type, if any."""
        return self._renderers.get(discriminant_of(target))

    def can_render(self, value: Element) -> bool:
        """Check whether any element in the wrap chain has a renderer."""
        return any(discriminant_of(e) in self._renderers for e in value.element_chain())

    def render(self, segment: Segment, context: "CompositionContext") -> Optional[List[Segment]]:
        """Render a segment with every renderer matching its wrap chain.

        Args:
            segment: Segment being expanded
            context: Context for this render call

        Returns:
            Concatenated children, or None if no renderer applies (the
            segment is a terminal leaf)

        Raises:
            RenderError: Propagated from the first failing renderer
            TypeError: If a renderer returns something other than Segments
        """
        matched = [
            renderer
            for renderer in (self._renderers.get(discriminant_of(e)) for e in segment.element.element_chain())
            if renderer is not None
        ]
        if not matched:
            return None

        children: List[Segment] = []
        for renderer in matched:
            produced = renderer.render(SegmentRef.from_segment(segment, renderer.element_type), context)
            if produced is None:
                raise TypeError(f"{renderer!r} returned None instead of a list of segments")
            for child in produced:
                if not isinstance(child, Segment):
                    raise TypeError(
                        f"{renderer!r} returned {type(child).__name__}, expected Segment"
                    )
                children.append(child)
        return children
