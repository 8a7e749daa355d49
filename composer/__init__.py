"""Composer - Composition-tree rendering engine.

This package expands an abstract root segment into a tree of timed
segments by dispatching each segment's element to a registered renderer,
with context queries over the tree expanded so far and deterministic,
per-node seeded randomness.
"""

from composer.composer import Composer
from composer.composition import Composition
from composer.config import ComposerConfig, ComposerOptions, get_config
from composer.context import CompositionContext
from composer.element import Element, element, get_element_type, registered_elements
from composer.elements import Part, PartType, PlayNote, Tempo
from composer.exceptions import (
    ComposerError,
    CompositionAbortedError,
    DuplicateRendererError,
    ElementRegistrationError,
    NotFoundError,
    RenderError,
    SegmentError,
    SerializationError,
    TypeMismatchError,
    UnknownElementError,
)
from composer.query import SegmentQuery
from composer.render import AdhocRenderer, RenderEngine, Renderer, RendererGroup
from composer.segment import Segment, SegmentRef
from composer.serialization import JsonCompositionConverter
from composer.timing import HIGH_PRECISION_BEAT_LENGTH, STANDARD_BEAT_LENGTH, Timing, TimingRelation
from composer.tree import IndexEntry, NodeState

__version__ = "0.1.0"

__all__ = [
    "AdhocRenderer",
    "ComposerConfig",
    "ComposerError",
    "ComposerOptions",
    "Composer",
    "Composition",
    "CompositionAbortedError",
    "CompositionContext",
    "DuplicateRendererError",
    "Element",
    "ElementRegistrationError",
    "HIGH_PRECISION_BEAT_LENGTH",
    "IndexEntry",
    "JsonCompositionConverter",
    "NodeState",
    "NotFoundError",
    "Part",
    "PartType",
    "PlayNote",
    "RenderEngine",
    "RenderError",
    "Renderer",
    "RendererGroup",
    "STANDARD_BEAT_LENGTH",
    "Segment",
    "SegmentError",
    "SegmentQuery",
    "SegmentRef",
    "SerializationError",
    "Tempo",
    "Timing",
    "TimingRelation",
    "TypeMismatchError",
    "UnknownElementError",
    "element",
    "get_config",
    "get_element_type",
    "registered_elements",
]
