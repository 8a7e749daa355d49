"""Persisted form of compositions.

A composition is stored as nested tagged records::

    {"options": {"ticks_per_beat": 480},
     "seed": 42,
     "tree": {"id": 0, "element": {"type": "Root"},
              "timing": {"start": 0, "end": 1920},
              "children": [...]}}

Element payloads carry their discriminant under ``"type"``. Per-node seeds
are not stored; they are recomputed from the global seed on load.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from composer.composition import Composition
from composer.config import ComposerOptions
from composer.element import dump_element, load_element
from composer.exceptions import ComposerError, SerializationError
from composer.interfaces.converter import ICompositionConverter
from composer.seeding import child_seed
from composer.segment import Segment
from composer.timing import Timing
from composer.tree import NodeState, RenderTree, TreeNode

logger = logging.getLogger(__name__)


class TimingRecord(BaseModel):
    """Serialized tick interval."""

    model_config = ConfigDict(extra="forbid")

    start: int
    end: int


class SegmentRecord(BaseModel):
    """Serialized segment with its subtree."""

    model_config = ConfigDict(extra="forbid")

    id: int = Field(ge=0)
    element: Dict[str, Any]
    timing: TimingRecord
    name: Optional[str] = None
    children: List["SegmentRecord"] = Field(default_factory=list)
    # Set when a renderer ran but produced no children
    rendered: bool = False


class OptionsRecord(BaseModel):
    """Serialized composer options."""

    ticks_per_beat: int = Field(ge=1)


class CompositionRecord(BaseModel):
    """Serialized composition."""

    options: OptionsRecord
    seed: int
    tree: SegmentRecord


SegmentRecord.model_rebuild()


def _segment_record(composition: Composition, segment: Segment) -> SegmentRecord:
    return SegmentRecord(
        id=segment.id,
        element=dump_element(segment.element),
        timing=TimingRecord(start=segment.timing.start, end=segment.timing.end),
        name=segment.name,
        children=[_segment_record(composition, c) for c in composition.children(segment)],
        rendered=(
            composition.node_state(segment) == NodeState.EXPANDED_INTERNAL
            and not composition.children(segment)
        ),
    )


def composition_to_record(composition: Composition) -> CompositionRecord:
    """Build the persisted record of a composition."""
    return CompositionRecord(
        options=OptionsRecord(ticks_per_beat=composition.options.ticks_per_beat),
        seed=composition.seed,
        tree=_segment_record(composition, composition.root),
    )


def composition_to_dict(composition: Composition) -> Dict[str, Any]:
    """Serialize a composition to JSON-compatible dictionaries.

    ``name`` is omitted for unnamed segments and ``children`` for leaves.
    ``rendered`` is only written for segments whose renderer returned no
    children, so their expansion state survives a reload.
    """
    return composition_to_record(composition).model_dump(mode="json", exclude_defaults=True)


def composition_to_json(composition: Composition, indent: Optional[int] = None) -> str:
    return json.dumps(composition_to_dict(composition), indent=indent)


def composition_from_dict(data: Dict[str, Any]) -> Composition:
    """Rebuild a composition from its persisted form.

    Raises:
        SerializationError: If the document is malformed, references an
            unknown discriminant, or has inconsistent ids or timings
    """
    try:
        record = CompositionRecord.model_validate(data)
    except ValidationError as e:
        raise SerializationError(f"Invalid composition document: {e}") from e

    try:
        options = ComposerOptions(ticks_per_beat=record.options.ticks_per_beat)
        tree = _rebuild_tree(record.tree, record.seed)
    except SerializationError:
        raise
    except (ValueError, ComposerError) as e:
        raise SerializationError(f"Invalid composition tree: {e}") from e

    logger.debug(f"Loaded composition with {len(tree)} segments (seed {record.seed})")
    return Composition(tree, options, record.seed)


def composition_from_json(text: Union[str, bytes]) -> Composition:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON: {e}") from e
    return composition_from_dict(data)


def _rebuild_tree(root: SegmentRecord, seed: int) -> RenderTree:
    tree = RenderTree()
    # Pre-order walk so visit order and sibling indices match the original
    stack: List[Tuple[SegmentRecord, Optional[TreeNode]]] = [(root, None)]
    while stack:
        record, parent = stack.pop()
        segment = Segment(
            load_element(record.element),
            Timing(record.timing.start, record.timing.end),
            name=record.name,
        )
        if parent is None:
            node_seed = seed
        else:
            node_seed = child_seed(parent.seed, len(parent.children), record.name)
        node = tree.add(segment, parent=parent, seed=node_seed, segment_id=record.id)
        if record.children or record.rendered:
            node.state = NodeState.EXPANDED_INTERNAL
        else:
            node.state = NodeState.EXPANDED_LEAF
        tree.visit(node)
        stack.extend((child, node) for child in reversed(record.children))
    return tree


class JsonCompositionConverter(ICompositionConverter):
    """Converts compositions to their JSON persisted form."""

    def __init__(self, indent: Optional[int] = None):
        """Initialize converter.

        Args:
            indent: JSON indentation (None for compact output)
        """
        self.indent = indent

    def convert(self, composition: Composition) -> str:
        if not isinstance(composition, Composition):
            raise SerializationError(
                f"Cannot serialize {type(composition).__name__}; expected Composition"
            )
        return composition_to_json(composition, indent=self.indent)
