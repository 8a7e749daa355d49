"""Core element types shared by every composition."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field, field_serializer, field_validator

from composer.element import Element, dump_element, element, load_element


@element("PlayNote")
class PlayNote(Element):
    """Play a MIDI note with a velocity. Terminal leaf for converters.

    Attributes:
        note: MIDI note number (``note % 12 == 0`` is a C)
        velocity: Strength of attack (0-127)
    """

    note: int = Field(ge=0, le=127)
    velocity: int = Field(ge=0, le=127)


class PartType(str, Enum):
    """Whether a part is played by an instrument or by percussion."""

    INSTRUMENT = "instrument"
    PERCUSSION = "percussion"


@element("Part")
class Part(Element):
    """Wraps another element whose notes are played by a single instrument.

    Queries for the wrapped type also match the Part, and renderers for both
    the Part and the wrapped type run when the segment is expanded.
    """

    wrapped: Element
    part_type: PartType = PartType.INSTRUMENT

    @classmethod
    def instrument(cls, wrapped: Element) -> "Part":
        return cls(wrapped=wrapped, part_type=PartType.INSTRUMENT)

    @classmethod
    def percussion(cls, wrapped: Element) -> "Part":
        return cls(wrapped=wrapped, part_type=PartType.PERCUSSION)

    def wrapped_element(self) -> Optional[Element]:
        return self.wrapped

    @field_validator("wrapped", mode="before")
    @classmethod
    def _load_wrapped(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return load_element(value)
        return value

    @field_serializer("wrapped")
    def _dump_wrapped(self, value: Element) -> Dict[str, Any]:
        return dump_element(value)


@element("Tempo")
class Tempo(Element):
    """Speed of (part of) a composition in beats per minute."""

    bpm: int = Field(gt=0)

    @property
    def microseconds_per_beat(self) -> int:
        return 60_000_000 // self.bpm
