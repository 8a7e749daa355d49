"""
Element Registry Unit Tests

Tests explicit element registration, discriminant lookup and the tagged
payload form.
"""

import pytest
from pydantic import ValidationError

from composer.element import (
    Element,
    discriminant_of,
    dump_element,
    element,
    get_element_type,
    load_element,
    registered_elements,
)
from composer.elements import Part, PartType, PlayNote, Tempo
from composer.exceptions import (
    ElementRegistrationError,
    SerializationError,
    UnknownElementError,
)


@element("RegistryChord")
class RegistryChord(Element):
    root: int
    quality: str = "major"


@element("RegistryMarker")
class RegistryMarker(Element):
    pass


class Unregistered(Element):
    value: int = 0


class TestElementRegistration:
    """Test the @element decorator and registry lookups."""

    def test_discriminant_assigned(self):
        assert RegistryChord.discriminant == "RegistryChord"
        assert get_element_type("RegistryChord") is RegistryChord
        assert "RegistryChord" in registered_elements()

    def test_core_elements_registered(self):
        for cls in (PlayNote, Part, Tempo):
            assert get_element_type(cls.discriminant) is cls

    def test_duplicate_discriminant_rejected(self):
        with pytest.raises(ElementRegistrationError, match="already registered"):

            @element("RegistryChord")
            class OtherChord(Element):
                root: int

    def test_same_declaration_reregistered(self):
        # Re-declaring the same module-level class (e.g. on reload) is accepted
        assert element("RegistryMarker")(RegistryMarker) is RegistryMarker

    def test_reserved_type_field_rejected(self):
        with pytest.raises(ElementRegistrationError, match="reserved"):

            @element("RegistryTyped")
            class Typed(Element):
                type: str

    def test_non_element_rejected(self):
        with pytest.raises(ElementRegistrationError):
            element("RegistryPlain")(object)

    def test_empty_discriminant_rejected(self):
        with pytest.raises(ElementRegistrationError):
            element("")

    def test_unknown_discriminant(self):
        with pytest.raises(UnknownElementError) as exc_info:
            get_element_type("RegistryMissing")
        assert exc_info.value.discriminant == "RegistryMissing"

    def test_discriminant_of(self):
        assert discriminant_of(RegistryChord) == "RegistryChord"
        assert discriminant_of(RegistryChord(root=0)) == "RegistryChord"
        assert discriminant_of("Anything") == "Anything"

    def test_discriminant_of_unregistered_type(self):
        with pytest.raises(ElementRegistrationError, match="missing @element"):
            discriminant_of(Unregistered)


class TestElementPayloads:
    """Test element immutability, wrapping and the tagged payload form."""

    def test_elements_are_frozen(self):
        chord = RegistryChord(root=2)
        with pytest.raises(ValidationError):
            chord.root = 3

    def test_dump_and_load(self):
        data = dump_element(RegistryChord(root=7, quality="minor"))
        assert data == {"type": "RegistryChord", "root": 7, "quality": "minor"}
        assert load_element(data) == RegistryChord(root=7, quality="minor")

    def test_load_missing_tag(self):
        with pytest.raises(SerializationError, match="missing"):
            load_element({"root": 1})

    def test_load_unknown_tag(self):
        with pytest.raises(SerializationError):
            load_element({"type": "RegistryMissing"})

    def test_load_invalid_payload(self):
        with pytest.raises(SerializationError, match="Invalid RegistryChord"):
            load_element({"type": "RegistryChord", "root": "not-a-number"})

    def test_play_note_bounds(self):
        PlayNote(note=60, velocity=100)
        with pytest.raises(ValidationError):
            PlayNote(note=128, velocity=100)

    def test_part_wrap_chain(self):
        part = Part.percussion(RegistryChord(root=0))
        assert part.part_type == PartType.PERCUSSION
        assert [discriminant_of(e) for e in part.element_chain()] == ["Part", "RegistryChord"]
        assert part.element_as(RegistryChord) == RegistryChord(root=0)
        assert part.element_as(Tempo) is None

    def test_part_payload_nests_wrapped_element(self):
        part = Part.instrument(RegistryChord(root=4))
        data = dump_element(part)
        assert data == {
            "type": "Part",
            "wrapped": {"type": "RegistryChord", "root": 4, "quality": "major"},
            "part_type": "instrument",
        }
        assert load_element(data) == part

    def test_tempo(self):
        assert Tempo(bpm=120).microseconds_per_beat == 500_000

    def test_over_and_named(self):
        segment = RegistryMarker().over((0, 4))
        assert segment.name is None
        named = RegistryMarker().named("intro", (0, 4))
        assert named.name == "intro"
