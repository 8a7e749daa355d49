"""
Segment Unit Tests

Tests segment construction, naming rules, attachment and typed refs.
"""

import pytest

from composer.element import Element, element
from composer.elements import Part
from composer.exceptions import SegmentError, TypeMismatchError
from composer.segment import Segment, SegmentRef
from composer.timing import Timing


@element("SegmentBar")
class SegmentBar(Element):
    number: int = 0


@element("SegmentStaff")
class SegmentStaff(Element):
    pass


class TestSegment:
    """Test Segment behavior before and after attachment."""

    def test_construction_coerces_timing(self):
        segment = Segment(SegmentBar(number=1), (0, 4))
        assert segment.timing == Timing(0, 4)
        assert segment.id is None
        assert not segment.attached
        assert segment.discriminant == "SegmentBar"

    def test_requires_element(self):
        with pytest.raises(TypeError):
            Segment({"number": 1}, (0, 4))

    def test_invalid_timing(self):
        with pytest.raises(ValueError):
            Segment(SegmentBar(), (4, 0))

    def test_rename_once(self):
        segment = Segment(SegmentBar(), (0, 4))
        assert segment.rename("verse") is segment
        assert segment.name == "verse"
        with pytest.raises(SegmentError, match="once"):
            segment.rename("chorus")

    def test_clear_name(self):
        segment = Segment(SegmentBar(), (0, 4), name="verse")
        segment.clear_name()
        assert segment.name is None

    def test_rename_after_attach_rejected(self):
        segment = Segment(SegmentBar(), (0, 4))
        segment._attach(3)
        assert segment.id == 3
        with pytest.raises(SegmentError, match="attached"):
            segment.rename("late")

    def test_attach_once(self):
        segment = Segment(SegmentBar(), (0, 4))
        segment._attach(0)
        with pytest.raises(SegmentError):
            segment._attach(1)

    def test_copy_is_unattached(self):
        segment = Segment(SegmentBar(number=2), (0, 4), name="a")
        segment._attach(7)
        copy = segment.copy()
        assert copy.id is None
        assert copy.element is segment.element
        assert copy.name == "a"


class TestSegmentRef:
    """Test read-only handles passed to renderers."""

    def test_untyped_ref(self):
        segment = Segment(SegmentBar(number=5), (8, 12), name="b")
        ref = segment.ref()
        assert ref.element == SegmentBar(number=5)
        assert (ref.start, ref.end) == (8, 12)
        assert ref.name == "b"

    def test_typed_ref_through_wrapper(self):
        segment = Segment(Part.instrument(SegmentBar(number=1)), (0, 4))
        ref = segment.ref(SegmentBar)
        assert ref.element == SegmentBar(number=1)

    def test_typed_ref_mismatch(self):
        segment = Segment(SegmentBar(), (0, 4))
        with pytest.raises(TypeMismatchError):
            segment.ref(SegmentStaff)

    def test_refs_are_frozen(self):
        ref = SegmentRef.from_segment(Segment(SegmentBar(), (0, 4)))
        with pytest.raises(AttributeError):
            ref.timing = Timing(0, 8)

    def test_into_segment(self):
        ref = Segment(SegmentBar(number=3), (0, 4), name="x").ref()
        moved = ref.into_segment((4, 8))
        assert moved.timing == Timing(4, 8)
        assert moved.name == "x"
        assert moved.id is None

        renamed = ref.into_named_segment("y", (8, 12))
        assert renamed.name == "y"
        assert renamed.element == ref.element
