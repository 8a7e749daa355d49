"""Tick intervals and the timing relations used by context queries."""

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List

# Default beat length, divisible by many common factors
STANDARD_BEAT_LENGTH = 480
# Higher precision beat length if greater divisibility is required
HIGH_PRECISION_BEAT_LENGTH = 960


@dataclass(frozen=True)
class Timing:
    """Half-open integer tick range ``[start, end)``.

    Attributes:
        start: Inclusive start tick
        end: Exclusive end tick (``end >= start``)
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        """Validate interval bounds."""
        for name in ("start", "end"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise TypeError(
                    f"Invalid timing: {name} must be an integer tick, got {value!r}"
                )
            object.__setattr__(self, name, int(value))
        if self.end < self.start:
            raise ValueError(
                f"Invalid timing: end ({self.end}) is before start ({self.start})"
            )

    @classmethod
    def of(cls, value: Any) -> "Timing":
        """Coerce a timing-like value into a Timing.

        Args:
            value: Timing, ``(start, end)`` pair, ``range`` with step 1, or any
                object exposing a ``timing`` attribute (Segment, SegmentRef)

        Returns:
            Timing instance
        """
        if isinstance(value, Timing):
            return value
        if isinstance(value, range):
            if value.step != 1:
                raise ValueError(f"Cannot convert stepped range {value!r} to Timing")
            return cls(value.start, value.stop)
        if isinstance(value, tuple) and len(value) == 2:
            return cls(value[0], value[1])
        timing = getattr(value, "timing", None)
        if isinstance(timing, Timing):
            return timing
        raise TypeError(f"Cannot convert {type(value).__name__} to Timing")

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.end == self.start

    def contains(self, tick: int) -> bool:
        """Check whether a tick lies inside this interval."""
        return self.start <= tick < self.end

    def _includes_point(self, point: int) -> bool:
        # A zero-length interval includes only its own point
        if self.is_empty:
            return point == self.start
        return self.contains(point)

    def overlaps(self, other: "Timing") -> bool:
        """Check whether the two intervals share any part.

        A zero-length interval overlaps any interval whose range includes
        its point.
        """
        if self.is_empty:
            return other._includes_point(self.start)
        if other.is_empty:
            return self._includes_point(other.start)
        return self.start < other.end and other.start < self.end

    def before(self, other: "Timing") -> bool:
        """Check whether this interval ends at or before ``other`` begins."""
        return self.end <= other.start and not self.overlaps(other)

    def after(self, other: "Timing") -> bool:
        """Check whether this interval starts at or after ``other`` ends."""
        return self.start >= other.end and not self.overlaps(other)

    def within(self, other: "Timing") -> bool:
        """Check whether this interval lies fully inside ``other``.

        Boundaries are inclusive, so an interval is within itself.
        """
        if self.is_empty:
            return other._includes_point(self.start)
        return other.start <= self.start and self.end <= other.end

    def during(self, other: "Timing") -> bool:
        """Check whether this interval spans at least all of ``other``."""
        return other.within(self)

    def equals(self, other: "Timing") -> bool:
        return self.start == other.start and self.end == other.end

    def begins_within(self, other: "Timing") -> bool:
        """Check whether this interval starts inside ``other``."""
        return other._includes_point(self.start)

    def ends_within(self, other: "Timing") -> bool:
        """Check whether this interval ends inside ``other`` (end exclusive)."""
        if other.is_empty:
            return self.end == other.end
        return other.start < self.end <= other.end

    def shifted_by(self, amount: int) -> "Timing":
        return Timing(self.start + amount, self.end + amount)

    def start_shifted_by(self, amount: int) -> "Timing":
        return Timing(self.start + amount, self.end)

    def end_shifted_by(self, amount: int) -> "Timing":
        return Timing(self.start, self.end + amount)

    def divide_into(self, size: int) -> List["Timing"]:
        """Split into sequential pieces of ``size`` ticks.

        The final piece keeps the full ``size`` even when it runs past
        ``end``.

        Args:
            size: Piece length in ticks (must be positive)

        Returns:
            List of consecutive Timings starting at ``start``
        """
        if size <= 0:
            raise ValueError(f"Invalid division size: {size} (must be positive)")
        return [Timing(s, s + size) for s in range(self.start, self.end, size)]

    @staticmethod
    def join(timings: Iterable["Timing"]) -> List["Timing"]:
        """Merge overlapping or contiguous timings, preserving input order.

        Args:
            timings: Timings ordered by start

        Returns:
            Merged timings
        """
        joined: List[Timing] = []
        for timing in timings:
            if joined and (
                joined[-1].contains(timing.start) or joined[-1].end == timing.start
            ):
                last = joined[-1]
                joined[-1] = Timing(last.start, max(last.end, timing.end))
            else:
                joined.append(timing)
        return joined

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


class TimingRelation(Enum):
    """Relationship of a target interval to a reference interval."""

    BEFORE = "before"  # target ends before the reference begins
    AFTER = "after"  # target starts after the reference ends
    WITHIN = "within"  # target fully enclosed by the reference
    DURING = "during"  # target spans at least the reference
    OVERLAPPING = "overlapping"  # target shares some part of the reference
    EQUAL = "equal"
    BEGINNING_WITHIN = "beginning_within"
    ENDING_WITHIN = "ending_within"

    def matches(self, target: Timing, reference: Timing) -> bool:
        """Check whether ``target`` stands in this relation to ``reference``."""
        if self is TimingRelation.BEFORE:
            return target.before(reference)
        if self is TimingRelation.AFTER:
            return target.after(reference)
        if self is TimingRelation.WITHIN:
            return target.within(reference)
        if self is TimingRelation.DURING:
            return target.during(reference)
        if self is TimingRelation.OVERLAPPING:
            return target.overlaps(reference)
        if self is TimingRelation.EQUAL:
            return target.equals(reference)
        if self is TimingRelation.BEGINNING_WITHIN:
            return target.begins_within(reference)
        return target.ends_within(reference)
