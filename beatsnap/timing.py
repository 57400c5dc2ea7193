"""Ordered timing segment collection and active-segment lookup."""

from __future__ import annotations

import bisect
from typing import TYPE_CHECKING

from beatsnap.models import TimingSegment

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence


class NoTimingDataError(Exception):
    """Raised when a lookup or seek runs against an empty segment collection."""

    def __init__(self, message: str = "No timing segments defined") -> None:
        super().__init__(message)
        self.message = message


class TimingSegments:
    """Timing segments kept in strictly increasing start_time order.

    Adding a segment at an existing start time replaces the old one.
    """

    def __init__(self, segments: Iterable[TimingSegment] = ()) -> None:
        self._segments: list[TimingSegment] = []
        self._starts: list[float] = []
        for segment in segments:
            self.add(segment)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[float, float]]) -> TimingSegments:
        """Build from (start_time, beat_duration) pairs."""
        return cls(TimingSegment(start_time=s, beat_duration=d) for s, d in pairs)

    def add(self, segment: TimingSegment) -> None:
        idx = bisect.bisect_left(self._starts, segment.start_time)
        if idx < len(self._starts) and self._starts[idx] == segment.start_time:
            self._segments[idx] = segment
            return
        self._starts.insert(idx, segment.start_time)
        self._segments.insert(idx, segment)

    def remove_at(self, start_time: float) -> bool:
        """Remove the segment starting at start_time. Returns False if there was none."""
        idx = bisect.bisect_left(self._starts, start_time)
        if idx < len(self._starts) and self._starts[idx] == start_time:
            del self._starts[idx]
            del self._segments[idx]
            return True
        return False

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[TimingSegment]:
        return iter(self._segments)

    def __getitem__(self, idx: int) -> TimingSegment:
        return self._segments[idx]

    def __repr__(self) -> str:
        pairs = ", ".join(f"{s.start_time}:{s.beat_duration}" for s in self._segments)
        return f"TimingSegments([{pairs}])"

    def require_data(self) -> None:
        """Raise NoTimingDataError if there are no segments."""
        if not self._segments:
            raise NoTimingDataError()

    def segment_index_at(self, time: float) -> int:
        """Index of the segment with the greatest start_time <= time (0 if time precedes all)."""
        self.require_data()
        return max(bisect.bisect_right(self._starts, time) - 1, 0)

    def segment_index_before(self, time: float) -> int:
        """Index of the segment with the greatest start_time < time (0 if there is none)."""
        self.require_data()
        return max(bisect.bisect_left(self._starts, time) - 1, 0)

    def segment_at(self, time: float) -> TimingSegment:
        return self._segments[self.segment_index_at(time)]

    def next_segment_after(self, time: float) -> TimingSegment | None:
        """First segment starting strictly after time, or None."""
        self.require_data()
        idx = bisect.bisect_right(self._starts, time)
        if idx < len(self._segments):
            return self._segments[idx]
        return None


def as_timing_segments(segments: TimingSegments | Sequence[TimingSegment]) -> TimingSegments:
    if isinstance(segments, TimingSegments):
        return segments
    return TimingSegments(segments)


def active_segment(time: float, segments: TimingSegments | Sequence[TimingSegment]) -> TimingSegment:
    """Return the timing segment in effect at time.

    That is the latest segment starting at or before time, or the earliest
    segment when time precedes all of them.

    Raises NoTimingDataError if there are no segments.
    """
    return as_timing_segments(segments).segment_at(time)
