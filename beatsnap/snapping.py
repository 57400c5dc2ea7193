"""Beat-snapping seek computations over timing segments.

Every function here is pure: it reads the segments and divisor it is given and
returns a time. Holding the current position is the caller's job (see
beatsnap.clock).
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Protocol

from beatsnap.precision import BOUNDARY_EPSILON, SEEK_TOLERANCE
from beatsnap.timing import TimingSegments, as_timing_segments

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from beatsnap.models import TimingSegment

logger = logging.getLogger(__name__)


class InvalidDivisorError(Exception):
    """Raised when the beat divisor is not an integer >= 1."""

    def __init__(self, divisor: object) -> None:
        message = f"Beat divisor must be an integer >= 1, got {divisor!r}"
        super().__init__(message)
        self.message = message
        self.divisor = divisor


class TimingSource(Protocol):
    def get_timing_segments(self) -> TimingSegments | Sequence[TimingSegment]: ...

    def get_beat_divisor(self) -> int: ...


def validate_divisor(divisor: int) -> int:
    if isinstance(divisor, bool) or not isinstance(divisor, int) or divisor < 1:
        raise InvalidDivisorError(divisor)
    return divisor


def beat_length(segment: TimingSegment, divisor: int) -> float:
    """Length of one snap step inside segment."""
    return segment.beat_duration / divisor


def _prepare(
    segments: TimingSegments | Sequence[TimingSegment], divisor: int
) -> TimingSegments:
    timing = as_timing_segments(segments)
    timing.require_data()
    validate_divisor(divisor)
    return timing


def seek(time: float) -> float:
    """Free seek. No snapping, the time is returned unchanged."""
    return time


def seek_snapped(
    time: float, segments: TimingSegments | Sequence[TimingSegment], divisor: int
) -> float:
    """Snap time to the nearest beat boundary of the segment in effect there.

    Exact half-beat ties go to the even beat index (Python's round), so a time
    halfway between beats 0 and 1 snaps to beat 0 and one halfway between 1
    and 2 snaps to beat 2. A beat at or past the next segment's start (within
    BOUNDARY_EPSILON) snaps to that start instead.
    """
    timing = _prepare(segments, divisor)
    idx = timing.segment_index_at(time + BOUNDARY_EPSILON)
    segment = timing[idx]
    step = beat_length(segment, divisor)

    beat = round((time - segment.start_time) / step)
    snapped = segment.start_time + beat * step

    if idx + 1 < len(timing) and snapped >= timing[idx + 1].start_time - BOUNDARY_EPSILON:
        snapped = timing[idx + 1].start_time
    return snapped


def _point_after(timing: TimingSegments, divisor: int, time: float) -> float:
    """First snap point strictly after time, with no tolerance applied."""
    idx = timing.segment_index_at(time)
    segment = timing[idx]
    step = beat_length(segment, divisor)

    beat = math.floor((time - segment.start_time) / step) + 1
    point = segment.start_time + beat * step
    if point <= time:
        point = segment.start_time + (beat + 1) * step

    # Grid points within BOUNDARY_EPSILON of the next segment belong to its start.
    if idx + 1 < len(timing) and point >= timing[idx + 1].start_time - BOUNDARY_EPSILON:
        point = timing[idx + 1].start_time
    return point


def _point_before(timing: TimingSegments, divisor: int, time: float) -> float:
    """Last snap point strictly before time, with no tolerance applied."""
    idx = timing.segment_index_before(time)
    segment = timing[idx]
    step = beat_length(segment, divisor)

    beat = math.ceil((time - segment.start_time) / step) - 1
    if segment.start_time + beat * step >= time:
        beat -= 1
    if idx + 1 < len(timing) and (
        segment.start_time + beat * step >= timing[idx + 1].start_time - BOUNDARY_EPSILON
    ):
        beat -= 1
    # The first segment's grid extends backwards indefinitely.
    if idx > 0:
        beat = max(beat, 0)
    return segment.start_time + beat * step


def _tolerance(lower: float, point: float, upper: float) -> float:
    """How close a time must be to point to count as being on it."""
    return min(SEEK_TOLERANCE, (point - lower) / 2, (upper - point) / 2)


def next_snap(
    time: float, segments: TimingSegments | Sequence[TimingSegment], divisor: int
) -> float:
    """Return the snap point following time.

    A time within tolerance of the upcoming snap point counts as being on it,
    so the result is the point after that one. The tolerance is SEEK_TOLERANCE
    capped at half the gap to either neighbouring point, so no point is ever
    skipped. Segment starts are always snap points: the grid of one segment
    never runs past the next segment's start.
    """
    timing = _prepare(segments, divisor)
    upcoming = _point_after(timing, divisor, time)
    current = _point_before(timing, divisor, upcoming)
    beyond = _point_after(timing, divisor, upcoming)

    target = beyond if upcoming - time <= _tolerance(current, upcoming, beyond) else upcoming
    logger.debug("next snap from %s: %s", time, target)
    return target


def previous_snap(
    time: float, segments: TimingSegments | Sequence[TimingSegment], divisor: int
) -> float:
    """Return the snap point preceding time. Mirrors next_snap."""
    timing = _prepare(segments, divisor)
    preceding = _point_before(timing, divisor, time)
    current = _point_after(timing, divisor, preceding)
    beyond = _point_before(timing, divisor, preceding)

    target = beyond if time - preceding <= _tolerance(beyond, preceding, current) else preceding
    logger.debug("previous snap from %s: %s", time, target)
    return target


def _check_amount(amount: float) -> None:
    if amount <= 0:
        msg = f"Seek amount must be greater than zero, got {amount}"
        raise ValueError(msg)


def seek_forward(
    time: float,
    segments: TimingSegments | Sequence[TimingSegment],
    divisor: int,
    *,
    snap: bool = False,
    amount: float = 1.0,
) -> float:
    """Seek forward from time.

    Snapped seeks land on the next snap point. Free seeks move by `amount`
    snap steps of the segment in effect at time, ignoring the grid.
    """
    if snap:
        return next_snap(time, segments, divisor)

    _check_amount(amount)
    timing = _prepare(segments, divisor)
    segment = timing.segment_at(time)
    return time + beat_length(segment, divisor) * amount


def seek_backward(
    time: float,
    segments: TimingSegments | Sequence[TimingSegment],
    divisor: int,
    *,
    snap: bool = False,
    amount: float = 1.0,
) -> float:
    """Seek backward from time.

    Free seeks step by the segment starting strictly before time, so seeking
    back from a segment start uses the tempo of the segment being entered.
    """
    if snap:
        return previous_snap(time, segments, divisor)

    _check_amount(amount)
    timing = _prepare(segments, divisor)
    segment = timing[timing.segment_index_before(time)]
    return time - beat_length(segment, divisor) * amount


def snap_points(
    segments: TimingSegments | Sequence[TimingSegment],
    divisor: int,
    start: float,
    end: float,
) -> Iterator[float]:
    """Yield every snap point in [start, end] in increasing order.

    Each segment contributes its start time plus its grid up to the next
    segment's start. Grid points within BOUNDARY_EPSILON of that start are
    dropped in its favour.
    """
    timing = _prepare(segments, divisor)
    for idx, segment in enumerate(timing):
        if segment.start_time > end:
            return
        segment_end = timing[idx + 1].start_time if idx + 1 < len(timing) else math.inf
        if segment_end <= start:
            continue

        step = beat_length(segment, divisor)
        beat = math.floor((start - segment.start_time) / step)
        if idx > 0:
            beat = max(beat, 0)

        while True:
            point = segment.start_time + beat * step
            if point > end or point >= segment_end - BOUNDARY_EPSILON:
                break
            if point >= start:
                yield point
            beat += 1


class SnapEngine:
    """Seek operations bound to a timing source.

    Segments and divisor are fetched from the source on every call, so edits
    to the timing are picked up immediately.
    """

    def __init__(self, source: TimingSource) -> None:
        self._source = source

    def _inputs(self) -> tuple[TimingSegments, int]:
        divisor = self._source.get_beat_divisor()
        return _prepare(self._source.get_timing_segments(), divisor), divisor

    def seek(self, time: float) -> float:
        self._inputs()
        return seek(time)

    def seek_snapped(self, time: float) -> float:
        timing, divisor = self._inputs()
        return seek_snapped(time, timing, divisor)

    def seek_forward(self, time: float, *, snap: bool = False, amount: float = 1.0) -> float:
        timing, divisor = self._inputs()
        return seek_forward(time, timing, divisor, snap=snap, amount=amount)

    def seek_backward(self, time: float, *, snap: bool = False, amount: float = 1.0) -> float:
        timing, divisor = self._inputs()
        return seek_backward(time, timing, divisor, snap=snap, amount=amount)

    def snap_points(self, start: float, end: float) -> list[float]:
        timing, divisor = self._inputs()
        return list(snap_points(timing, divisor, start, end))
