"""Editor-side seek controller holding the current time."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beatsnap.models import TimingSegment
from beatsnap.snapping import SnapEngine, validate_divisor
from beatsnap.timing import TimingSegments

if TYPE_CHECKING:
    from collections.abc import Iterable

    from beatsnap.snapping import TimingSource

logger = logging.getLogger(__name__)

DEFAULT_BEAT_DIVISOR = 4


class EditorTiming:
    """Mutable timing owned by the editor: segments plus the current beat divisor.

    Readers get a snapshot, so edits made while a seek is being computed
    never affect that seek.
    """

    def __init__(
        self,
        segments: Iterable[TimingSegment] = (),
        beat_divisor: int = DEFAULT_BEAT_DIVISOR,
    ) -> None:
        self._segments = TimingSegments(segments)
        self._beat_divisor = validate_divisor(beat_divisor)

    def add_segment(self, start_time: float, beat_duration: float) -> TimingSegment:
        segment = TimingSegment(start_time=start_time, beat_duration=beat_duration)
        self._segments.add(segment)
        return segment

    def remove_segment(self, start_time: float) -> bool:
        return self._segments.remove_at(start_time)

    def set_beat_divisor(self, divisor: int) -> None:
        self._beat_divisor = validate_divisor(divisor)

    def get_timing_segments(self) -> TimingSegments:
        return TimingSegments(self._segments)

    def get_beat_divisor(self) -> int:
        return self._beat_divisor


class SeekController:
    """Tracks the current time and moves it through a SnapEngine.

    When track_length is set, every result is clamped into [0, track_length].
    """

    def __init__(
        self,
        source: TimingSource,
        *,
        track_length: float | None = None,
        current_time: float = 0.0,
    ) -> None:
        self._engine = SnapEngine(source)
        self.track_length = track_length
        self._current_time = current_time

    @property
    def current_time(self) -> float:
        return self._current_time

    def _move_to(self, time: float) -> float:
        if self.track_length is not None:
            time = min(max(time, 0.0), self.track_length)
        logger.debug("seek %s -> %s", self._current_time, time)
        self._current_time = time
        return time

    def seek(self, time: float) -> float:
        return self._move_to(self._engine.seek(time))

    def seek_snapped(self, time: float) -> float:
        return self._move_to(self._engine.seek_snapped(time))

    def seek_forward(self, snap: bool = False, amount: float = 1.0) -> float:
        return self._move_to(self._engine.seek_forward(self._current_time, snap=snap, amount=amount))

    def seek_backward(self, snap: bool = False, amount: float = 1.0) -> float:
        return self._move_to(self._engine.seek_backward(self._current_time, snap=snap, amount=amount))
