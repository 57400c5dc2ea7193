from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TimingSegment(BaseModel):
    """A tempo region: fixed beat duration from start_time until the next segment begins."""

    model_config = ConfigDict(frozen=True)

    start_time: float
    beat_duration: float = Field(gt=0)


class SnapRequest(BaseModel):
    time: float
    segments: list[TimingSegment]
    divisor: int | None = None


class DirectionalSeekRequest(SnapRequest):
    snap: bool = True
    amount: float = Field(default=1.0, gt=0)


class SeekResponse(BaseModel):
    time: float
    segment: TimingSegment


class HealthResponse(BaseModel):
    status: str
    version: str
    default_divisor: int
