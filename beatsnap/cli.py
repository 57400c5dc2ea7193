from __future__ import annotations

from typing import Annotated

import typer
import uvicorn
from pydantic import ValidationError

from beatsnap.clock import EditorTiming, SeekController
from beatsnap.config import load_config, open_config_in_editor
from beatsnap.logging_config import setup_logging
from beatsnap.models import TimingSegment
from beatsnap.snapping import InvalidDivisorError, snap_points
from beatsnap.timing import NoTimingDataError, TimingSegments

app = typer.Typer(
    name="beatsnap",
    help="Beat-snapping seek calculations over tempo timing segments.",
    no_args_is_help=True,
)

SegmentOption = Annotated[
    list[str] | None,
    typer.Option("--segment", "-s", help="Timing segment as START:BEAT_DURATION. Repeatable."),
]
DivisorOption = Annotated[
    int | None,
    typer.Option("--divisor", "-d", help="Beat divisor (defaults to the config value)."),
]


def parse_segment(value: str) -> TimingSegment:
    start, sep, duration = value.partition(":")
    if not sep:
        raise typer.BadParameter(f"expected START:BEAT_DURATION, got '{value}'")
    try:
        return TimingSegment(start_time=float(start), beat_duration=float(duration))
    except ValueError as e:
        # pydantic's ValidationError is a ValueError too
        detail = "beat duration must be positive" if isinstance(e, ValidationError) else "not a number"
        raise typer.BadParameter(f"invalid segment '{value}': {detail}") from None


def _timing(segments: list[str] | None, divisor: int | None) -> tuple[TimingSegments, int]:
    timing = TimingSegments(parse_segment(s) for s in segments or [])
    return timing, divisor if divisor is not None else load_config().beat_divisor


def _controller(time: float, segments: list[str] | None, divisor: int | None) -> SeekController:
    """Controller positioned at time, bounded by the configured track length."""
    cfg = load_config()
    timing = EditorTiming(
        (parse_segment(s) for s in segments or []),
        beat_divisor=divisor if divisor is not None else cfg.beat_divisor,
    )
    return SeekController(timing, track_length=cfg.track_length, current_time=time)


def _format_time(time: float) -> str:
    return f"{time:.3f}".rstrip("0").rstrip(".")


def _fail(e: NoTimingDataError | InvalidDivisorError) -> typer.Exit:
    typer.echo(f"Seek failed: {e.message}", err=True)
    return typer.Exit(1)


@app.command()
def serve(
    port: Annotated[int | None, typer.Option("--port", "-p", help="Port to listen on.")] = None,
) -> None:
    """Start the local FastAPI server."""
    cfg = load_config()
    setup_logging(console_level=cfg.logging.level)
    actual_port = port if port is not None else cfg.server_port
    uvicorn.run("beatsnap.app:app", host="127.0.0.1", port=actual_port)


@app.command()
def config() -> None:
    """Create (if needed) and open the config file in $EDITOR."""
    open_config_in_editor()


@app.command()
def snap(
    time: Annotated[float, typer.Argument(help="Time to snap.")],
    segment: SegmentOption = None,
    divisor: DivisorOption = None,
) -> None:
    """Snap TIME to the nearest beat."""
    try:
        clock = _controller(time, segment, divisor)
        typer.echo(_format_time(clock.seek_snapped(time)))
    except (NoTimingDataError, InvalidDivisorError) as e:
        raise _fail(e) from None


@app.command()
def forward(
    time: Annotated[float, typer.Argument(help="Time to seek from.")],
    segment: SegmentOption = None,
    divisor: DivisorOption = None,
    snapped: Annotated[bool, typer.Option("--snap/--free", help="Land on the beat grid.")] = True,
    amount: Annotated[float, typer.Option("--amount", "-a", min=0.001, help="Beats to move in free mode.")] = 1.0,
) -> None:
    """Seek forward from TIME."""
    try:
        clock = _controller(time, segment, divisor)
        typer.echo(_format_time(clock.seek_forward(snap=snapped, amount=amount)))
    except (NoTimingDataError, InvalidDivisorError) as e:
        raise _fail(e) from None


@app.command()
def backward(
    time: Annotated[float, typer.Argument(help="Time to seek from.")],
    segment: SegmentOption = None,
    divisor: DivisorOption = None,
    snapped: Annotated[bool, typer.Option("--snap/--free", help="Land on the beat grid.")] = True,
    amount: Annotated[float, typer.Option("--amount", "-a", min=0.001, help="Beats to move in free mode.")] = 1.0,
) -> None:
    """Seek backward from TIME."""
    try:
        clock = _controller(time, segment, divisor)
        typer.echo(_format_time(clock.seek_backward(snap=snapped, amount=amount)))
    except (NoTimingDataError, InvalidDivisorError) as e:
        raise _fail(e) from None


@app.command()
def points(
    start: Annotated[float, typer.Argument(help="Range start.")],
    end: Annotated[float, typer.Argument(help="Range end (inclusive).")],
    segment: SegmentOption = None,
    divisor: DivisorOption = None,
) -> None:
    """List every snap point between START and END."""
    timing, div = _timing(segment, divisor)
    try:
        for point in snap_points(timing, div, start, end):
            typer.echo(_format_time(point))
    except (NoTimingDataError, InvalidDivisorError) as e:
        raise _fail(e) from None
