from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from beatsnap.config import load_config
from beatsnap.logging_config import setup_logging
from beatsnap.models import DirectionalSeekRequest, HealthResponse, SeekResponse, SnapRequest
from beatsnap.snapping import InvalidDivisorError, seek_backward, seek_forward, seek_snapped
from beatsnap.timing import NoTimingDataError, TimingSegments

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

setup_logging()

app = FastAPI(title="beatsnap", version=VERSION)


@app.exception_handler(HTTPException)
async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail: Any = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(status_code=exc.status_code, content=detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "error", "message": str(detail)},
    )


def _resolve_timing(req: SnapRequest) -> tuple[TimingSegments, int]:
    divisor = req.divisor if req.divisor is not None else load_config().beat_divisor
    return TimingSegments(req.segments), divisor


def _engine_error(e: NoTimingDataError | InvalidDivisorError) -> HTTPException:
    error = "no_timing_data" if isinstance(e, NoTimingDataError) else "invalid_divisor"
    logger.warning("Seek rejected: %s", e.message)
    return HTTPException(status_code=422, detail={"error": error, "message": e.message})


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    cfg = load_config()
    return HealthResponse(status="ok", version=VERSION, default_divisor=cfg.beat_divisor)


@app.post("/api/snap", response_model=SeekResponse)
async def snap(req: SnapRequest) -> SeekResponse:
    timing, divisor = _resolve_timing(req)
    try:
        time = seek_snapped(req.time, timing, divisor)
    except (NoTimingDataError, InvalidDivisorError) as e:
        raise _engine_error(e) from e
    return SeekResponse(time=time, segment=timing.segment_at(time))


@app.post("/api/seek/forward", response_model=SeekResponse)
async def forward(req: DirectionalSeekRequest) -> SeekResponse:
    timing, divisor = _resolve_timing(req)
    try:
        time = seek_forward(req.time, timing, divisor, snap=req.snap, amount=req.amount)
    except (NoTimingDataError, InvalidDivisorError) as e:
        raise _engine_error(e) from e
    return SeekResponse(time=time, segment=timing.segment_at(time))


@app.post("/api/seek/backward", response_model=SeekResponse)
async def backward(req: DirectionalSeekRequest) -> SeekResponse:
    timing, divisor = _resolve_timing(req)
    try:
        time = seek_backward(req.time, timing, divisor, snap=req.snap, amount=req.amount)
    except (NoTimingDataError, InvalidDivisorError) as e:
        raise _engine_error(e) from e
    return SeekResponse(time=time, segment=timing.segment_at(time))
