from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from beatsnap.app import app
from beatsnap.config import AppConfig

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

SEGMENTS: list[dict[str, float]] = [
    {"start_time": 0, "beat_duration": 200},
    {"start_time": 100, "beat_duration": 400},
    {"start_time": 175, "beat_duration": 800},
    {"start_time": 350, "beat_duration": 200},
    {"start_time": 450, "beat_duration": 100},
    {"start_time": 500, "beat_duration": 307.69230769230802},
]


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def test_health(client: AsyncClient) -> None:
    with patch("beatsnap.app.load_config", return_value=AppConfig(beat_divisor=8)):
        response = await client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["default_divisor"] == 8


async def test_snap(client: AsyncClient) -> None:
    response = await client.post("/api/snap", json={"time": 170, "segments": SEGMENTS, "divisor": 4})
    assert response.status_code == 200
    data = response.json()
    assert data["time"] == 175
    assert data["segment"] == {"start_time": 175, "beat_duration": 800}


async def test_snap_uses_config_divisor(client: AsyncClient) -> None:
    with patch("beatsnap.app.load_config", return_value=AppConfig(beat_divisor=1)):
        response = await client.post(
            "/api/snap", json={"time": 120, "segments": [{"start_time": 0, "beat_duration": 200}]}
        )
    assert response.status_code == 200
    assert response.json()["time"] == 200


async def test_seek_forward_snapped(client: AsyncClient) -> None:
    response = await client.post(
        "/api/seek/forward", json={"time": 49.999, "segments": SEGMENTS, "divisor": 4}
    )
    assert response.status_code == 200
    assert response.json()["time"] == 100


async def test_seek_forward_free(client: AsyncClient) -> None:
    response = await client.post(
        "/api/seek/forward",
        json={"time": 100, "segments": SEGMENTS, "divisor": 4, "snap": False, "amount": 2},
    )
    assert response.status_code == 200
    assert response.json()["time"] == 300


async def test_seek_backward_free(client: AsyncClient) -> None:
    response = await client.post(
        "/api/seek/backward", json={"time": 350, "segments": SEGMENTS, "divisor": 4, "snap": False}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["time"] == 150
    assert data["segment"]["start_time"] == 100


async def test_seek_backward_snapped(client: AsyncClient) -> None:
    response = await client.post(
        "/api/seek/backward", json={"time": 401.999, "segments": SEGMENTS, "divisor": 4}
    )
    assert response.status_code == 200
    assert response.json()["time"] == 400


async def test_no_timing_data(client: AsyncClient) -> None:
    response = await client.post("/api/snap", json={"time": 10, "segments": [], "divisor": 4})
    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "no_timing_data"
    assert "No timing segments" in data["message"]


async def test_invalid_divisor(client: AsyncClient) -> None:
    response = await client.post(
        "/api/seek/forward", json={"time": 10, "segments": SEGMENTS, "divisor": 0}
    )
    assert response.status_code == 422
    assert response.json()["error"] == "invalid_divisor"


async def test_non_positive_beat_duration_rejected(client: AsyncClient) -> None:
    response = await client.post(
        "/api/snap",
        json={"time": 10, "segments": [{"start_time": 0, "beat_duration": 0}], "divisor": 4},
    )
    assert response.status_code == 422


async def test_non_positive_amount_rejected(client: AsyncClient) -> None:
    response = await client.post(
        "/api/seek/forward",
        json={"time": 10, "segments": SEGMENTS, "divisor": 4, "snap": False, "amount": 0},
    )
    assert response.status_code == 422
