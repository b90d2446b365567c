"""Health, CORS and metrics endpoint tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from shortlink.enums import HealthStatus


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == HealthStatus.HEALTHY.value
    assert data["links"] == 0


@pytest.mark.asyncio
async def test_health_counts_links(client: AsyncClient) -> None:
    await client.post("/shorten", json={"url": "https://example.com"})
    response = await client.get("/health")
    assert response.json()["links"] == 1


@pytest.mark.asyncio
async def test_cors_preflight_allowed_origin(client: AsyncClient) -> None:
    response = await client.options(
        "/shorten",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"


@pytest.mark.asyncio
async def test_cors_preflight_unknown_origin(client: AsyncClient) -> None:
    response = await client.options(
        "/shorten",
        headers={
            "Origin": "https://evil.example",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers


@pytest.mark.asyncio
async def test_metrics_exposed() -> None:
    from shortlink.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        await ac.post("/shorten", json={"url": "https://example.com"})
        response = await ac.get("/metrics")

    assert response.status_code == 200
    assert "shortlink_links_created_total" in response.text
