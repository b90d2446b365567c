"""Shorten endpoint behavior tests."""

import asyncio

import pytest
from httpx import AsyncClient

from shortlink.codegen import ALPHABET
from shortlink.registry import ShortLinkRegistry


@pytest.mark.asyncio
async def test_shorten_valid_url(client: AsyncClient, app_registry: ShortLinkRegistry) -> None:
    response = await client.post("/shorten", json={"url": "https://www.google.com"})
    assert response.status_code == 200
    data = response.json()
    assert data["short_url"].startswith("http://test/")
    short_code = data["short_url"].rsplit("/", 1)[1]
    assert len(short_code) == 6
    assert all(c in ALPHABET for c in short_code)
    assert app_registry.resolve(short_code) == "https://www.google.com"


@pytest.mark.asyncio
async def test_shorten_invalid_scheme(client: AsyncClient, app_registry: ShortLinkRegistry) -> None:
    response = await client.post("/shorten", json={"url": "ftp://x"})
    assert response.status_code == 400
    assert "http://" in response.json()["error"]
    assert len(app_registry) == 0


@pytest.mark.asyncio
async def test_shorten_empty_url(client: AsyncClient, app_registry: ShortLinkRegistry) -> None:
    response = await client.post("/shorten", json={"url": ""})
    assert response.status_code == 400
    assert response.json() == {"error": "URL cannot be empty"}
    assert len(app_registry) == 0


@pytest.mark.asyncio
async def test_shorten_malformed_json(client: AsyncClient) -> None:
    response = await client.post(
        "/shorten",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


@pytest.mark.asyncio
async def test_shorten_missing_url_field(client: AsyncClient) -> None:
    response = await client.post("/shorten", json={"link": "https://example.com"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


@pytest.mark.asyncio
async def test_shorten_wrong_method(client: AsyncClient) -> None:
    response = await client.put("/shorten", json={"url": "https://example.com"})
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_shorten_multiple_urls(client: AsyncClient) -> None:
    urls = [
        "https://www.google.com",
        "https://www.github.com",
        "https://www.python.org",
    ]
    short_urls = set()
    for url in urls:
        response = await client.post("/shorten", json={"url": url})
        assert response.status_code == 200
        short_urls.add(response.json()["short_url"])
    # All codes should be unique
    assert len(short_urls) == 3


@pytest.mark.asyncio
async def test_concurrent_shorten_requests(client: AsyncClient) -> None:
    urls = [f"https://example.com/page_{i}" for i in range(30)]
    responses = await asyncio.gather(*(client.post("/shorten", json={"url": url}) for url in urls))

    assert all(r.status_code == 200 for r in responses)
    assert len({r.json()["short_url"] for r in responses}) == 30


@pytest.mark.asyncio
async def test_shorten_capacity_exhausted(client: AsyncClient, app_registry: ShortLinkRegistry, monkeypatch) -> None:
    first = await client.post("/shorten", json={"url": "https://example.com/1"})
    taken = first.json()["short_url"].rsplit("/", 1)[1]
    monkeypatch.setattr(app_registry.generator, "generate", lambda length=None: taken)

    response = await client.post("/shorten", json={"url": "https://example.com/2"})
    assert response.status_code == 503
    assert "error" in response.json()
    assert len(app_registry) == 1


@pytest.mark.asyncio
async def test_app_serves_injected_registry(
    client: AsyncClient, registry: ShortLinkRegistry, app_registry: ShortLinkRegistry
) -> None:
    assert app_registry is registry

    await client.post("/shorten", json={"url": "https://example.com/kept"})
    await client.post("/shorten", json={"url": "ftp://example.com/rejected"})
    await client.post("/shorten", json={"url": "   "})

    assert len(registry) == 1
    health = await client.get("/health")
    assert health.json()["links"] == 1
