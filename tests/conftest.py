"""Shared pytest fixtures for registry and API tests."""

import random
from typing import AsyncGenerator, Iterable, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from shortlink.codegen import ShortCodeGenerator
from shortlink.config import Settings
from shortlink.main import create_app
from shortlink.registry import ShortLinkRegistry


class ScriptedGenerator:
    """Generator stand-in that hands out a fixed sequence of codes."""

    def __init__(self, codes: Iterable[str], length: int = 6) -> None:
        self._codes = iter(codes)
        self.length = length
        self.calls: list[Optional[int]] = []

    def generate(self, length: Optional[int] = None) -> str:
        self.calls.append(length)
        return next(self._codes)

    def code_space(self, length: Optional[int] = None) -> int:
        return 62 ** (self.length if length is None else length)


@pytest.fixture
def scripted_generator() -> type[ScriptedGenerator]:
    return ScriptedGenerator


@pytest.fixture
def settings() -> Settings:
    return Settings(
        BASE_URL="http://test",
        METRICS_ENABLED=False,
        CORS_ALLOWED_ORIGINS=["http://localhost:3000"],
    )


@pytest.fixture
def registry() -> ShortLinkRegistry:
    return ShortLinkRegistry(ShortCodeGenerator(length=6, random=random.Random(1234)))


@pytest.fixture
def app(settings: Settings, registry: ShortLinkRegistry) -> FastAPI:
    return create_app(settings=settings, registry=registry)


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def app_registry(app: FastAPI) -> ShortLinkRegistry:
    """The registry the running application actually serves from."""
    return app.state.service_manager.registry
