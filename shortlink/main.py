"""FastAPI application entry point for the shortlink service.

This module configures and initializes the FastAPI application with middleware,
lifecycle management, error rendering and route registration.

Application Lifecycle Diagram
=============================
::
    ┌─────────────┐
    │ create_app()│
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Build       │
    │ ServiceMgr  │
    │ (registry)  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Add CORS    │
    │ middleware  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ /metrics,   │
    │ routes      │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ startup log │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    │ requests    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ shutdown:   │
    │ drop table  │
    └─────────────┘

How to Use
===========
**Step 1 — Run**::
    shortlink
    # or
    uvicorn shortlink.main:app --host 0.0.0.0 --port 8080

**Step 2 — Shorten**::
    curl -X POST http://localhost:8080/shorten \
         -H "Content-Type: application/json" \
         -d '{"url": "https://example.com"}'

**Step 3 — Follow**::
    curl -i http://localhost:8080/aB3xYz

Key Behaviours
===============
- Each application owns exactly one registry; nothing survives a restart.
- CORS origins come from ``CORS_ALLOWED_ORIGINS``.
- Every error response is ``{"error": "..."}``; malformed bodies are 400.
- ``/metrics`` is registered before the catch-all ``/{short_code}`` route.
"""

__all__ = ["app", "create_app", "run"]

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink.config import Settings, get_settings
from shortlink.dependencies import ServiceManager
from shortlink.registry import ShortLinkRegistry
from shortlink.routes import router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    manager: ServiceManager = app.state.service_manager
    manager.startup()
    yield
    manager.shutdown()


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    request.app.state.service_manager.logger.warning(f"Invalid request body: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[ShortLinkRegistry] = None,
) -> FastAPI:
    settings = settings if settings is not None else get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="In-memory URL shortener",
        lifespan=lifespan,
    )
    app.state.service_manager = ServiceManager(settings=settings, registry=registry)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    if settings.METRICS_ENABLED:
        Instrumentator(
            should_group_status_codes=True,
            should_ignore_untemplated=False,
            should_respect_env_var=False,
        ).instrument(app).expose(app, include_in_schema=False)

    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "shortlink.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
