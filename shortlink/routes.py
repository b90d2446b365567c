"""FastAPI route definitions for the shortlink REST API.

API Endpoint Overview
=====================
::
    GET  /health
        └─ HealthResponse (200)

    POST /shorten
        ├─ ShortenRequest (request body)
        └─ ShortenResponse (200) or 400/503

    GET  /:short_code
        └─ 302 Redirect or 404

Request Flow Diagram
====================
::
    ┌─────────────┐     ┌─────────────┐     ┌─────────────┐
    │  HTTP       │ ──▶ │ Parse body  │ ──▶ │ Registry    │
    │  Request    │     │ (Pydantic)  │     │ create /    │
    └─────────────┘     └─────────────┘     │ resolve     │
                                            └──────┬──────┘
                                                   ▼
                                            ┌─────────────┐
                                            │ JSON or     │
                                            │ redirect    │
                                            └─────────────┘

Key Behaviours
===============
- Shorten and redirect are plain ``def`` endpoints, so FastAPI runs them on
  its worker threadpool; the registry's lock handles the parallelism.
- Registry errors are translated to HTTPException here; the registry itself
  has no notion of status codes.
- 302 Found is used for redirects.
- Starlette percent-quotes the ``Location`` header, so a stored URL with
  spaces (``"https://x/a b"``) redirects to ``https://x/a%20b``. The registry
  still returns the URL exactly as it was submitted.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from shortlink.dependencies import RequestContext, get_registry, get_request_context
from shortlink.enums import HealthStatus
from shortlink.exceptions import CapacityExhaustedError, InvalidURLError, ShortCodeNotFoundError
from shortlink.registry import ShortLinkRegistry
from shortlink.schemas import ErrorResponse, HealthResponse, ShortenRequest, ShortenResponse

__all__ = ["router"]

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(registry: ShortLinkRegistry = Depends(get_registry)) -> HealthResponse:
    return HealthResponse(status=HealthStatus.HEALTHY, links=len(registry))


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    tags=["links"],
)
def shorten_url(
    payload: ShortenRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> ShortenResponse:
    ctx.add_tag("link_creation")

    try:
        short_code = ctx.registry.create(payload.url)
    except InvalidURLError as exc:
        ctx.logger.warning(
            f"URL shortening rejected: {exc}",
            extra={"operation": "create_short_url", "error": str(exc)},
        )
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CapacityExhaustedError as exc:
        ctx.logger.error(
            f"URL shortening failed: {exc}",
            extra={"operation": "create_short_url", "attempts": exc.attempts},
        )
        raise HTTPException(status_code=503, detail="No short code available, try again later") from exc

    short_url = ctx.settings.short_url_for(short_code)
    ctx.logger.info(
        f"Shortened URL: {payload.url} -> {short_url}",
        extra={
            "operation": "create_short_url",
            "short_code": short_code,
            "duration_ms": ctx.get_duration(),
        },
    )
    return ShortenResponse(short_url=short_url)


@router.get(
    "/{short_code}",
    status_code=302,
    response_class=RedirectResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["redirect"],
)
def redirect_to_url(
    short_code: str,
    ctx: RequestContext = Depends(get_request_context),
) -> RedirectResponse:
    ctx.add_tag("redirect")

    try:
        long_url = ctx.registry.resolve(short_code)
    except ShortCodeNotFoundError as exc:
        ctx.logger.info(
            f"Short code not found: {short_code}",
            extra={"operation": "redirect", "short_code": short_code, "error": "not_found"},
        )
        raise HTTPException(status_code=404, detail="Short URL not found") from exc

    ctx.logger.info(
        f"Redirected {short_code} to {long_url}",
        extra={
            "operation": "redirect",
            "short_code": short_code,
            "duration_ms": ctx.get_duration(),
        },
    )
    return RedirectResponse(url=long_url, status_code=302)
