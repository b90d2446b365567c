"""Pydantic schemas for request/response validation in the shortlink API.

Schema Hierarchy
=================
::
    ShortenRequest (Input)
    └─ url: str

    ShortenResponse (Output)
    └─ short_url: str (BASE_URL + "/" + code)

    ErrorResponse (Output)
    └─ error: str

    HealthResponse (Output)
    ├─ status: HealthStatus
    └─ links: int

Key Behaviours
===============
- ``url`` is only type-checked here; scheme validation belongs to the
  registry so every caller gets the same rules.
- Error payloads use an ``error`` field, which is what the web form reads.
"""

from pydantic import BaseModel, Field

from shortlink.enums import HealthStatus

__all__ = [
    "ShortenRequest",
    "ShortenResponse",
    "ErrorResponse",
    "HealthResponse",
]


class ShortenRequest(BaseModel):
    url: str = Field(..., description="Long URL to shorten, e.g. 'https://example.com/a'")


class ShortenResponse(BaseModel):
    short_url: str = Field(..., description="Fully-qualified short URL embedding the code")


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: HealthStatus
    links: int = Field(..., ge=0, description="Number of short links held in memory")
