"""Shared enums for the shortlink service.

This module defines all status and policy enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["HealthStatus", "RequestStatus", "CollisionPolicy"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class RequestStatus(StrEnum):
    """Request status values for metrics and logging."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"


class CollisionPolicy(StrEnum):
    """What the registry does once a round of code draws keeps colliding."""

    FAIL = "fail"
    GROW = "grow"
