"""Dependency injection with a per-application service manager.

This module wires shared resources (settings, logger, short-link registry)
into the API endpoints. Resources are created once per application and
handed to each request through a lightweight request context.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Request

from shortlink.codegen import ShortCodeGenerator
from shortlink.config import Settings, get_settings
from shortlink.registry import ShortLinkRegistry


# ============================================================================
# SERVICE MANAGER
# ============================================================================


class ServiceManager:
    """Holds the resources shared by every request of one application.

    The registry is the process's entire state, so it is built exactly once
    per application and discarded with it.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[ShortLinkRegistry] = None,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.logger = self._setup_logger()
        self.registry = registry if registry is not None else self._setup_registry()

    def _setup_logger(self) -> logging.Logger:
        """Setup logger once."""
        logger = logging.getLogger("shortlink")
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.setLevel(getattr(logging, self.settings.LOG_LEVEL.upper(), logging.INFO))
        return logger

    def _setup_registry(self) -> ShortLinkRegistry:
        """Build an empty registry from settings."""
        generator = ShortCodeGenerator(
            length=self.settings.SHORT_CODE_LENGTH,
            alphabet=self.settings.SHORT_CODE_ALPHABET,
        )
        return ShortLinkRegistry(
            generator,
            max_attempts=self.settings.MAX_COLLISION_RETRIES,
            collision_policy=self.settings.COLLISION_POLICY,
            max_code_length=self.settings.MAX_CODE_LENGTH,
        )

    def startup(self) -> None:
        self.logger.info(
            "Starting %s (%s), code length %d, collision policy %s",
            self.settings.APP_NAME,
            self.settings.APP_ENV,
            self.registry.generator.length,
            self.registry.collision_policy.value,
        )

    def shutdown(self) -> None:
        # Nothing to flush: the table lives and dies with the process.
        self.logger.info("Shutting down, discarding %d short links", len(self.registry))


# ============================================================================
# LIGHTWEIGHT REQUEST CONTEXT
# ============================================================================


@dataclass
class RequestContext:
    """Per-request tracking data plus access to shared resources.

    Attributes:
        service_manager: Application-wide shared resources
        request_id: Unique identifier for this request
        user_agent: Client user agent string
        client_ip: Client IP address
        start_time: Request start timestamp
        tags: Request tags for categorization
    """

    service_manager: ServiceManager
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    user_agent: Optional[str] = None
    client_ip: Optional[str] = None
    start_time: float = field(default_factory=lambda: time.time())
    tags: list[str] = field(default_factory=list)

    @property
    def registry(self) -> ShortLinkRegistry:
        return self.service_manager.registry

    @property
    def settings(self) -> Settings:
        return self.service_manager.settings

    @property
    def logger(self) -> logging.LoggerAdapter:
        """Shared logger with request context attached."""
        return logging.LoggerAdapter(
            self.service_manager.logger,
            {
                "request_id": self.request_id,
                "client_ip": self.client_ip,
                "user_agent": self.user_agent,
                "tags": ",".join(self.tags),
            },
        )

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def get_duration(self) -> float:
        """Get request duration in milliseconds."""
        return (time.time() - self.start_time) * 1000


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_service_manager(request: Request) -> ServiceManager:
    return request.app.state.service_manager


def get_request_context(
    request: Request,
    manager: ServiceManager = Depends(get_service_manager),
) -> RequestContext:
    client_ip = request.client.host if request.client else None
    request_id = request.headers.get("x-request-id")

    ctx = RequestContext(
        service_manager=manager,
        user_agent=request.headers.get("user-agent"),
        client_ip=client_ip,
    )
    if request_id:
        ctx.request_id = request_id
    return ctx


def get_registry(manager: ServiceManager = Depends(get_service_manager)) -> ShortLinkRegistry:
    return manager.registry
