"""In-memory short-link registry: code allocation and URL resolution.

The registry owns the code → URL table. It is the single authority for
allocating codes and answering lookups, and it is safe to call from many
request threads at once.

Flow Diagram — create()
=======================
::
    ┌─────────────┐
    │ create(url) │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Validate URL│──── bad ───▶ InvalidURLError
    │ (scheme)    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Take write  │
    │ lock        │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Draw code   │◀──────────┐
    └──────┬──────┘           │
    FREE?  │                  │
    ┌─────┴─────┐             │
    │ YES        │ NO ── attempts left? ──┘
    ▼            │
┌─────────┐      ▼ (exhausted)
│ Insert  │   GROW policy: length + 1, new round
│ mapping │   FAIL policy: CapacityExhaustedError
└────┬────┘
     ▼
    ┌─────────────┐
    │ Release lock│
    │ return code │
    └─────────────┘

Flow Diagram — resolve()
========================
::
    ┌──────────────┐     ┌─────────────┐     ┌──────────────┐
    │ resolve(code)│ ──▶ │ Read lock + │ ──▶ │ URL or       │
    │              │     │ dict lookup │     │ NotFound     │
    └──────────────┘     └─────────────┘     └──────────────┘

How to Use
===========
**Step 1 — Build once at startup**::
    registry = ShortLinkRegistry(ShortCodeGenerator(length=6))

**Step 2 — Create and resolve**::
    code = registry.create("https://example.com/a")
    registry.resolve(code)  # "https://example.com/a"

**Step 3 — Handle errors**::
    try:
        registry.resolve("ZZZZZZ")
    except ShortCodeNotFoundError:
        ...

Key Behaviours
===============
- ``create`` holds the write lock across generate, check and insert, so two
  concurrent calls can never both claim the same code.
- ``resolve`` only takes the read lock; lookups run in parallel.
- Mappings are never updated or removed.
- A failed ``create`` leaves the table untouched.
- Collision retries are bounded by ``max_attempts`` per code length.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from prometheus_client import Counter, Histogram

from shortlink.codegen import ShortCodeGenerator
from shortlink.enums import CollisionPolicy, RequestStatus
from shortlink.exceptions import CapacityExhaustedError, InvalidURLError, ShortCodeNotFoundError
from shortlink.rwlock import ReadWriteLock

__all__ = [
    "ShortLinkRegistry",
    "RegistryStats",
    "validate_long_url",
    "ALLOWED_SCHEMES",
    "DEFAULT_MAX_ATTEMPTS",
]

ALLOWED_SCHEMES = ("http://", "https://")
DEFAULT_MAX_ATTEMPTS = 10

logger = logging.getLogger("shortlink.registry")


# ============================================================================
# PROMETHEUS METRICS
# ============================================================================

LINKS_CREATED_TOTAL = Counter(
    "shortlink_links_created_total",
    "Total short links created",
)
CODE_COLLISIONS_TOTAL = Counter(
    "shortlink_code_collisions_total",
    "Generated codes rejected because they were already taken",
)
CAPACITY_EXHAUSTED_TOTAL = Counter(
    "shortlink_capacity_exhausted_total",
    "Create calls that found no free code within the retry bound",
)
RESOLVE_REQUESTS_TOTAL = Counter(
    "shortlink_resolve_requests_total",
    "Total short code lookups",
    ["status"],
)
CREATE_DURATION = Histogram(
    "shortlink_create_duration_seconds",
    "Time spent allocating a code, lock wait included",
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1],
)


@dataclass(frozen=True)
class RegistryStats:
    """Point-in-time snapshot of the registry."""

    links: int
    collisions: int
    exhausted: int
    code_length: int
    longest_code_length: int
    code_space: int

    @property
    def occupancy(self) -> float:
        """Fraction of the base-length code space already allocated.

        Under the GROW policy longer codes also count here, so the value can
        exceed what the base length alone would allow.
        """
        return self.links / self.code_space


def validate_long_url(long_url: object) -> str:
    """Return ``long_url`` unchanged if it can be stored, else raise InvalidURLError."""
    if not isinstance(long_url, str):
        raise InvalidURLError("URL must be a string", long_url)
    if not long_url.strip():
        raise InvalidURLError("URL cannot be empty", long_url)
    if not long_url.startswith(ALLOWED_SCHEMES):
        raise InvalidURLError(
            "Invalid URL format (must start with http:// or https://)", long_url
        )
    return long_url


class ShortLinkRegistry:
    """Thread-safe code → URL table with collision-free code allocation.

    Args:
        generator: Source of candidate codes. Anything with
            ``generate(length=None) -> str`` and a ``length`` attribute works.
        max_attempts: Draws allowed per code length before giving up or growing.
        collision_policy: ``FAIL`` raises CapacityExhaustedError once the draws
            run out; ``GROW`` retries with codes one character longer.
        max_code_length: Longest code the ``GROW`` policy may escalate to.

    Example:
        >>> registry = ShortLinkRegistry(ShortCodeGenerator(length=6))
        >>> code = registry.create("https://example.com")
        >>> registry.resolve(code)
        'https://example.com'
    """

    def __init__(
        self,
        generator: Optional[ShortCodeGenerator] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        collision_policy: CollisionPolicy = CollisionPolicy.FAIL,
        max_code_length: Optional[int] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts!r}")
        self._generator = generator if generator is not None else ShortCodeGenerator()
        self._max_attempts = max_attempts
        self._policy = CollisionPolicy(collision_policy)
        self._max_code_length = max(max_code_length or self._generator.length, self._generator.length)
        self._table: dict[str, str] = {}
        self._lock = ReadWriteLock()
        self._collisions = 0
        self._exhausted = 0
        self._longest_issued = 0

    @property
    def generator(self) -> ShortCodeGenerator:
        return self._generator

    @property
    def collision_policy(self) -> CollisionPolicy:
        return self._policy

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def create(self, long_url: str) -> str:
        """Store ``long_url`` under a freshly allocated code and return the code.

        Raises:
            InvalidURLError: ``long_url`` is blank or not http(s).
            CapacityExhaustedError: No free code within the retry bound.
        """
        validate_long_url(long_url)

        start_time = time.perf_counter()
        with self._lock.write_locked():
            short_code = self._allocate_code()
            self._table[short_code] = long_url
            self._longest_issued = max(self._longest_issued, len(short_code))
        CREATE_DURATION.observe(time.perf_counter() - start_time)
        LINKS_CREATED_TOTAL.inc()

        logger.debug("Allocated short code %s for %s", short_code, long_url)
        return short_code

    def resolve(self, short_code: str) -> str:
        """Return the URL stored under ``short_code``.

        Raises:
            ShortCodeNotFoundError: The code was never issued.
        """
        with self._lock.read_locked():
            long_url = self._table.get(short_code)

        if long_url is None:
            RESOLVE_REQUESTS_TOTAL.labels(status=RequestStatus.NOT_FOUND).inc()
            raise ShortCodeNotFoundError(short_code)

        RESOLVE_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        return long_url

    def stats(self) -> RegistryStats:
        with self._lock.read_locked():
            return RegistryStats(
                links=len(self._table),
                collisions=self._collisions,
                exhausted=self._exhausted,
                code_length=self._generator.length,
                longest_code_length=self._longest_issued,
                code_space=self._generator.code_space(),
            )

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._table)

    def __contains__(self, short_code: object) -> bool:
        with self._lock.read_locked():
            return short_code in self._table

    def __repr__(self) -> str:
        return (
            f"ShortLinkRegistry(links={len(self)}, policy={self._policy.value}, "
            f"max_attempts={self._max_attempts})"
        )

    # ========================================================================
    # INTERNALS (write lock held)
    # ========================================================================

    def _allocate_code(self) -> str:
        length = self._generator.length
        attempts = 0
        while True:
            for _ in range(self._max_attempts):
                attempts += 1
                candidate = self._generator.generate(length=length)
                if candidate not in self._table:
                    return candidate
                self._collisions += 1
                CODE_COLLISIONS_TOTAL.inc()
                logger.debug("Short code collision on %s (attempt %d)", candidate, attempts)

            if self._policy is CollisionPolicy.GROW and length < self._max_code_length:
                length += 1
                logger.warning(
                    "No free code after %d attempts, growing code length to %d", attempts, length
                )
                continue

            self._exhausted += 1
            CAPACITY_EXHAUSTED_TOTAL.inc()
            logger.warning(
                "Short code space exhausted after %d attempts at length %d", attempts, length
            )
            raise CapacityExhaustedError(attempts, length)
