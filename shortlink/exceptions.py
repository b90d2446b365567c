"""Error taxonomy raised by the short-link registry.

The registry knows nothing about HTTP; ``shortlink.routes`` maps each error
to a status code.

Classes:
    RegistryError:  Base class for every registry failure.
    InvalidURLError:  The long URL is empty or lacks an accepted scheme.
    ShortCodeNotFoundError:  The requested code has no mapping.
    CapacityExhaustedError:  No free code was found within the retry bound.
"""

__all__ = [
    "RegistryError",
    "InvalidURLError",
    "ShortCodeNotFoundError",
    "CapacityExhaustedError",
]


class RegistryError(Exception):
    """Base class for short-link registry errors."""


class InvalidURLError(RegistryError, ValueError):
    """Raised by ``create`` when the long URL is rejected before storage."""

    def __init__(self, message: str, url: object = None) -> None:
        super().__init__(message)
        self.url = url


class ShortCodeNotFoundError(RegistryError, KeyError):
    """Raised by ``resolve`` for a code that was never issued."""

    def __init__(self, short_code: str) -> None:
        super().__init__(short_code)
        self.short_code = short_code

    def __str__(self) -> str:
        return f"Short code not found: {self.short_code!r}"


class CapacityExhaustedError(RegistryError):
    """Raised by ``create`` when every attempted code was already taken."""

    def __init__(self, attempts: int, code_length: int) -> None:
        super().__init__(
            f"No free short code after {attempts} attempts (code length {code_length})"
        )
        self.attempts = attempts
        self.code_length = code_length
