"""Random short code generation.

Codes are drawn with nanoid's mask-and-reject algorithm: each random byte is
masked down to the smallest power of two covering the alphabet and discarded
when it falls outside it, so every character is equally likely and positions
are independent.

How to Use
===========
**Production (os.urandom)**::
    generator = ShortCodeGenerator(length=6)
    code = generator.generate()

**Deterministic (tests, replays)**::
    generator = ShortCodeGenerator(length=6, random=random.Random(42))

Key Behaviours
===============
- Without an injected ``random`` source, nanoid's ``os.urandom`` backend is used.
- An injected ``random.Random`` supplies the bytes instead, so a seed fixes
  the whole code sequence.
- ``generate(length=...)`` overrides the configured length for one call.
"""

import random as _random
from typing import Optional

from nanoid import generate
from nanoid.method import method

from shortlink.config import DEFAULT_ALPHABET

__all__ = ["ShortCodeGenerator", "ALPHABET"]

ALPHABET = DEFAULT_ALPHABET


class ShortCodeGenerator:
    """Generate fixed-length codes from a closed alphabet."""

    def __init__(
        self,
        length: int = 6,
        alphabet: str = ALPHABET,
        random: Optional[_random.Random] = None,
    ) -> None:
        if not isinstance(length, int) or length <= 0:
            raise ValueError(f"length must be a positive integer, got {length!r}")
        if len(alphabet) < 2 or len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must hold at least 2 distinct characters")
        self.length = length
        self.alphabet = alphabet
        self._random = random

    def generate(self, length: Optional[int] = None) -> str:
        size = self.length if length is None else length
        assert isinstance(size, int) and size > 0, f"length must be a positive integer, got {size!r}"
        if self._random is None:
            return generate(self.alphabet, size)
        return method(self._random.randbytes, self.alphabet, size)

    def code_space(self, length: Optional[int] = None) -> int:
        """Number of distinct codes of ``length`` (default: configured length)."""
        return len(self.alphabet) ** (self.length if length is None else length)

    def __repr__(self) -> str:
        return f"ShortCodeGenerator(length={self.length}, alphabet_size={len(self.alphabet)})"
