"""Randomness sources used by key setup and by both protocol roles."""

from __future__ import annotations

import random
import secrets


class RandomSource:
    """Uniform integers and bits drawn from an underlying generator."""

    def __init__(self, generator: random.Random) -> None:
        self._generator = generator

    def random_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError("Byte count must be non-negative")
        return self._generator.getrandbits(count * 8).to_bytes(count, "big")

    def random_bits(self, bits: int) -> int:
        """Return a non-negative integer below ``2**bits``."""

        if bits < 1:
            raise ValueError("Bit count must be positive")
        return self._generator.getrandbits(bits)

    def uniform_in_range(self, minimum: int, maximum: int) -> int:
        """Return a value in ``[minimum, maximum)``.

        The value is built from as many random bytes as the width of the
        range occupies as a signed integer, with the sign cleared and the
        result reduced modulo the width. When the width is not a power of two
        this leaves a small modulo bias. The bias is negligible for protocol
        sized ranges, but this is not a perfectly uniform sampler.
        """

        width = maximum - minimum
        if width <= 0:
            raise ValueError(f"Empty range [{minimum}, {maximum})")
        length = width.bit_length() // 8 + 1
        raw = int.from_bytes(self.random_bytes(length), "big", signed=True)
        return abs(raw) % width + minimum

    def uniform_bit(self) -> int:
        return self._generator.getrandbits(1)


class SecureRandomSource(RandomSource):
    """Source backed by the operating system CSPRNG."""

    def __init__(self) -> None:
        super().__init__(secrets.SystemRandom())


class DeterministicRandomSource(RandomSource):
    """Seeded, reproducible source. Only suitable for tests."""

    def __init__(self, seed: int) -> None:
        super().__init__(random.Random(seed))


def resolve(rng: RandomSource | None) -> RandomSource:
    """Return ``rng`` or a fresh secure source when none is supplied."""

    return rng if rng is not None else SecureRandomSource()


__all__ = [
    "DeterministicRandomSource",
    "RandomSource",
    "SecureRandomSource",
    "resolve",
]
