"""Probable prime generation backed by gmpy2's Miller-Rabin test."""

from __future__ import annotations

import logging

import gmpy2

from .constants import PRIMALITY_ROUNDS
from .rng import RandomSource, resolve

logger = logging.getLogger(__name__)


def is_probable_prime(value: int, rounds: int = PRIMALITY_ROUNDS) -> bool:
    return bool(gmpy2.is_prime(value, rounds))


def generate_prime(
    bits: int,
    rng: RandomSource | None = None,
    rounds: int = PRIMALITY_ROUNDS,
) -> int:
    """Sample odd ``bits``-bit integers until one is a probable prime."""

    if bits < 2:
        raise ValueError("Primes need at least 2 bits")
    source = resolve(rng)
    top = 1 << (bits - 1)
    attempts = 0
    while True:
        attempts += 1
        candidate = source.random_bits(bits) | top | 1
        if is_probable_prime(candidate, rounds):
            logger.debug("Found %d-bit prime after %d candidates", bits, attempts)
            return candidate


__all__ = ["generate_prime", "is_probable_prime"]
