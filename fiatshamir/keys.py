"""Key setup for the Fiat-Shamir identification scheme."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

from .constants import DEFAULT_PRIME_BITS, PRIMALITY_ROUNDS
from .primes import generate_prime, is_probable_prime
from .rng import RandomSource, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicKey:
    """Modulus ``n`` and the public square ``y = x**2 mod n``."""

    n: int
    y: int

    def __post_init__(self) -> None:
        if self.n < 2:
            raise ValueError("Modulus must be at least 2")
        if not 0 <= self.y < self.n:
            raise ValueError("Public value must be reduced modulo n")

    def to_dict(self) -> Dict[str, str]:
        return {"n": hex(self.n), "y": hex(self.y)}

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "PublicKey":
        return PublicKey(n=int(data["n"], 16), y=int(data["y"], 16))


@dataclass(frozen=True)
class SecretKey:
    """The prover's square root of ``y``. Never leaves the prover."""

    x: int = field(repr=False)


@dataclass(frozen=True)
class KeyPair:
    public: PublicKey
    secret: SecretKey
    p: int = field(repr=False)
    q: int = field(repr=False)

    @property
    def n(self) -> int:
        return self.public.n

    @property
    def y(self) -> int:
        return self.public.y

    @property
    def x(self) -> int:
        return self.secret.x

    def check(self, rounds: int = PRIMALITY_ROUNDS) -> bool:
        """Confirm the key material is internally consistent."""

        return (
            self.public.n == self.p * self.q
            and self.public.y == pow(self.secret.x, 2, self.public.n)
            and is_probable_prime(self.p, rounds)
            and is_probable_prime(self.q, rounds)
        )

    def to_dict(self) -> Dict[str, str]:
        payload = self.public.to_dict()
        payload["x"] = hex(self.secret.x)
        return payload


def derive_public_key(secret: int, n: int) -> PublicKey:
    """Compute the public value for ``secret`` under modulus ``n``."""

    if not 0 < secret < n:
        raise ValueError("Secret must lie in [1, n-1]")
    return PublicKey(n=n, y=pow(secret, 2, n))


def setup(
    bits: int = DEFAULT_PRIME_BITS,
    rng: RandomSource | None = None,
    rounds: int = PRIMALITY_ROUNDS,
) -> KeyPair:
    """Generate the modulus, the prover's secret and the public value."""

    source = resolve(rng)
    p = generate_prime(bits, source, rounds)
    q = generate_prime(bits, source, rounds)
    while q == p:
        logger.debug("Prime collision, drawing q again")
        q = generate_prime(bits, source, rounds)

    n = p * q
    x = source.uniform_in_range(1, n - 1)
    logger.debug("Generated %d-bit modulus", n.bit_length())
    return KeyPair(public=derive_public_key(x, n), secret=SecretKey(x), p=p, q=q)


__all__ = ["KeyPair", "PublicKey", "SecretKey", "derive_public_key", "setup"]
