"""Core arithmetic for one round of the Fiat-Shamir identification protocol."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict

from .constants import CHALLENGE_BITS
from .keys import PublicKey, SecretKey
from .rng import RandomSource, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Commitment:
    """Prover's first message ``t = r**2 mod n`` and its private nonce ``r``."""

    t: int
    r: int = field(repr=False)


@dataclass(frozen=True)
class RoundTranscript:
    """Public record of a finished round. The nonce is not part of it."""

    index: int
    commitment: int
    challenge: int
    response: int
    accepted: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "round": self.index,
            "commitment": hex(self.commitment),
            "challenge": self.challenge,
            "response": hex(self.response),
            "accepted": self.accepted,
        }


def _check_arguments(c: int, n: int) -> None:
    if not 0 <= c < 2**CHALLENGE_BITS:
        raise ValueError("Challenge must be a single bit")
    if n < 2:
        raise ValueError("Modulus must be at least 2")


def prover_commit(n: int, rng: RandomSource | None = None) -> Commitment:
    r = resolve(rng).uniform_in_range(1, n - 1)
    return Commitment(t=pow(r, 2, n), r=r)


def verifier_challenge(rng: RandomSource | None = None) -> int:
    return resolve(rng).uniform_bit()


def prover_respond(r: int, x: int, c: int, n: int) -> int:
    """Answer challenge ``c`` with ``s = r * x**c mod n``."""

    _check_arguments(c, n)
    # x**c is reduced before the product, and the product is reduced again.
    return (r * pow(x, c, n)) % n


def verifier_check(s: int, t: int, y: int, c: int, n: int) -> bool:
    """Accept iff ``s**2 == t * y**c (mod n)``."""

    _check_arguments(c, n)
    left = pow(s, 2, n)
    right = (t * pow(y, c, n)) % n
    return left == right


class FiatShamirProver:
    """Prover holding the secret square root of the public value."""

    def __init__(
        self,
        secret: SecretKey,
        public: PublicKey,
        rng: RandomSource | None = None,
    ) -> None:
        if not 0 < secret.x < public.n:
            raise ValueError("Secret must lie in [1, n-1]")
        self.secret = secret
        self.public = public
        self.rng = resolve(rng)

    def commit(self) -> Commitment:
        return prover_commit(self.public.n, self.rng)

    def respond(self, commitment: Commitment, challenge: int) -> int:
        return prover_respond(commitment.r, self.secret.x, challenge, self.public.n)


class FiatShamirVerifier:
    """Verifier that only knows the public key."""

    def __init__(self, public: PublicKey, rng: RandomSource | None = None) -> None:
        self.public = public
        self.rng = resolve(rng)

    def challenge(self) -> int:
        return verifier_challenge(self.rng)

    def accepts_commitment(self, commitment_value: int) -> bool:
        """A commitment must be a unit modulo n; zero or a shared factor is degenerate."""

        n = self.public.n
        return 0 < commitment_value < n and math.gcd(commitment_value, n) == 1

    def verify(self, commitment_value: int, challenge: int, response: int) -> bool:
        if not self.accepts_commitment(commitment_value):
            return False
        return verifier_check(response, commitment_value, self.public.y, challenge, self.public.n)


def run_single_round(prover, verifier: FiatShamirVerifier, index: int = 1) -> RoundTranscript:
    """Run commit, challenge, respond and verify in that order."""

    commitment = prover.commit()
    challenge = verifier.challenge()
    response = prover.respond(commitment, challenge)
    accepted = verifier.verify(commitment.t, challenge, response)
    logger.debug("Round %d: c=%d %s", index, challenge, "accepted" if accepted else "rejected")
    return RoundTranscript(
        index=index,
        commitment=commitment.t,
        challenge=challenge,
        response=response,
        accepted=accepted,
    )


__all__ = [
    "Commitment",
    "FiatShamirProver",
    "FiatShamirVerifier",
    "RoundTranscript",
    "prover_commit",
    "prover_respond",
    "run_single_round",
    "verifier_challenge",
    "verifier_check",
]
