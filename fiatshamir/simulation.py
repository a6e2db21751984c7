"""Simulated cheating prover for measuring the protocol's soundness."""

from __future__ import annotations

from .constants import DEFAULT_ROUNDS
from .keys import PublicKey
from .protocol import Commitment, FiatShamirVerifier
from .rng import RandomSource, resolve
from .session import iter_rounds


class CheatingProver:
    """Prover that does not know the secret and guesses the challenge.

    Before committing it picks a guess. For guess 0 it commits ``t = r**2``
    and will answer ``r``. For guess 1 it picks the answer ``s`` first and
    commits ``t = s**2 / y``. Either way its answer is fixed before the
    challenge arrives, so it only passes when the guess was right.
    """

    def __init__(self, public: PublicKey, rng: RandomSource | None = None) -> None:
        self.public = public
        self.rng = resolve(rng)
        try:
            self._y_inverse = pow(public.y, -1, public.n)
        except ValueError as exc:
            raise ValueError("Public value is not invertible modulo n") from exc

    def commit(self) -> Commitment:
        n = self.public.n
        answer = self.rng.uniform_in_range(1, n - 1)
        if self.rng.uniform_bit():
            t = (pow(answer, 2, n) * self._y_inverse) % n
        else:
            t = pow(answer, 2, n)
        # The planned answer rides in the nonce slot.
        return Commitment(t=t, r=answer)

    def respond(self, commitment: Commitment, challenge: int) -> int:
        return commitment.r


def estimate_cheat_rate(
    public: PublicKey,
    trials: int,
    rounds: int = DEFAULT_ROUNDS,
    rng: RandomSource | None = None,
) -> float:
    """Fraction of ``trials`` sessions a cheating prover gets accepted in."""

    if trials < 1:
        raise ValueError("At least one trial is required")
    source = resolve(rng)
    prover = CheatingProver(public, source)
    verifier = FiatShamirVerifier(public, source)
    passed = 0
    for _ in range(trials):
        transcripts = list(iter_rounds(prover, verifier, rounds))
        if len(transcripts) == rounds and transcripts[-1].accepted:
            passed += 1
    return passed / trials


__all__ = ["CheatingProver", "estimate_cheat_rate"]
