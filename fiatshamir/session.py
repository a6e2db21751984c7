"""Multi-round sessions with all-or-nothing acceptance."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

from .constants import DEFAULT_ROUNDS, RECOMMENDED_MAX_ROUNDS
from .keys import KeyPair
from .protocol import FiatShamirProver, FiatShamirVerifier, RoundTranscript, run_single_round
from .rng import RandomSource, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionResult:
    rounds_requested: int
    transcripts: Tuple[RoundTranscript, ...]
    success: bool

    @property
    def failed_round(self) -> int | None:
        for transcript in self.transcripts:
            if not transcript.accepted:
                return transcript.index
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "rounds_requested": self.rounds_requested,
            "rounds": [transcript.to_dict() for transcript in self.transcripts],
            "success": self.success,
        }


def iter_rounds(
    prover,
    verifier: FiatShamirVerifier,
    rounds: int = DEFAULT_ROUNDS,
) -> Iterator[RoundTranscript]:
    """Yield each round's transcript, stopping after the first rejection."""

    if rounds < 1:
        raise ValueError("A session needs at least one round")
    if rounds > RECOMMENDED_MAX_ROUNDS:
        logger.debug("%d rounds requested, beyond %d the gain per round is marginal", rounds, RECOMMENDED_MAX_ROUNDS)

    for index in range(1, rounds + 1):
        transcript = run_single_round(prover, verifier, index)
        yield transcript
        if not transcript.accepted:
            logger.debug("Aborting session at round %d of %d", index, rounds)
            return


def _honest_parties(keys: KeyPair, rng: RandomSource | None):
    source = resolve(rng)
    prover = FiatShamirProver(keys.secret, keys.public, source)
    verifier = FiatShamirVerifier(keys.public, source)
    return prover, verifier


def run_session(
    keys: KeyPair,
    rounds: int = DEFAULT_ROUNDS,
    rng: RandomSource | None = None,
) -> bool:
    """Run an honest prover against a verifier and return the verdict."""

    prover, verifier = _honest_parties(keys, rng)
    return all(transcript.accepted for transcript in iter_rounds(prover, verifier, rounds))


def run_session_transcript(
    keys: KeyPair,
    rounds: int = DEFAULT_ROUNDS,
    rng: RandomSource | None = None,
) -> SessionResult:
    """Like :func:`run_session` but keep the executed rounds."""

    prover, verifier = _honest_parties(keys, rng)
    transcripts = tuple(iter_rounds(prover, verifier, rounds))
    success = len(transcripts) == rounds and all(t.accepted for t in transcripts)
    return SessionResult(rounds_requested=rounds, transcripts=transcripts, success=success)


__all__ = ["SessionResult", "iter_rounds", "run_session", "run_session_transcript"]
