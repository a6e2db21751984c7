"""Fiat-Shamir zero-knowledge identification package."""

from .keys import KeyPair, PublicKey, SecretKey, derive_public_key, setup
from .primes import generate_prime, is_probable_prime
from .protocol import (
    Commitment,
    FiatShamirProver,
    FiatShamirVerifier,
    RoundTranscript,
    prover_commit,
    prover_respond,
    run_single_round,
    verifier_challenge,
    verifier_check,
)
from .rng import DeterministicRandomSource, RandomSource, SecureRandomSource
from .session import SessionResult, iter_rounds, run_session, run_session_transcript
from .simulation import CheatingProver, estimate_cheat_rate

__all__ = [
    "KeyPair",
    "PublicKey",
    "SecretKey",
    "derive_public_key",
    "setup",
    "generate_prime",
    "is_probable_prime",
    "Commitment",
    "FiatShamirProver",
    "FiatShamirVerifier",
    "RoundTranscript",
    "prover_commit",
    "prover_respond",
    "run_single_round",
    "verifier_challenge",
    "verifier_check",
    "DeterministicRandomSource",
    "RandomSource",
    "SecureRandomSource",
    "SessionResult",
    "iter_rounds",
    "run_session",
    "run_session_transcript",
    "CheatingProver",
    "estimate_cheat_rate",
]
