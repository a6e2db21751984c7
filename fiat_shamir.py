"""Command line driver for the Fiat-Shamir identification demo."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from fiatshamir.constants import DEFAULT_PRIME_BITS, DEFAULT_ROUNDS
from fiatshamir.keys import setup
from fiatshamir.protocol import FiatShamirProver, FiatShamirVerifier
from fiatshamir.session import iter_rounds, run_session_transcript
from fiatshamir.simulation import estimate_cheat_rate


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _prime_bits(value: str) -> int:
    number = int(value)
    if number < 2:
        raise argparse.ArgumentTypeError("primes need at least 2 bits")
    return number


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log protocol internals to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    bits_help = f"Bit length of each prime factor (default: {DEFAULT_PRIME_BITS})"
    rounds_help = f"Number of protocol rounds (default: {DEFAULT_ROUNDS})"

    demo_parser = subparsers.add_parser("demo", help="Run a prover and a verifier through a session")
    demo_parser.add_argument("--bits", type=_prime_bits, default=DEFAULT_PRIME_BITS, help=bits_help)
    demo_parser.add_argument("--rounds", type=_positive_int, default=DEFAULT_ROUNDS, help=rounds_help)
    demo_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the session as JSON instead of a round by round log",
    )

    keygen_parser = subparsers.add_parser("keygen", help="Generate and print a key pair")
    keygen_parser.add_argument("--bits", type=_prime_bits, default=DEFAULT_PRIME_BITS, help=bits_help)

    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Measure how often a prover without the secret is accepted",
    )
    simulate_parser.add_argument("--bits", type=_prime_bits, default=DEFAULT_PRIME_BITS, help=bits_help)
    simulate_parser.add_argument("--rounds", type=_positive_int, default=1, help="Rounds per session (default: 1)")
    simulate_parser.add_argument("--trials", type=_positive_int, default=1000, help="Sessions to simulate (default: 1000)")

    return parser.parse_args(argv)


def run_demo(bits: int, rounds: int, as_json: bool) -> int:
    keys = setup(bits)

    if as_json:
        result = run_session_transcript(keys, rounds)
        payload = {"public_key": keys.public.to_dict(), **result.to_dict()}
        print(json.dumps(payload, indent=2))
        return 0 if result.success else 1

    prover = FiatShamirProver(keys.secret, keys.public)
    verifier = FiatShamirVerifier(keys.public)

    print("Public key:")
    print(f"n = {keys.n}")
    print(f"y = {keys.y}")

    success = True
    for transcript in iter_rounds(prover, verifier, rounds):
        print(f"\nRound {transcript.index} of {rounds}:")
        print(f"Prover's commitment: t = {transcript.commitment}")
        print(f"Verifier's challenge: c = {transcript.challenge}")
        print(f"Prover's response: s = {transcript.response}")
        if transcript.accepted:
            print(f"Verification successful at round {transcript.index}")
        else:
            print(f"Verification failed at round {transcript.index}")
            success = False

    if success:
        print("\nThe prover successfully completed all rounds!")
        return 0
    print("\nThe prover failed in one or more rounds.")
    return 1


def main(argv: list[str] | None = None) -> int:
    namespace = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if namespace.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if namespace.command == "demo":
        return run_demo(namespace.bits, namespace.rounds, namespace.json)

    if namespace.command == "keygen":
        keys = setup(namespace.bits)
        print(json.dumps(keys.to_dict(), indent=2))
        return 0

    if namespace.command == "simulate":
        keys = setup(namespace.bits)
        rate = estimate_cheat_rate(keys.public, namespace.trials, namespace.rounds)
        payload = {
            "rounds": namespace.rounds,
            "trials": namespace.trials,
            "pass_rate": rate,
            "expected": 2.0 ** -namespace.rounds,
        }
        print(json.dumps(payload, indent=2))
        return 0

    raise RuntimeError("Unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
