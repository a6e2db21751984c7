"""Protocol parameters shared by the prover, the verifier and the demo tools."""

# Bit length of each prime factor of the modulus. 128-bit factors keep the
# demo fast; use 1024 or more for anything that must resist factoring.
DEFAULT_PRIME_BITS = 128

# Miller-Rabin repetitions, error probability <= 4**-50.
PRIMALITY_ROUNDS = 50

# Each round halves a cheater's chance of passing.
DEFAULT_ROUNDS = 10
RECOMMENDED_MAX_ROUNDS = 20

CHALLENGE_BITS = 1

# Verifier service sessions idle longer than this are dropped.
SESSION_TTL_SECONDS = 300
