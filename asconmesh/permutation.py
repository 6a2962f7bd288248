"""Ascon permutation over a 320-bit state.

The state is a 40-byte buffer holding five 64-bit big-endian words. Each round
adds a constant to word 2, applies the bitsliced 5-bit S-box and then the
per-word linear layer. Every round touches every word the same way regardless
of the state contents.
"""

from __future__ import annotations

__all__ = [
    "STATE_BYTES",
    "MAX_ROUNDS",
    "ROUND_CONSTANTS",
    "round_constants",
    "load_words",
    "store_words",
    "permute_words",
    "permute",
]

STATE_BYTES = 40
MAX_ROUNDS = 12
MASK = 0xFFFFFFFFFFFFFFFF

# c_i = ((0xF - i) << 4) | i: 0xf0, 0xe1, ..., 0x4b
ROUND_CONSTANTS = tuple(((0xF - i) << 4) | i for i in range(MAX_ROUNDS))


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (64 - n))) & MASK


def round_constants(rounds: int) -> tuple[int, ...]:
    """Return the constants used by an ``rounds``-round permutation.

    A reduced permutation runs the trailing rounds of the 12-round schedule,
    so p6 uses c_6..c_11 and p8 uses c_4..c_11.
    """
    if not 1 <= rounds <= MAX_ROUNDS:
        raise ValueError(f"rounds must be between 1 and {MAX_ROUNDS}, got {rounds}")
    return ROUND_CONSTANTS[MAX_ROUNDS - rounds :]


def load_words(state) -> list[int]:
    """Split a 40-byte state into five big-endian 64-bit words."""
    if len(state) != STATE_BYTES:
        raise ValueError(f"state must be {STATE_BYTES} bytes")
    return [int.from_bytes(state[i : i + 8], "big") for i in range(0, STATE_BYTES, 8)]


def store_words(state: bytearray, words: list[int]) -> None:
    """Write five 64-bit words back into a 40-byte state, big-endian."""
    for i, x in enumerate(words):
        state[8 * i : 8 * i + 8] = x.to_bytes(8, "big")


def permute_words(words: list[int], rounds: int) -> None:
    """Apply ``rounds`` rounds to a list of five words in place."""
    x0, x1, x2, x3, x4 = words
    for c in round_constants(rounds):
        x2 ^= c
        # substitution layer
        x0 ^= x4
        x4 ^= x3
        x2 ^= x1
        t0 = ~x0 & x1
        t1 = ~x1 & x2
        t2 = ~x2 & x3
        t3 = ~x3 & x4
        t4 = ~x4 & x0
        x0 ^= t1
        x1 ^= t2
        x2 ^= t3
        x3 ^= t4
        x4 ^= t0
        x1 ^= x0
        x0 ^= x4
        x3 ^= x2
        x2 ^= MASK
        # linear layer
        x0 ^= _rotr(x0, 19) ^ _rotr(x0, 28)
        x1 ^= _rotr(x1, 61) ^ _rotr(x1, 39)
        x2 ^= _rotr(x2, 1) ^ _rotr(x2, 6)
        x3 ^= _rotr(x3, 10) ^ _rotr(x3, 17)
        x4 ^= _rotr(x4, 7) ^ _rotr(x4, 41)
    words[:] = [x0, x1, x2, x3, x4]


def permute(state: bytearray, rounds: int) -> None:
    """Apply ``rounds`` rounds of the permutation to a 40-byte state in place."""
    words = load_words(state)
    permute_words(words, rounds)
    store_words(state, words)
