import pytest

from asconmesh.permutation import (
    ROUND_CONSTANTS,
    STATE_BYTES,
    load_words,
    permute,
    permute_words,
    round_constants,
)

from .util import P12_ZERO

P6_ZERO = bytes.fromhex(
    "160c84f20faad4f121495b1b0ae33eefe0377d04e23a914b2b23481598ffa8ea649af379ba83cd30"
)
P8_ZERO = bytes.fromhex(
    "1418f8af721aa830a5425f1f8cb31388a01ef761bf8e1652f01fdabf8c8a82b40168260badf76a06"
)


@pytest.mark.parametrize(
    "rounds, expected",
    [(12, P12_ZERO), (8, P8_ZERO), (6, P6_ZERO)],
    ids=["p12", "p8", "p6"],
)
def test_zero_state(rounds, expected):
    state = bytearray(STATE_BYTES)
    permute(state, rounds)
    assert state == expected


def test_round_constant_schedule():
    assert ROUND_CONSTANTS[0] == 0xF0
    assert ROUND_CONSTANTS[-1] == 0x4B
    assert len(ROUND_CONSTANTS) == 12


def test_partial_rounds_use_trailing_constants():
    assert round_constants(12) == ROUND_CONSTANTS
    assert round_constants(6) == (0x96, 0x87, 0x78, 0x69, 0x5A, 0x4B)
    assert round_constants(8)[0] == 0xB4


def test_p12_equals_p4_then_p8_tail():
    """p12 is the first four rounds followed by the trailing eight."""
    words = load_words(bytes(STATE_BYTES))
    for c in ROUND_CONSTANTS[:4]:
        # a single round with constant c, driven through a 1-round run by
        # pre-adjusting word 2 from the last constant to c
        words[2] ^= c ^ ROUND_CONSTANTS[-1]
        permute_words(words, 1)
    permute_words(words, 8)
    assert b"".join(w.to_bytes(8, "big") for w in words) == P12_ZERO


@pytest.mark.parametrize("rounds", [0, 13, -1])
def test_invalid_round_count(rounds):
    with pytest.raises(ValueError):
        permute(bytearray(STATE_BYTES), rounds)


def test_state_size_checked():
    with pytest.raises(ValueError):
        permute(bytearray(39), 12)


def test_words_are_big_endian():
    state = bytes(range(STATE_BYTES))
    assert load_words(state)[0] == 0x0001020304050607
    assert load_words(state)[4] == 0x2021222324252627
