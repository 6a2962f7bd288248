"""Tests for the duplex controller and its phase ordering."""

import pytest

from asconmesh.buffers import pad_into, padded_length
from asconmesh.errors import InvalidKeyLength, InvalidNonceLength
from asconmesh.params import ASCON_96, ASCON_128
from asconmesh.permutation import STATE_BYTES, permute
from asconmesh.sponge import Duplex, Phase

KEY = bytes(range(16))
NONCE = bytes(range(100, 116))


def padded(data, rate):
    return pad_into(bytearray(padded_length(len(data), rate)), data, rate)


def ready(params=ASCON_128, key=KEY, nonce=NONCE, ad=b""):
    d = Duplex(params)
    d.initialize(key, nonce)
    d.absorb_ad(padded(ad, params.rate) if ad else b"")
    return d


def test_initial_state_layout():
    """Before p^a the state is IV || key || nonce; after it the key is XORed in."""
    d = Duplex(ASCON_128)
    d.initialize(KEY, NONCE)
    expected = bytearray(STATE_BYTES)
    expected[0:3] = bytes([128, 12, 6])
    expected[8:24] = KEY
    expected[24:40] = NONCE
    permute(expected, 12)
    for i in range(16):
        expected[24 + i] ^= KEY[i]
    assert d.state == expected
    assert d.phase is Phase.INITIALIZED


def test_ascon96_iv():
    key, nonce = bytes(12), bytes(12)
    d = Duplex(ASCON_96)
    d.initialize(key, nonce)
    expected = bytearray(STATE_BYTES)
    expected[0:3] = bytes([96, 12, 8])
    permute(expected, 12)
    assert d.state == expected


def test_empty_ad_only_flips_domain_bit():
    d = Duplex(ASCON_128)
    d.initialize(KEY, NONCE)
    before = bytes(d.state)
    d.absorb_ad(b"")
    diff = bytes(a ^ b for a, b in zip(before, d.state))
    assert diff == bytes(STATE_BYTES - 1) + b"\x01"
    assert d.phase is Phase.AD_ABSORBED


def test_encrypt_and_decrypt_leave_identical_state():
    """Decryption overwrites the rate with ciphertext, reproducing the encrypt state."""
    for params in (ASCON_128, ASCON_96):
        key = nonce = bytes(range(params.key_bytes))
        rate = params.rate
        for n in (0, 1, rate - 1, rate, rate + 3, 3 * rate):
            msg = bytes((7 * i + 1) & 0xFF for i in range(n))
            enc = ready(params, key, nonce, b"ad")
            ct = bytearray(n)
            enc.encrypt_body(padded(msg, params.rate), n, memoryview(ct))

            dec = ready(params, key, nonce, b"ad")
            pt = bytearray(n)
            dec.decrypt_body(memoryview(bytes(ct)), memoryview(pt))

            assert pt == msg
            assert dec.state == enc.state
            assert dec.finalize() == enc.finalize()


def test_verify_sets_terminal_phase():
    enc = ready()
    enc.encrypt_body(padded(b"hi", 8), 2, memoryview(bytearray(2)))
    tag = enc.finalize()
    assert enc.phase is Phase.FINALIZED

    bad = ready()
    bad.decrypt_body(b"\x00\x00", memoryview(bytearray(2)))
    assert not bad.verify(bytes(16))
    assert bad.phase is Phase.REJECTED

    good = ready()
    ct = bytearray(2)
    good_enc = ready()
    good_enc.encrypt_body(padded(b"hi", 8), 2, memoryview(ct))
    good.decrypt_body(bytes(ct), memoryview(bytearray(2)))
    assert good.verify(tag)
    assert good.phase is Phase.VERIFIED


class TestPhaseOrdering:
    """Test that no step can be skipped or repeated."""

    def test_absorb_before_initialize(self):
        d = Duplex(ASCON_128)
        with pytest.raises(RuntimeError, match="Cannot call absorb_ad\\(\\)"):
            d.absorb_ad(b"")

    def test_body_before_ad(self):
        d = Duplex(ASCON_128)
        d.initialize(KEY, NONCE)
        with pytest.raises(RuntimeError, match="phase INITIALIZED"):
            d.encrypt_body(padded(b"", 8), 0, memoryview(bytearray(0)))

    def test_finalize_before_body(self):
        d = ready()
        with pytest.raises(RuntimeError, match="Cannot call finalize\\(\\)"):
            d.finalize()

    def test_double_initialize(self):
        d = Duplex(ASCON_128)
        d.initialize(KEY, NONCE)
        with pytest.raises(RuntimeError):
            d.initialize(KEY, NONCE)

    def test_finalize_twice(self):
        d = ready()
        d.encrypt_body(padded(b"", 8), 0, memoryview(bytearray(0)))
        d.finalize()
        with pytest.raises(RuntimeError, match="phase FINALIZED"):
            d.finalize()

    def test_unpadded_ad_rejected(self):
        d = Duplex(ASCON_128)
        d.initialize(KEY, NONCE)
        with pytest.raises(ValueError, match="multiple of the rate"):
            d.absorb_ad(b"abc")


def test_wipe_clears_state():
    d = ready()
    d.wipe()
    assert d.state == bytes(STATE_BYTES)


@pytest.mark.parametrize(
    "key, nonce, error",
    [
        (bytes(12), NONCE, InvalidKeyLength),
        (KEY, bytes(12), InvalidNonceLength),
    ],
)
def test_initialize_length_errors(key, nonce, error):
    d = Duplex(ASCON_128)
    with pytest.raises(error):
        d.initialize(key, nonce)
    assert d.phase is Phase.UNINITIALIZED
