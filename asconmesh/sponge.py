"""Duplex controller driving the permutation for one AEAD call.

A :class:`Duplex` owns a fresh 40-byte state and walks it through
initialization, associated-data absorption, body processing and finalization.
The steps must be called in that order; skipping or repeating one raises
``RuntimeError``.
"""

from __future__ import annotations

import hmac
from enum import Enum

from .buffers import PAD_BYTE, Buffer
from .errors import InvalidKeyLength, InvalidNonceLength
from .params import ParameterSet
from .permutation import STATE_BYTES, permute

__all__ = ["Phase", "Duplex"]


class Phase(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    AD_ABSORBED = "ad_absorbed"
    BODY_PROCESSED = "body_processed"
    FINALIZED = "finalized"
    VERIFIED = "verified"
    REJECTED = "rejected"


class Duplex:
    """Sponge state for a single encryption or decryption."""

    __slots__ = ("params", "state", "phase", "_key")

    def __init__(self, params: ParameterSet) -> None:
        self.params = params
        self.state = bytearray(STATE_BYTES)
        self.phase = Phase.UNINITIALIZED
        self._key = b""

    def _enter(self, expected: Phase, new: Phase, action: str) -> None:
        if self.phase is not expected:
            raise RuntimeError(f"Cannot call {action}() in phase {self.phase.name}")
        self.phase = new

    def _xor_into(self, offset: int, data: Buffer) -> None:
        n = len(data)
        if not n:
            return
        x = int.from_bytes(self.state[offset : offset + n], "big")
        x ^= int.from_bytes(data, "big")
        self.state[offset : offset + n] = x.to_bytes(n, "big")

    def initialize(self, key: Buffer, nonce: Buffer) -> None:
        """Load the IV, key and nonce, run p^a and whiten with the key."""
        p = self.params
        if len(key) != p.key_bytes:
            raise InvalidKeyLength(f"{p.name} key length must be {p.key_bytes}")
        if len(nonce) != p.nonce_bytes:
            raise InvalidNonceLength(f"{p.name} nonce length must be {p.nonce_bytes}")
        self._enter(Phase.UNINITIALIZED, Phase.INITIALIZED, "initialize")
        self._key = bytes(key)
        s = self.state
        s[0] = p.key_bits
        s[1] = p.rounds_a
        s[2] = p.rounds_b
        s[3 : p.rate] = bytes(p.rate - 3)
        s[p.rate : p.rate + p.key_bytes] = key
        s[p.rate + p.key_bytes :] = nonce
        permute(s, p.rounds_a)
        self._xor_into(STATE_BYTES - p.key_bytes, self._key)

    def absorb_ad(self, padded_ad: Buffer) -> None:
        """Absorb already padded associated data, then flip the domain bit.

        ``padded_ad`` is empty when there is no associated data; otherwise its
        length is a multiple of the rate. The domain separation bit is set in
        both cases.
        """
        rate = self.params.rate
        if len(padded_ad) % rate:
            raise ValueError("padded associated data must be a multiple of the rate")
        self._enter(Phase.INITIALIZED, Phase.AD_ABSORBED, "absorb_ad")
        for i in range(0, len(padded_ad), rate):
            self._xor_into(0, padded_ad[i : i + rate])
            permute(self.state, self.params.rounds_b)
        self.state[STATE_BYTES - 1] ^= 0x01

    def encrypt_body(self, padded: Buffer, length: int, out) -> None:
        """Encrypt a padded plaintext of ``length`` bytes into ``out``.

        Each rate-sized block is XORed into the state and the resulting rate
        bytes are the ciphertext. Only ``length`` bytes are written; the
        padding of the final block never leaves the state.
        """
        rate = self.params.rate
        if len(padded) != (length // rate + 1) * rate:
            raise ValueError("padded plaintext does not match its length")
        self._enter(Phase.AD_ABSORBED, Phase.BODY_PROCESSED, "encrypt_body")
        last = len(padded) - rate
        for i in range(0, last, rate):
            self._xor_into(0, padded[i : i + rate])
            out[i : i + rate] = self.state[:rate]
            permute(self.state, self.params.rounds_b)
        self._xor_into(0, padded[last:])
        tail = length - last
        out[last:length] = self.state[:tail]

    def decrypt_body(self, ciphertext: Buffer, out) -> None:
        """Decrypt a ciphertext body into ``out``.

        For every full block the rate is replaced by the ciphertext block.
        For the final partial block of ``l`` bytes, the first ``l`` rate bytes
        are replaced and the byte after them gets the padding bit.
        """
        rate = self.params.rate
        self._enter(Phase.AD_ABSORBED, Phase.BODY_PROCESSED, "decrypt_body")
        n = len(ciphertext)
        last = n - n % rate
        for i in range(0, last, rate):
            c = ciphertext[i : i + rate]
            self._xor_into(0, c)
            out[i : i + rate] = self.state[:rate]
            self.state[:rate] = c
            permute(self.state, self.params.rounds_b)
        c = ciphertext[last:]
        tail = n - last
        self._xor_into(0, c)
        out[last:n] = self.state[:tail]
        self.state[:tail] = c
        self.state[tail] ^= PAD_BYTE

    def finalize(self) -> bytes:
        """Run the keyed finalization and return the tag."""
        p = self.params
        self._enter(Phase.BODY_PROCESSED, Phase.FINALIZED, "finalize")
        self._xor_into(p.rate, self._key)
        permute(self.state, p.rounds_a)
        self._xor_into(STATE_BYTES - p.key_bytes, self._key)
        return bytes(self.state[STATE_BYTES - p.key_bytes :])

    def verify(self, tag: Buffer) -> bool:
        """Finalize and compare every byte of ``tag`` against the computed tag."""
        expected = self.finalize()
        ok = hmac.compare_digest(expected, bytes(tag))
        self.phase = Phase.VERIFIED if ok else Phase.REJECTED
        return ok

    def wipe(self) -> None:
        """Zero the state and drop the key reference."""
        self.state[:] = bytes(STATE_BYTES)
        self._key = b""
