"""Parameter sets of the Ascon v1 AEAD family."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidKeyLength
from .permutation import MAX_ROUNDS, STATE_BYTES

__all__ = [
    "ParameterSet",
    "ASCON_128",
    "ASCON_96",
    "PARAMETER_SETS",
    "for_key_length",
]


@dataclass(frozen=True)
class ParameterSet:
    """Sizes and round counts derived from a key length.

    The capacity holds key || nonce, so it is twice the key length and the
    rate is whatever is left of the 40-byte state. Nonce and tag share the key
    length.
    """

    name: str
    key_bytes: int
    rounds_a: int
    rounds_b: int

    @property
    def nonce_bytes(self) -> int:
        return self.key_bytes

    @property
    def tag_bytes(self) -> int:
        return self.key_bytes

    @property
    def capacity(self) -> int:
        return 2 * self.key_bytes

    @property
    def rate(self) -> int:
        return STATE_BYTES - self.capacity

    @property
    def key_bits(self) -> int:
        return 8 * self.key_bytes


def _derive(name: str, key_bytes: int) -> ParameterSet:
    return ParameterSet(
        name=name,
        key_bytes=key_bytes,
        rounds_a=MAX_ROUNDS,
        rounds_b=6 if key_bytes == 16 else 8,
    )


ASCON_128 = _derive("Ascon-128", 16)
ASCON_96 = _derive("Ascon-96", 12)

PARAMETER_SETS = {p.key_bytes: p for p in (ASCON_128, ASCON_96)}


def for_key_length(key_bytes: int) -> ParameterSet:
    """Return the parameter set for a key of ``key_bytes`` bytes.

    Raises:
        InvalidKeyLength: If no parameter set uses that key length.
    """
    try:
        return PARAMETER_SETS[key_bytes]
    except KeyError:
        supported = ", ".join(str(n) for n in sorted(PARAMETER_SETS))
        raise InvalidKeyLength(
            f"key length must be one of {supported} bytes, got {key_bytes}"
        ) from None
