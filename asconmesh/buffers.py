"""Fixed-capacity working buffers for asconmesh.

Padded associated data and message bodies are copied into buffers whose size
comes from configured limits, never from the length of an inbound message.
Lengths are checked against the limits before anything is copied. Memory is
owned by Python and zeroed once a call is done with it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .errors import InvalidMessageLength

__all__ = [
    "Buffer",
    "Limits",
    "DEFAULT_LIMITS",
    "DEFAULT_MAX_MESSAGE_BYTES",
    "DEFAULT_MAX_AD_BYTES",
    "padded_length",
    "pad_into",
    "Workspace",
]

Buffer = Union[bytes, bytearray, memoryview]

DEFAULT_MAX_MESSAGE_BYTES = 1024
DEFAULT_MAX_AD_BYTES = 256

PAD_BYTE = 0x80


@dataclass(frozen=True)
class Limits:
    """Largest plaintext and associated data a call will accept."""

    max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES
    max_ad_bytes: int = DEFAULT_MAX_AD_BYTES

    def __post_init__(self) -> None:
        for name in ("max_message_bytes", "max_ad_bytes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer")

    def check_message(self, length: int, what: str = "message") -> None:
        if length > self.max_message_bytes:
            raise InvalidMessageLength(
                f"{what} length {length} exceeds maximum {self.max_message_bytes}"
            )

    def check_ad(self, length: int) -> None:
        if length > self.max_ad_bytes:
            raise InvalidMessageLength(
                f"associated data length {length} exceeds maximum {self.max_ad_bytes}"
            )


DEFAULT_LIMITS = Limits()


def padded_length(length: int, rate: int) -> int:
    """Length after appending 0x80 and zero-filling to a multiple of ``rate``."""
    return (length // rate + 1) * rate


def pad_into(buf: bytearray, data: Buffer, rate: int) -> memoryview:
    """Copy ``data`` into ``buf`` followed by 0x80 and zeros up to a block boundary.

    Returns a view of the padded region of ``buf``.
    """
    n = len(data)
    total = padded_length(n, rate)
    if total > len(buf):
        raise InvalidMessageLength(
            f"padded length {total} exceeds buffer of {len(buf)}"
        )
    buf[:n] = data
    buf[n] = PAD_BYTE
    for i in range(n + 1, total):
        buf[i] = 0
    return memoryview(buf)[:total]


class Workspace:
    """Scratch buffers for one encrypt or decrypt call.

    Both buffers are allocated up front from ``limits`` and ``rate`` and are
    large enough for the longest accepted input plus its padding block.
    """

    __slots__ = ("limits", "rate", "_ad", "_body")

    def __init__(self, limits: Limits, rate: int) -> None:
        self.limits = limits
        self.rate = rate
        self._ad = bytearray(padded_length(limits.max_ad_bytes, rate))
        self._body = bytearray(padded_length(limits.max_message_bytes, rate))

    def pad_ad(self, ad: Buffer) -> memoryview:
        """Validate and pad associated data; empty AD yields an empty view."""
        self.limits.check_ad(len(ad))
        if not ad:
            return memoryview(self._ad)[:0]
        return pad_into(self._ad, ad, self.rate)

    def pad_message(self, message: Buffer) -> memoryview:
        """Validate and pad a plaintext."""
        self.limits.check_message(len(message), "plaintext")
        return pad_into(self._body, message, self.rate)

    def body(self, length: int) -> memoryview:
        """Return a writable view for ``length`` bytes of recovered plaintext."""
        self.limits.check_message(length, "ciphertext body")
        return memoryview(self._body)[:length]

    def wipe(self) -> None:
        """Zero both buffers."""
        for buf in (self._ad, self._body):
            buf[:] = bytes(len(buf))
