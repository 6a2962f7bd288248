"""One-shot authenticated encryption and decryption.

These functions are shared by the parameter-set modules
(:mod:`asconmesh.ascon128`, :mod:`asconmesh.ascon96`), which bind ``params``.

Simplified API: functions return newly allocated buffers or write into a
user-provided buffer via the optional ``into=`` (and ``tag_into=`` for the
detached form).
"""

from __future__ import annotations

from .buffers import DEFAULT_LIMITS, Buffer, Limits, Workspace
from .errors import (
    AuthenticationFailure,
    InvalidKeyLength,
    InvalidMessageLength,
    InvalidNonceLength,
)
from .params import ParameterSet
from .sponge import Duplex

__all__ = ["encrypt", "decrypt", "encrypt_detached", "decrypt_detached"]


def _check_key_nonce(params: ParameterSet, key: Buffer, nonce: Buffer) -> None:
    if len(key) != params.key_bytes:
        raise InvalidKeyLength(f"key length must be {params.key_bytes}")
    if len(nonce) != params.nonce_bytes:
        raise InvalidNonceLength(f"nonce length must be {params.nonce_bytes}")


def _check_limits(limits: Limits, length: int, ad: Buffer | None, what: str) -> None:
    limits.check_message(length, what)
    limits.check_ad(0 if ad is None else len(ad))


def _output(into: Buffer | None, size: int, what: str):
    if into is None:
        return bytearray(size)
    if len(into) < size:
        raise TypeError(f"{what} length must be at least {size}")
    return into


def _encrypt(params, key, nonce, message, ad, limits, ct_out, tag_out) -> None:
    ws = Workspace(limits, params.rate)
    sponge = Duplex(params)
    try:
        padded_ad = ws.pad_ad(b"" if ad is None else ad)
        padded = ws.pad_message(message)
        sponge.initialize(key, nonce)
        sponge.absorb_ad(padded_ad)
        sponge.encrypt_body(padded, len(message), ct_out)
        tag_out[: params.tag_bytes] = sponge.finalize()
    finally:
        sponge.wipe()
        ws.wipe()


def _decrypt(params, key, nonce, ct, tag, ad, limits, out) -> None:
    ws = Workspace(limits, params.rate)
    sponge = Duplex(params)
    try:
        padded_ad = ws.pad_ad(b"" if ad is None else ad)
        scratch = ws.body(len(ct))
        sponge.initialize(key, nonce)
        sponge.absorb_ad(padded_ad)
        sponge.decrypt_body(ct, scratch)
        if not sponge.verify(tag):
            raise AuthenticationFailure()
        out[: len(ct)] = scratch
    finally:
        sponge.wipe()
        ws.wipe()


def encrypt_detached(
    params: ParameterSet,
    key: Buffer,
    nonce: Buffer,
    message: Buffer,
    ad: Buffer | None = None,
    *,
    limits: Limits = DEFAULT_LIMITS,
    ct_into: Buffer | None = None,
    tag_into: Buffer | None = None,
) -> tuple[bytearray | memoryview, bytearray | memoryview]:
    """Encrypt message with associated data, returning ciphertext and tag separately.

    Args:
        params: Parameter set.
        key: Key (``params.key_bytes``).
        nonce: Nonce (``params.nonce_bytes``); never reuse one with the same key.
        message: The plaintext message to encrypt.
        ad: Associated data (optional).
        limits: Maximum plaintext and associated data lengths.
        ct_into: Buffer to write ciphertext into (default: bytearray created).
        tag_into: Buffer to write the tag into (default: bytearray created).

    Returns:
        Tuple of (ciphertext, tag)

    Raises:
        InvalidKeyLength: If the key length does not match the parameter set.
        InvalidNonceLength: If the nonce length does not match the parameter set.
        InvalidMessageLength: If message or ad exceed ``limits``.
        TypeError: If an output buffer is too small.
    """
    _check_key_nonce(params, key, nonce)
    _check_limits(limits, len(message), ad, "plaintext")
    c = _output(ct_into, len(message), "ct_into")
    tag = _output(tag_into, params.tag_bytes, "tag_into")
    _encrypt(
        params,
        key,
        nonce,
        message,
        ad,
        limits,
        memoryview(c)[: len(message)],
        memoryview(tag),
    )
    return (
        c if ct_into is None else memoryview(c)[: len(message)],
        tag if tag_into is None else memoryview(tag)[: params.tag_bytes],
    )


def decrypt_detached(
    params: ParameterSet,
    key: Buffer,
    nonce: Buffer,
    ct: Buffer,
    tag: Buffer,
    ad: Buffer | None = None,
    *,
    limits: Limits = DEFAULT_LIMITS,
    into: Buffer | None = None,
) -> bytearray | memoryview:
    """Decrypt ciphertext with a detached tag and associated data.

    Args:
        params: Parameter set.
        key: Key (``params.key_bytes``).
        nonce: Nonce (``params.nonce_bytes``).
        ct: The ciphertext body to decrypt.
        tag: The tag to verify (``params.tag_bytes``).
        ad: Associated data (optional).
        limits: Maximum plaintext and associated data lengths.
        into: Buffer to write plaintext into (default: bytearray created).

    Returns:
        Plaintext as bytearray if into not provided, memoryview of into otherwise.

    Raises:
        InvalidKeyLength: If the key length does not match the parameter set.
        InvalidNonceLength: If the nonce length does not match the parameter set.
        InvalidMessageLength: If the tag has the wrong length or ct/ad exceed ``limits``.
        AuthenticationFailure: If the tag does not verify. Nothing is written to into.
    """
    _check_key_nonce(params, key, nonce)
    if len(tag) != params.tag_bytes:
        raise InvalidMessageLength(f"tag length must be {params.tag_bytes}")
    _check_limits(limits, len(ct), ad, "ciphertext body")
    out = _output(into, len(ct), "into")
    _decrypt(params, key, nonce, memoryview(ct), tag, ad, limits, memoryview(out))
    return out if into is None else memoryview(out)[: len(ct)]


def encrypt(
    params: ParameterSet,
    key: Buffer,
    nonce: Buffer,
    message: Buffer,
    ad: Buffer | None = None,
    *,
    limits: Limits = DEFAULT_LIMITS,
    into: Buffer | None = None,
) -> bytearray | memoryview:
    """Encrypt message with associated data, returning ciphertext with appended tag.

    Args:
        params: Parameter set.
        key: Key (``params.key_bytes``).
        nonce: Nonce (``params.nonce_bytes``); never reuse one with the same key.
        message: The plaintext message to encrypt.
        ad: Associated data (optional).
        limits: Maximum plaintext and associated data lengths.
        into: Buffer to write ciphertext+tag into (default: bytearray created).

    Returns:
        Ciphertext with appended tag as bytearray if into not provided, memoryview of into otherwise.

    Raises:
        InvalidKeyLength: If the key length does not match the parameter set.
        InvalidNonceLength: If the nonce length does not match the parameter set.
        InvalidMessageLength: If message or ad exceed ``limits``.
        TypeError: If into is too small.
    """
    _check_key_nonce(params, key, nonce)
    _check_limits(limits, len(message), ad, "plaintext")
    size = len(message) + params.tag_bytes
    out = _output(into, size, "into")
    view = memoryview(out)
    _encrypt(
        params,
        key,
        nonce,
        message,
        ad,
        limits,
        view[: len(message)],
        view[len(message) : size],
    )
    return out if into is None else view[:size]


def decrypt(
    params: ParameterSet,
    key: Buffer,
    nonce: Buffer,
    ct: Buffer,
    ad: Buffer | None = None,
    *,
    limits: Limits = DEFAULT_LIMITS,
    into: Buffer | None = None,
) -> bytearray | memoryview:
    """Decrypt ciphertext with appended tag and associated data.

    Args:
        params: Parameter set.
        key: Key (``params.key_bytes``).
        nonce: Nonce (``params.nonce_bytes``).
        ct: The ciphertext with tag to decrypt.
        ad: Associated data (optional).
        limits: Maximum plaintext and associated data lengths.
        into: Buffer to write plaintext into (default: bytearray created).

    Returns:
        Plaintext as bytearray if into not provided, memoryview of into otherwise.

    Raises:
        InvalidKeyLength: If the key length does not match the parameter set.
        InvalidNonceLength: If the nonce length does not match the parameter set.
        InvalidMessageLength: If ct is shorter than the tag or exceeds ``limits``.
        AuthenticationFailure: If the tag does not verify. Nothing is written to into.
    """
    _check_key_nonce(params, key, nonce)
    if len(ct) < params.tag_bytes:
        raise InvalidMessageLength("ciphertext too short for tag")
    body_len = len(ct) - params.tag_bytes
    _check_limits(limits, body_len, ad, "ciphertext body")
    out = _output(into, body_len, "into")
    view = memoryview(ct)
    _decrypt(
        params,
        key,
        nonce,
        view[:body_len],
        view[body_len:],
        ad,
        limits,
        memoryview(out),
    )
    return out if into is None else memoryview(out)[:body_len]
