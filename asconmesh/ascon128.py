"""Ascon-128"""
# All parameter-set modules are generated from ascon128.py by tools/gen_modules.py!
# DO NOT EDIT OTHER PARAMETER-SET FILES MANUALLY!

import secrets

from . import aead
from .buffers import DEFAULT_LIMITS, Buffer, Limits
from .params import ASCON_128

PARAMS = ASCON_128
KEYBYTES = PARAMS.key_bytes
NPUBBYTES = PARAMS.nonce_bytes
ABYTES = PARAMS.tag_bytes
RATE = PARAMS.rate
ROUNDS_A = PARAMS.rounds_a
ROUNDS_B = PARAMS.rounds_b


def random_key() -> bytes:
    """Generate a random key using cryptographically secure random bytes."""
    return secrets.token_bytes(KEYBYTES)


def random_nonce() -> bytes:
    """Generate a random nonce using cryptographically secure random bytes."""
    return secrets.token_bytes(NPUBBYTES)


def encrypt_detached(
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

    See :func:`asconmesh.aead.encrypt_detached`.
    """
    return aead.encrypt_detached(
        PARAMS,
        key,
        nonce,
        message,
        ad,
        limits=limits,
        ct_into=ct_into,
        tag_into=tag_into,
    )


def decrypt_detached(
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

    See :func:`asconmesh.aead.decrypt_detached`.
    """
    return aead.decrypt_detached(
        PARAMS, key, nonce, ct, tag, ad, limits=limits, into=into
    )


def encrypt(
    key: Buffer,
    nonce: Buffer,
    message: Buffer,
    ad: Buffer | None = None,
    *,
    limits: Limits = DEFAULT_LIMITS,
    into: Buffer | None = None,
) -> bytearray | memoryview:
    """Encrypt message with associated data, returning ciphertext with appended tag.

    See :func:`asconmesh.aead.encrypt`.
    """
    return aead.encrypt(PARAMS, key, nonce, message, ad, limits=limits, into=into)


def decrypt(
    key: Buffer,
    nonce: Buffer,
    ct: Buffer,
    ad: Buffer | None = None,
    *,
    limits: Limits = DEFAULT_LIMITS,
    into: Buffer | None = None,
) -> bytearray | memoryview:
    """Decrypt ciphertext with appended tag and associated data.

    See :func:`asconmesh.aead.decrypt`.
    """
    return aead.decrypt(PARAMS, key, nonce, ct, ad, limits=limits, into=into)


__all__ = [
    # constants
    "PARAMS",
    "KEYBYTES",
    "NPUBBYTES",
    "ABYTES",
    "RATE",
    "ROUNDS_A",
    "ROUNDS_B",
    # helpers
    "random_key",
    "random_nonce",
    # one-shot functions
    "encrypt_detached",
    "decrypt_detached",
    "encrypt",
    "decrypt",
]
