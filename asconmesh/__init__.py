"""Ascon authenticated encryption for short mesh telemetry messages.

Use a parameter-set module directly (:mod:`asconmesh.ascon128`,
:mod:`asconmesh.ascon96`), or the package-level :func:`encrypt` and
:func:`decrypt`, which pick the parameter set from the key length.
"""

from importlib.metadata import PackageNotFoundError, version

from . import aead, ascon96, ascon128
from .buffers import DEFAULT_LIMITS, Buffer, Limits
from .errors import (
    AsconError,
    AuthenticationFailure,
    ErrorKind,
    InvalidKeyLength,
    InvalidMessageLength,
    InvalidNonceLength,
)
from .params import ASCON_96, ASCON_128, ParameterSet, for_key_length

try:
    __version__ = version("asconmesh")
except PackageNotFoundError:
    __version__ = "0.0.0"


def encrypt(
    key: Buffer,
    nonce: Buffer,
    message: Buffer,
    ad: Buffer | None = None,
    *,
    limits: Limits = DEFAULT_LIMITS,
) -> bytes:
    """Encrypt ``message`` and return ciphertext || tag.

    The parameter set is chosen from ``len(key)``; an unsupported key length
    raises :class:`InvalidKeyLength`.
    """
    params = for_key_length(len(key))
    return bytes(aead.encrypt(params, key, nonce, message, ad, limits=limits))


def decrypt(
    key: Buffer,
    nonce: Buffer,
    ct: Buffer,
    ad: Buffer | None = None,
    *,
    limits: Limits = DEFAULT_LIMITS,
) -> bytes:
    """Verify and decrypt ciphertext || tag, returning the plaintext.

    Raises :class:`AuthenticationFailure` if the tag does not match; no
    plaintext is released in that case.
    """
    params = for_key_length(len(key))
    return bytes(aead.decrypt(params, key, nonce, ct, ad, limits=limits))


__all__ = [
    "__version__",
    "encrypt",
    "decrypt",
    "ascon128",
    "ascon96",
    "Limits",
    "DEFAULT_LIMITS",
    "ParameterSet",
    "ASCON_128",
    "ASCON_96",
    "for_key_length",
    "ErrorKind",
    "AsconError",
    "InvalidKeyLength",
    "InvalidNonceLength",
    "InvalidMessageLength",
    "AuthenticationFailure",
]
