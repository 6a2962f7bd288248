"""Exceptions raised by asconmesh.

Length problems are also ``TypeError`` and authentication failures are also
``ValueError``, so callers may catch either the specific class or the builtin.
"""

from enum import Enum

__all__ = [
    "ErrorKind",
    "AsconError",
    "InvalidKeyLength",
    "InvalidNonceLength",
    "InvalidMessageLength",
    "AuthenticationFailure",
]


class ErrorKind(str, Enum):
    INVALID_KEY_LENGTH = "INVALID_KEY_LENGTH"
    INVALID_NONCE_LENGTH = "INVALID_NONCE_LENGTH"
    INVALID_MESSAGE_LENGTH = "INVALID_MESSAGE_LENGTH"
    AUTH_FAILURE = "AUTH_FAILURE"


class AsconError(Exception):
    """Base class for all cipher errors."""

    kind: ErrorKind


class InvalidKeyLength(AsconError, TypeError):
    kind = ErrorKind.INVALID_KEY_LENGTH


class InvalidNonceLength(AsconError, TypeError):
    kind = ErrorKind.INVALID_NONCE_LENGTH


class InvalidMessageLength(AsconError, TypeError):
    kind = ErrorKind.INVALID_MESSAGE_LENGTH


class AuthenticationFailure(AsconError, ValueError):
    kind = ErrorKind.AUTH_FAILURE

    def __init__(self, message: str = "authentication failed") -> None:
        super().__init__(message)
