"""Credential codec adapters."""

from .base import (
    TokenCodec,
    TokenCodecConfigurationError,
    TokenFailure,
    TokenRejected,
    TokenVerification,
    VerifiedToken,
)
from .jwt_codec import JwtTokenCodec

__all__ = [
    "JwtTokenCodec",
    "TokenCodec",
    "TokenCodecConfigurationError",
    "TokenFailure",
    "TokenRejected",
    "TokenVerification",
    "VerifiedToken",
]
