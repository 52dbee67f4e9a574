"""Credential codec interfaces and verification results."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TokenCodecConfigurationError(RuntimeError):
    """Raised at startup when the codec cannot be built from configuration."""


class TokenFailure(str, Enum):
    MALFORMED_OR_TAMPERED = "malformed_or_tampered"
    EXPIRED = "expired"
    MISSING_SUBJECT = "missing_subject"


@dataclass(frozen=True, slots=True)
class VerifiedToken:
    subject_id: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class TokenRejected:
    reason: TokenFailure


TokenVerification = VerifiedToken | TokenRejected


class TokenCodec(ABC):
    """Signs and verifies bearer credentials carrying a principal identifier."""

    @abstractmethod
    def issue(self, subject_id: str, *, now: datetime | None = None) -> str:
        """Return a signed token for ``subject_id``."""

    @abstractmethod
    def verify(self, token: str) -> TokenVerification:
        """Verify ``token``; expected failures are returned, not raised."""


__all__ = [
    "TokenCodec",
    "TokenCodecConfigurationError",
    "TokenFailure",
    "TokenRejected",
    "TokenVerification",
    "VerifiedToken",
]
