"""HS256 JWT credential codec."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt

from app.adapters.auth.base import (
    TokenCodec,
    TokenCodecConfigurationError,
    TokenFailure,
    TokenRejected,
    TokenVerification,
    VerifiedToken,
)

_JWT_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(hours=1)


class JwtTokenCodec(TokenCodec):
    """Stateless codec keyed by a single shared secret.

    Tokens carry ``sub`` (user id), ``iat`` and ``exp``. A token is valid when
    the signature matches and ``now < exp``; nothing is stored server-side, so
    a token cannot be revoked before it expires.
    """

    def __init__(self, secret: str | None, *, ttl: timedelta = DEFAULT_TOKEN_TTL) -> None:
        if not secret or not secret.strip():
            raise TokenCodecConfigurationError("Token signing secret is not configured")
        self._secret = secret
        self._ttl = ttl

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, subject_id: str, *, now: datetime | None = None) -> str:
        if not subject_id:
            raise ValueError("subject_id must not be empty")
        issued_at = now or datetime.now(UTC)
        payload = {
            "sub": subject_id,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=_JWT_ALGORITHM)

    def verify(self, token: str) -> TokenVerification:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[_JWT_ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            return TokenRejected(TokenFailure.EXPIRED)
        except jwt.InvalidTokenError:
            return TokenRejected(TokenFailure.MALFORMED_OR_TAMPERED)

        subject_id = str(claims.get("sub") or "").strip()
        if not subject_id:
            return TokenRejected(TokenFailure.MISSING_SUBJECT)

        return VerifiedToken(
            subject_id=subject_id,
            issued_at=_timestamp(claims.get("iat")),
            expires_at=_timestamp(claims.get("exp")),
        )


def _timestamp(value: object) -> datetime | None:
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, UTC)
    return None


__all__ = ["DEFAULT_TOKEN_TTL", "JwtTokenCodec"]
