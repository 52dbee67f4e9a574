"""Authentication and authorization gates.

Both gates are plain functions returning a tagged outcome. ``authenticate``
turns an ``Authorization`` header into an :class:`Authenticated` principal or a
:class:`Rejected` outcome carrying the HTTP status and stable error code.
``authorize_admin`` takes that outcome and additionally requires the
administrator flag. A rejected authentication passes through it unchanged, so
401 ("who are you?") stays distinct from 403 ("not allowed").
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol

from app.adapters.auth import TokenCodec, TokenFailure, TokenRejected
from app.schemas.auth import Principal

logger = logging.getLogger(__name__)

_BEARER_SCHEME = "bearer"


class SubjectResolver(Protocol):
    def resolve(self, subject_id: str) -> Principal | None: ...


@dataclass(frozen=True, slots=True)
class Authenticated:
    principal: Principal | None


@dataclass(frozen=True, slots=True)
class Rejected:
    status_code: int
    code: str
    message: str


GateOutcome = Authenticated | Rejected


NO_AUTH_HEADER = Rejected(401, "no_auth_header", "Authorization header missing or improperly formatted")
EMPTY_TOKEN = Rejected(401, "empty_token", "Authentication token is empty")
SERVER_CONFIG_ERROR = Rejected(500, "server_config_error", "Internal server error: Configuration issue")
INVALID_TOKEN = Rejected(401, "invalid_token", "Invalid or malformed token")
TOKEN_EXPIRED = Rejected(401, "token_expired", "Token has expired")
INVALID_TOKEN_PAYLOAD = Rejected(401, "invalid_token_payload", "Invalid token payload")
USER_NOT_FOUND = Rejected(401, "user_not_found", "User not found or account deleted")
SERVER_ERROR = Rejected(500, "server_error", "Internal server error during authentication")
AUTH_REQUIRED = Rejected(401, "auth_required", "Authentication required")
ADMIN_ACCESS_DENIED = Rejected(403, "admin_access_denied", "Administrator access required")

_TOKEN_FAILURES: dict[TokenFailure, Rejected] = {
    TokenFailure.MALFORMED_OR_TAMPERED: INVALID_TOKEN,
    TokenFailure.EXPIRED: TOKEN_EXPIRED,
    TokenFailure.MISSING_SUBJECT: INVALID_TOKEN_PAYLOAD,
}


def extract_bearer_token(authorization: str | None) -> str | Rejected:
    """Split ``Bearer <token>``; the scheme match is case-insensitive."""
    if not authorization:
        return NO_AUTH_HEADER
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != _BEARER_SCHEME:
        return NO_AUTH_HEADER
    token = token.strip()
    if not token:
        return EMPTY_TOKEN
    return token


def authenticate(
    authorization: str | None,
    *,
    codec: TokenCodec | None,
    resolver: SubjectResolver,
) -> GateOutcome:
    token = extract_bearer_token(authorization)
    if isinstance(token, Rejected):
        return token

    if codec is None:
        logger.error("auth.config_error reason=token_codec_missing")
        return SERVER_CONFIG_ERROR

    try:
        verification = codec.verify(token)
        if isinstance(verification, TokenRejected):
            return _TOKEN_FAILURES[verification.reason]

        principal = resolver.resolve(verification.subject_id)
    except Exception:
        logger.exception("auth.error reason=unexpected_failure")
        return SERVER_ERROR

    if principal is None:
        return USER_NOT_FOUND
    return Authenticated(principal)


def authorize_admin(outcome: GateOutcome) -> GateOutcome:
    if isinstance(outcome, Rejected):
        return outcome
    if outcome.principal is None:
        return AUTH_REQUIRED
    if not outcome.principal.is_admin:
        return ADMIN_ACCESS_DENIED
    return outcome


__all__ = [
    "ADMIN_ACCESS_DENIED",
    "AUTH_REQUIRED",
    "Authenticated",
    "GateOutcome",
    "Rejected",
    "SubjectResolver",
    "authenticate",
    "authorize_admin",
    "extract_bearer_token",
]
