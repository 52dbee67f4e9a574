"""Dependency wiring for routes."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader

from app.adapters.auth import TokenCodec
from app.adapters.notify import OtpDelivery
from app.core.config import Settings
from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.schemas.auth import Principal
from app.services.accounts import AccountService
from app.services.admin_folktales import AdminFolktaleService
from app.services.auth_gate import (
    AUTH_REQUIRED,
    GateOutcome,
    Rejected,
    authenticate,
    authorize_admin,
)
from app.services.cascade_delete import CascadingDeleteCoordinator
from app.services.folktales import FolktaleService
from app.services.principals import PrincipalResolver

# Raw header so the gate can tell a missing header from an empty token.
authorization_header = APIKeyHeader(
    name="Authorization",
    auto_error=False,
    scheme_name="bearerAuth",
    description="Bearer <token>",
)
logger = logging.getLogger(__name__)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec | None:
    return getattr(request.app.state, "token_codec", None)


def get_otp_delivery(request: Request) -> OtpDelivery:
    return request.app.state.otp_delivery


def get_principal_resolver(store: Annotated[InMemoryStore, Depends(get_store)]) -> PrincipalResolver:
    return PrincipalResolver(store)


async def get_authentication_outcome(
    authorization: Annotated[str | None, Security(authorization_header)],
    codec: Annotated[TokenCodec | None, Depends(get_token_codec)],
    resolver: Annotated[PrincipalResolver, Depends(get_principal_resolver)],
) -> GateOutcome:
    return authenticate(authorization, codec=codec, resolver=resolver)


def _admit(request: Request, outcome: GateOutcome, *, gate: str) -> Principal:
    """Attach the principal to the request, or raise the gate's rejection."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")

    if not isinstance(outcome, Rejected) and outcome.principal is None:
        outcome = AUTH_REQUIRED

    if isinstance(outcome, Rejected):
        log = logger.error if outcome.status_code >= 500 else logger.warning
        log(
            "%s.rejected correlation_id=%s method=%s path=%s status=%d reason=%s",
            gate,
            safe_correlation_id,
            request.method,
            request.url.path,
            outcome.status_code,
            outcome.code,
        )
        raise ApiError(status_code=outcome.status_code, code=outcome.code, message=outcome.message)

    principal = outcome.principal
    logger.info(
        "%s.accepted correlation_id=%s method=%s path=%s principal_id=%s is_admin=%s",
        gate,
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.id, prefix="uid"),
        principal.is_admin,
    )
    request.state.principal = principal
    return principal


async def get_authenticated_principal(
    request: Request,
    outcome: Annotated[GateOutcome, Depends(get_authentication_outcome)],
) -> Principal:
    """Validate the bearer token and attach the principal to request context."""
    return _admit(request, outcome, gate="auth")


async def get_admin_principal(
    request: Request,
    outcome: Annotated[GateOutcome, Depends(get_authentication_outcome)],
) -> Principal:
    """Like :func:`get_authenticated_principal`, but only admits administrators."""
    return _admit(request, authorize_admin(outcome), gate="admin")


def get_account_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    codec: Annotated[TokenCodec | None, Depends(get_token_codec)],
    otp_delivery: Annotated[OtpDelivery, Depends(get_otp_delivery)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AccountService:
    if codec is None:
        logger.error("auth.config_error reason=token_codec_missing")
        raise ApiError(
            status_code=500,
            code="server_config_error",
            message="Internal server error: Configuration issue",
        )
    return AccountService(
        store,
        codec=codec,
        otp_delivery=otp_delivery,
        otp_ttl=timedelta(minutes=settings.otp_ttl_minutes),
    )


def get_folktale_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> FolktaleService:
    return FolktaleService(store)


def get_cascade_delete_coordinator(
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> CascadingDeleteCoordinator:
    return CascadingDeleteCoordinator(store)


def get_admin_folktale_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    coordinator: Annotated[CascadingDeleteCoordinator, Depends(get_cascade_delete_coordinator)],
) -> AdminFolktaleService:
    return AdminFolktaleService(store, coordinator)
