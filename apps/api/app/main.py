"""FastAPI application entrypoint."""

from __future__ import annotations

from datetime import timedelta
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.adapters.auth import JwtTokenCodec
from app.adapters.notify import InMemoryOtpOutbox
from app.core.config import Settings, get_settings
from app.errors import ApiError
from app.repositories.memory import InMemoryStore
from app.routes import admin_router, auth_router, folktales_router
from app.schemas.error import ErrorResponse
from app.services.accounts import AccountService

logger = logging.getLogger(__name__)


def _bootstrap_admin(app: FastAPI, settings: Settings) -> None:
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        return
    AccountService(
        app.state.store,
        codec=app.state.token_codec,
        otp_delivery=app.state.otp_delivery,
    ).bootstrap_admin(
        email=settings.bootstrap_admin_email,
        username=settings.bootstrap_admin_username,
        password=settings.bootstrap_admin_password,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Settings are read once here. A missing signing secret fails this call
    (pydantic ``ValidationError`` or ``TokenCodecConfigurationError``), so a
    misconfigured process never starts serving requests.
    """
    settings = settings or get_settings()

    app = FastAPI(title="Legend Sansar API", version="1.0.0")
    app.state.settings = settings
    app.state.store = InMemoryStore()
    app.state.token_codec = JwtTokenCodec(
        settings.jwt_secret,
        ttl=timedelta(seconds=settings.token_ttl_seconds),
    )
    app.state.otp_delivery = InMemoryOtpOutbox()
    _bootstrap_admin(app, settings)

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_, exc: RequestValidationError) -> JSONResponse:
        payload = ErrorResponse(
            message="Validation failed",
            error="validation_error",
            details=jsonable_encoder(exc.errors()),
        )
        return JSONResponse(status_code=400, content=payload.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "request.failed method=%s path=%s error_type=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc_info=exc,
        )
        payload = ErrorResponse(message="Internal server error", error="server_error")
        return JSONResponse(status_code=500, content=payload.model_dump(exclude_none=True))

    api_prefix = "/api"
    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(folktales_router, prefix=api_prefix)
    app.include_router(admin_router, prefix=api_prefix)

    return app
