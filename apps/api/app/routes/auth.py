"""Account routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.routes.dependencies import get_account_service, get_authenticated_principal
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    Principal,
    ProfileUpdateResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UpdateProfileRequest,
    VerifyOtpRequest,
)
from app.schemas.error import ErrorResponse
from app.services.accounts import AccountService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def register(
    payload: RegisterRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> MessageResponse:
    return service.register(username=payload.username, email=payload.email, password=payload.password)


@router.post("/verify-otp", response_model=TokenResponse, responses={400: {"model": ErrorResponse}})
async def verify_otp(
    payload: VerifyOtpRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> TokenResponse:
    return service.verify_otp(email=payload.email, otp=payload.otp)


@router.post("/login", response_model=TokenResponse, responses={400: {"model": ErrorResponse}})
async def login(
    payload: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> TokenResponse:
    return service.login(email=payload.email, password=payload.password)


@router.post("/forgot-password", response_model=MessageResponse, responses={400: {"model": ErrorResponse}})
async def forgot_password(
    payload: ForgotPasswordRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> MessageResponse:
    return service.forgot_password(email=payload.email)


@router.post("/reset-password", response_model=MessageResponse, responses={400: {"model": ErrorResponse}})
async def reset_password(
    payload: ResetPasswordRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> MessageResponse:
    return service.reset_password(email=payload.email, otp=payload.otp, new_password=payload.new_password)


@router.get("/me", response_model=Principal, responses={401: {"model": ErrorResponse}})
async def me(principal: Annotated[Principal, Depends(get_authenticated_principal)]) -> Principal:
    return principal


@router.put(
    "/update-profile",
    response_model=ProfileUpdateResponse,
    responses={401: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_profile(
    payload: UpdateProfileRequest,
    principal: Annotated[Principal, Depends(get_authenticated_principal)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ProfileUpdateResponse:
    return service.update_profile(principal=principal, username=payload.username, password=payload.password)
