"""Account service layer: registration, passcodes, login and profile."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import logging
from secrets import compare_digest

from app.adapters.auth import TokenCodec
from app.adapters.notify import OtpDelivery, OtpDeliveryError, OtpPurpose
from app.core.logging_safety import mask_email, safe_log_identifier
from app.core.security import generate_otp, hash_password, verify_password
from app.errors import ApiError
from app.repositories.memory import DuplicateRecordError, InMemoryStore, UserRecord
from app.schemas.auth import MessageResponse, Principal, ProfileUpdateResponse, TokenResponse

logger = logging.getLogger(__name__)

DEFAULT_OTP_TTL = timedelta(minutes=10)

_DUPLICATE_USER_ERRORS: dict[str, tuple[str, str]] = {
    "users.email": ("user_exists", "User already exists"),
    "users.username": ("username_taken", "Username already taken"),
}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _duplicate_user_error(exc: DuplicateRecordError) -> ApiError:
    code, message = _DUPLICATE_USER_ERRORS.get(exc.constraint, ("user_exists", "User already exists"))
    return ApiError(status_code=409, code=code, message=message)


def _invalid_otp() -> ApiError:
    return ApiError(status_code=400, code="invalid_otp", message="Invalid or expired OTP")


class AccountService:
    def __init__(
        self,
        store: InMemoryStore,
        *,
        codec: TokenCodec,
        otp_delivery: OtpDelivery,
        otp_ttl: timedelta = DEFAULT_OTP_TTL,
    ) -> None:
        self._store = store
        self._codec = codec
        self._otp_delivery = otp_delivery
        self._otp_ttl = otp_ttl

    def register(self, *, username: str, email: str, password: str) -> MessageResponse:
        normalized_email = normalize_email(email)
        try:
            user = self._store.create_user(
                username=username,
                email=normalized_email,
                password_hash=hash_password(password),
            )
        except DuplicateRecordError as exc:
            logger.info("account.register_rejected email=%s constraint=%s", mask_email(normalized_email), exc.constraint)
            raise _duplicate_user_error(exc) from exc

        self._issue_otp(user, purpose="verify_email")
        logger.info("account.registered user_id=%s", safe_log_identifier(user.id, prefix="uid"))
        return MessageResponse(message="OTP sent to email")

    def verify_otp(self, *, email: str, otp: str) -> TokenResponse:
        user = self._store.get_user_by_email(normalize_email(email))
        if user is None or not self._otp_matches(user, otp):
            raise _invalid_otp()

        self._store.mark_user_verified(user=user)
        logger.info("account.verified user_id=%s", safe_log_identifier(user.id, prefix="uid"))
        return TokenResponse(token=self._codec.issue(user.id), message="Email verified successfully")

    def login(self, *, email: str, password: str) -> TokenResponse:
        user = self._store.get_user_by_email(normalize_email(email))
        if user is None or not user.is_verified or not verify_password(password, user.password_hash):
            logger.info("account.login_rejected email=%s", mask_email(email))
            raise ApiError(
                status_code=400,
                code="invalid_credentials",
                message="Invalid credentials or email not verified",
            )

        logger.info("account.login user_id=%s", safe_log_identifier(user.id, prefix="uid"))
        return TokenResponse(token=self._codec.issue(user.id))

    def forgot_password(self, *, email: str) -> MessageResponse:
        user = self._store.get_user_by_email(normalize_email(email))
        if user is None:
            raise ApiError(status_code=400, code="user_not_found", message="User not found")
        if not user.is_verified:
            raise ApiError(status_code=400, code="email_not_verified", message="Email not verified")

        self._issue_otp(user, purpose="reset_password")
        return MessageResponse(message="OTP sent to email")

    def reset_password(self, *, email: str, otp: str, new_password: str) -> MessageResponse:
        user = self._store.get_user_by_email(normalize_email(email))
        if user is None or not self._otp_matches(user, otp):
            raise _invalid_otp()

        self._store.update_user_profile(user=user, password_hash=hash_password(new_password))
        self._store.set_user_otp(user=user, otp=None, expires_at=None)
        logger.info("account.password_reset user_id=%s", safe_log_identifier(user.id, prefix="uid"))
        return MessageResponse(message="Password reset successfully")

    def update_profile(
        self,
        *,
        principal: Principal,
        username: str | None,
        password: str | None,
    ) -> ProfileUpdateResponse:
        user = self._store.get_user(principal.id)
        if user is None:
            raise ApiError(status_code=401, code="user_not_found", message="User not found or account deleted")

        try:
            self._store.update_user_profile(
                user=user,
                username=username,
                password_hash=hash_password(password) if password else None,
            )
        except DuplicateRecordError as exc:
            raise _duplicate_user_error(exc) from exc

        return ProfileUpdateResponse(message="Profile updated successfully", username=user.username)

    def bootstrap_admin(self, *, email: str, username: str, password: str) -> UserRecord:
        """Create a verified administrator, or promote the existing account."""
        normalized_email = normalize_email(email)
        user = self._store.get_user_by_email(normalized_email)
        if user is None:
            user = self._store.create_user(
                username=username,
                email=normalized_email,
                password_hash=hash_password(password),
                is_admin=True,
                is_verified=True,
            )
        else:
            self._store.grant_admin(user.id)
        logger.info("account.bootstrap_admin user_id=%s", safe_log_identifier(user.id, prefix="uid"))
        return user

    def _issue_otp(self, user: UserRecord, *, purpose: OtpPurpose) -> None:
        otp = generate_otp()
        self._store.set_user_otp(user=user, otp=otp, expires_at=datetime.now(UTC) + self._otp_ttl)
        try:
            self._otp_delivery.send_otp(email=user.email, otp=otp, purpose=purpose)
        except OtpDeliveryError as exc:
            logger.error("account.otp_delivery_failed email=%s purpose=%s", mask_email(user.email), purpose)
            raise ApiError(status_code=500, code="otp_delivery_failed", message="Failed to send OTP email") from exc

    @staticmethod
    def _otp_matches(user: UserRecord, otp: str) -> bool:
        if user.otp is None or user.otp_expires_at is None:
            return False
        if datetime.now(UTC) >= user.otp_expires_at:
            return False
        return compare_digest(user.otp.encode("utf-8"), otp.encode("utf-8"))
