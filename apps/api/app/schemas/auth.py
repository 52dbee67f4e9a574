"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field, field_validator


class Principal(BaseModel):
    """Authenticated user projection; never carries the password hash or OTP."""

    id: str = Field(min_length=1)
    username: str
    email: str
    is_admin: bool = False
    is_verified: bool = False


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=6, max_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=6, max_length=6)
    new_password: str = Field(min_length=8, max_length=128)


class UpdateProfileRequest(BaseModel):
    username: str | None = Field(default=None, min_length=3, max_length=50)
    password: str | None = Field(default=None, min_length=8, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    token: str
    message: str | None = None


class ProfileUpdateResponse(BaseModel):
    message: str
    username: str
