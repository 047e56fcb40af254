"""
Authentication Schemas

Request/response bodies for /auth endpoints. Responses never carry the
password hash.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class AuthLoginRequest(BaseModel):
    """``username`` accepts the username or the email address. Passwords are taken verbatim."""
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_identifier(cls, v):
        return v.strip() if isinstance(v, str) else v


class AuthRegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, v: str) -> str:
        return v.lower()


class AuthUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    is_active: bool
    created_at: datetime


class AuthLoginResponse(BaseModel):
    user: AuthUserResponse
    message: str = "Login successful"


class AuthLogoutResponse(BaseModel):
    message: str = "Logged out"


class AuthMeResponse(BaseModel):
    user: AuthUserResponse


class AuthRegisterResponse(BaseModel):
    user: AuthUserResponse
    message: str = "Registration successful"
