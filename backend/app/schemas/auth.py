"""Authentication schemas."""
from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRegister(BaseModel):
    """User registration request."""

    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserResponse(BaseModel):
    """User info response."""

    id: str
    email: str
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Access token plus the authenticated user.

    The refresh token travels only in the HttpOnly cookie.
    """

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class OkResponse(BaseModel):
    """Generic acknowledgement."""

    ok: bool = True


class ErrorResponse(BaseModel):
    """Error body for rejected refreshes."""

    detail: str
    code: str | None = None
