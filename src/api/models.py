"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Password policy is deliberately not validated here; the domain reports
short passwords and missing special characters as distinct errors.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class EmailRequest(BaseModel):
    """Request model carrying a single email address."""

    email: EmailStr


class EmailCheckResponse(BaseModel):
    """Response model for the duplicate email check."""

    email: str
    available: bool


class VerificationIssuedResponse(BaseModel):
    """Response model for a freshly issued verification code."""

    message: str
    email: str
    expires_in_seconds: int


class VerifyCodeRequest(BaseModel):
    """Request model for code verification."""

    email: EmailStr
    code: str = Field(
        ...,
        min_length=6,
        max_length=6,
        pattern=r"^[A-Za-z0-9]{6}$",
        description="6-character alphanumeric verification code",
    )


class VerifyCodeResponse(BaseModel):
    """Response model for a successful verification."""

    verified: bool
    expires_in_seconds: int


class CreateUserRequest(BaseModel):
    """Request model for account creation."""

    email: EmailStr
    nickname: str = Field(..., min_length=1, max_length=30)
    password: str = Field(..., max_length=128, description="Min 8 characters incl. a special character")


class ChangePasswordRequest(BaseModel):
    """Request model for password change."""

    email: EmailStr
    new_password: str = Field(..., max_length=128, description="Min 8 characters incl. a special character")


class UserResponse(BaseModel):
    """Public account fields. The password hash is never exposed."""

    id: int
    email: str
    nickname: str
    created_at: datetime


class CreatePostRequest(BaseModel):
    """Request model for post creation."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)


class PostResponse(BaseModel):
    """Response model for a single post."""

    id: int
    author_id: int
    author_nickname: str
    title: str
    content: str
    created_at: datetime
    like_count: int
    liked: bool


class PostPageResponse(BaseModel):
    """Response model for a page of posts."""

    items: list[PostResponse]
    page: int
    take: int
    total: int
    page_count: int
    has_next: bool


class LikeToggleRequest(BaseModel):
    """Request model for toggling a like."""

    post_id: int = Field(..., ge=1)


class LikeToggleResponse(BaseModel):
    """Response model for the like state after a toggle."""

    post_id: int
    liked: bool
    like_count: int


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
