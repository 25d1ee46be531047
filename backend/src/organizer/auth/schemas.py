"""Pydantic schemas for authentication endpoints"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class LoginLinkRequest(BaseModel):
    """Request a magic link and one-time code by email.

    Attributes:
        email: Address to send the link to
        redirect: Relative path to land on after login (unsafe values are dropped)
    """
    email: EmailStr
    redirect: Optional[str] = None


class LoginLinkResponse(BaseModel):
    message: str = "Check your email for your login link."


class VerifyCodeRequest(BaseModel):
    """Sign in with the six digit code from the login email."""
    email: EmailStr
    code: str = Field(..., min_length=1, max_length=12)


class LoginResponse(BaseModel):
    """Response schema for successful login.

    Attributes:
        access_token: JWT access token
        token_type: Token type (always "bearer")
        expires_in: Token expiry in seconds
    """
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 3600


class UserResponse(BaseModel):
    id: UUID
    email: str
    display_name: Optional[str]
    last_login_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class MeResponse(BaseModel):
    user: UserResponse
