from typing import Optional
from datetime import datetime
import uuid

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.base import BaseResponseSchema, BaseCreateSchema


class RegisterRequest(BaseCreateSchema):
    """Self-registration request schema."""
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="User password")
    role: Optional[str] = Field(None, description="Requested role; only \"admin\" is honoured, and only when allowed")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class UserResponse(BaseResponseSchema):
    """Public user representation."""
    id: uuid.UUID
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserBrief(BaseResponseSchema):
    """Embedded user reference (order creator)."""
    id: uuid.UUID
    name: str
    email: str
    role: str


class AuthResponse(BaseModel):
    """Token plus the authenticated user."""
    user: UserResponse
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration in seconds")
