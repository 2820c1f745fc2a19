from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class RoleName(str, Enum):
    """Permission level. Users without an explicit role are plain users."""
    admin = "admin"
    editor = "editor"
    user = "user"


class TokenPair(BaseModel):
    """Access and refresh tokens."""
    token_type: str = Field("bearer", description="Token type, typically 'bearer'")
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class RefreshRequest(BaseModel):
    """Request to refresh an access token."""
    refresh_token: str = Field(..., description="Refresh token")


class RegisterRequest(BaseModel):
    """Registration details for creating a new user."""
    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=6, description="User password")
    display_name: Optional[str] = Field(None, description="Display name")


class UserRead(BaseModel):
    """User read model."""
    id: UUID = Field(..., description="User ID")
    email: EmailStr = Field(..., description="User email")
    display_name: Optional[str] = Field(None)
    is_active: bool = Field(..., description="Active flag")
    role: RoleName = Field(..., description="Effective role")
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")


class RoleUpdate(BaseModel):
    """Admin change of a user's role."""
    role: RoleName = Field(..., description="admin | editor | user")
