"""
Authentication schemas.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kcnotes.kernel.models.user import USERNAME_MAX_LENGTH


class Credentials(BaseModel):
    """Signup and signin request body."""
    
    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LENGTH)
    password: str = Field(..., min_length=1, max_length=128)
    
    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v


class UpdatePasswordRequest(BaseModel):
    """
    Password change request.

    Empty, null or missing values are let through so the identity service can
    report them as missing fields.
    """
    
    model_config = ConfigDict(populate_by_name=True)
    
    current_password: Optional[str] = Field("", alias="currentPassword")
    new_password: Optional[str] = Field("", alias="newPassword", max_length=128)
    
    @field_validator("current_password", "new_password", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class UserResponse(BaseModel):
    """User profile. Never includes the password hash."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: uuid.UUID
    username: str
    created_at: datetime
    updated_at: datetime


class MeResponse(BaseModel):
    user: UserResponse


class TokenResponse(BaseModel):
    """Authentication token response; token is null after signout."""
    
    token: Optional[str]
