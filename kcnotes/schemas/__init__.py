"""
Pydantic schemas for the HTTP API.
"""

from kcnotes.schemas.common import ErrorDetail, ErrorResponse, MessageResponse, HealthResponse
from kcnotes.schemas.auth import (
    Credentials,
    UpdatePasswordRequest,
    UserResponse,
    MeResponse,
    TokenResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "MessageResponse",
    "HealthResponse",
    "Credentials",
    "UpdatePasswordRequest",
    "UserResponse",
    "MeResponse",
    "TokenResponse",
]
