"""
Common schema types used across the API.
"""

from typing import List, Optional
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """A single request validation failure."""

    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    
    detail: str
    code: Optional[str] = None
    errors: Optional[List[ErrorDetail]] = None


class MessageResponse(BaseModel):
    """Standard success response."""
    
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str = "ok"
    version: str
