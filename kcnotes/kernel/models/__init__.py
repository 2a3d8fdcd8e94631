"""
Kernel Data Models

Core SQLAlchemy models: user accounts and the notes they own.
"""

from kcnotes.kernel.models.base import Base, TimestampMixin, generate_uuid
from kcnotes.kernel.models.user import User, USERNAME_MAX_LENGTH
from kcnotes.kernel.models.note import Note

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    # User
    "User",
    "USERNAME_MAX_LENGTH",
    # Notes
    "Note",
]
