"""
User model for identity management.
"""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kcnotes.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from kcnotes.kernel.models.note import Note


USERNAME_MAX_LENGTH = 50


class User(Base, TimestampMixin):
    """User account model."""
    
    __tablename__ = "users"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH),
        unique=True,
        index=True,
        nullable=False,
    )
    # Always a bcrypt hash, never the plaintext
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    
    notes: Mapped[List["Note"]] = relationship(
        "Note",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    
    def __repr__(self) -> str:
        return f"<User {self.username}>"
