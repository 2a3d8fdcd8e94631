"""
User repository: the only component that touches persisted user records.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kcnotes.kernel.identity.errors import StorageError, UniqueViolationError
from kcnotes.kernel.models.note import Note
from kcnotes.kernel.models.user import User
from kcnotes.logging_config import get_logger

logger = get_logger(__name__)

# How SQLite and PostgreSQL name the username uniqueness constraint in errors
USERNAME_CONSTRAINT_MARKERS = ("users.username", "ix_users_username")


def is_username_violation(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in USERNAME_CONSTRAINT_MARKERS)


class UserRepository(Protocol):
    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]: ...
    async def get_by_username(self, username: str) -> Optional[User]: ...
    async def create(self, username: str, password_hash: str) -> User: ...
    async def update_password(self, user_id: uuid.UUID, password_hash: str) -> Optional[User]: ...
    async def delete(self, user_id: uuid.UUID) -> bool: ...


class SqlAlchemyUserRepository:
    """
    UserRepository backed by SQLAlchemy.

    Each call runs in its own session and transaction, so one instance can
    be shared by every concurrent request. Returned users are detached.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_maker() as session:
                yield session
        except IntegrityError as e:
            if is_username_violation(e):
                raise UniqueViolationError() from e
            logger.exception("User store integrity failure")
            raise StorageError() from e
        except SQLAlchemyError as e:
            logger.exception("User store failure")
            raise StorageError() from e

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        async with self._session_scope() as session:
            return await session.get(User, user_id)

    async def get_by_username(self, username: str) -> Optional[User]:
        async with self._session_scope() as session:
            result = await session.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()

    async def create(self, username: str, password_hash: str) -> User:
        """
        Insert a new user.

        Raises:
            UniqueViolationError: The username is already taken
            StorageError: Any other store failure, including other constraints
        """
        async with self._session_scope() as session:
            user = User(username=username, password_hash=password_hash)
            session.add(user)
            await session.commit()
            # Load server-side timestamps before the session closes
            await session.refresh(user)
            return user

    async def update_password(self, user_id: uuid.UUID, password_hash: str) -> Optional[User]:
        """Replace the stored credential; returns None if the user is gone."""
        async with self._session_scope() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            user.password_hash = password_hash
            await session.commit()
            await session.refresh(user)
            return user

    async def delete(self, user_id: uuid.UUID) -> bool:
        """Delete a user together with the notes they own."""
        async with self._session_scope() as session:
            user = await session.get(User, user_id)
            if user is None:
                return False
            await session.execute(delete(Note).where(Note.owner_id == user_id))
            await session.delete(user)
            await session.commit()
            return True
