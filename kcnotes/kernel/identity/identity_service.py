"""
Identity service: signup, signin, password rotation and account deletion.
"""

import asyncio
import uuid

from kcnotes.kernel.identity.errors import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidCurrentCredentialError,
    MissingFieldsError,
    UniqueViolationError,
    UserNotFoundError,
)
from kcnotes.kernel.identity.jwt import JWTManager
from kcnotes.kernel.identity.password import PasswordHasher
from kcnotes.kernel.identity.repository import UserRepository
from kcnotes.logging_config import get_logger

logger = get_logger(__name__)

PASSWORD_UPDATED_MESSAGE = "Password updated successfully."
USER_DELETED_MESSAGE = "User and associated notes deleted successfully."


class IdentityService:
    """
    Service for user identity operations.

    Built once at startup and shared across requests. It holds no state
    between calls: every operation re-reads what it needs from the
    repository. bcrypt runs in a worker thread so the event loop keeps
    serving other requests while a hash is computed.
    """

    def __init__(
        self,
        users: UserRepository,
        password_hasher: PasswordHasher,
        jwt_manager: JWTManager,
    ):
        self.users = users
        self.password_hasher = password_hasher
        self.jwt_manager = jwt_manager

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(self.password_hasher.hash, password)

    async def _verify(self, password: str, hashed: str) -> bool:
        return await asyncio.to_thread(self.password_hasher.verify, password, hashed)

    async def signup(self, username: str, password: str) -> str:
        """
        Register a new user and return a token for them.

        Raises:
            DuplicateUserError: If the username is taken, including when a
                concurrent signup wins the race to the unique index
            MissingFieldsError: Username or password is empty
        """
        if not username or not password:
            raise MissingFieldsError("Username and password are required.")

        existing = await self.users.get_by_username(username)
        if existing:
            raise DuplicateUserError(existing.username)

        password_hash = await self._hash(password)

        try:
            user = await self.users.create(username, password_hash)
        except UniqueViolationError as e:
            raise DuplicateUserError(username) from e

        logger.info("User registered", extra={"user_id": str(user.id)})
        return self.jwt_manager.issue_token(user.id)

    async def signin(self, username: str, password: str) -> str:
        """
        Authenticate a user and return a fresh token.

        Raises:
            InvalidCredentialsError: Unknown username or wrong password
        """
        user = await self.users.get_by_username(username)
        if not user:
            logger.info("Signin failed: unknown username")
            raise InvalidCredentialsError()

        if not await self._verify(password, user.password_hash):
            logger.info("Signin failed: wrong password", extra={"user_id": str(user.id)})
            raise InvalidCredentialsError()

        if self.password_hasher.needs_rehash(user.password_hash):
            await self.users.update_password(user.id, await self._hash(password))
            logger.info("Upgraded password hash work factor", extra={"user_id": str(user.id)})

        logger.info("User signed in", extra={"user_id": str(user.id)})
        return self.jwt_manager.issue_token(user.id)

    async def update_password(
        self,
        user_id: uuid.UUID,
        current_password: str,
        new_password: str,
    ) -> str:
        """
        Change a user's password after checking the current one.

        A failed check leaves the stored credential untouched. Tokens issued
        before the change stay valid until they expire.

        Raises:
            MissingFieldsError: Either password is empty
            UserNotFoundError: The user no longer exists
            InvalidCurrentCredentialError: current_password does not match
        """
        if not current_password or not new_password:
            raise MissingFieldsError()

        user = await self.users.get_by_id(user_id)
        if not user:
            raise UserNotFoundError()

        if not await self._verify(current_password, user.password_hash):
            logger.warning("Password update rejected", extra={"user_id": str(user_id)})
            raise InvalidCurrentCredentialError()

        updated = await self.users.update_password(user_id, await self._hash(new_password))
        if not updated:
            raise UserNotFoundError()

        logger.info("Password updated", extra={"user_id": str(user_id)})
        return PASSWORD_UPDATED_MESSAGE

    async def delete_user(self, user_id: uuid.UUID) -> str:
        """
        Delete a user account and the notes it owns.

        Raises:
            UserNotFoundError: The user does not exist
        """
        user = await self.users.get_by_id(user_id)
        if not user:
            raise UserNotFoundError()

        if not await self.users.delete(user_id):
            raise UserNotFoundError()

        logger.info("User deleted", extra={"user_id": str(user_id)})
        return USER_DELETED_MESSAGE
