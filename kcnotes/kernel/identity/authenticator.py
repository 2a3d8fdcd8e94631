"""
Bearer-token gate for protected requests.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from kcnotes.kernel.identity.errors import (
    InvalidTokenError,
    UnauthenticatedError,
)
from kcnotes.kernel.identity.jwt import JWTManager
from kcnotes.kernel.identity.repository import UserRepository
from kcnotes.kernel.models.user import User
from kcnotes.logging_config import get_logger

logger = get_logger(__name__)

BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity resolved from a verified token, handed to route handlers."""

    user: User
    token_issued_at: datetime
    token_expires_at: datetime

    @property
    def id(self) -> uuid.UUID:
        return self.user.id


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    return token.strip() or None


class RequestAuthenticator:
    """
    Verifies the bearer token and resolves the user it names.

    Shares no mutable state between requests. Only the token is checked,
    never the password.
    """

    def __init__(self, jwt_manager: JWTManager, users: UserRepository):
        self.jwt_manager = jwt_manager
        self.users = users

    async def authenticate(self, authorization: Optional[str]) -> AuthenticatedUser:
        """
        Resolve the identity behind an Authorization header value.

        Raises:
            UnauthenticatedError: No bearer token was presented
            InvalidTokenError: Bad signature, malformed token, or the user
                it names no longer exists
            ExpiredTokenError: The token is past its expiry
        """
        return await self.authenticate_token(extract_bearer_token(authorization))

    async def authenticate_token(self, token: Optional[str]) -> AuthenticatedUser:
        """Same as authenticate() for an already extracted token."""
        if not token:
            raise UnauthenticatedError()

        payload = self.jwt_manager.verify_token(token)

        user = await self.users.get_by_id(payload.user_id)
        if user is None:
            logger.info("Token for missing user rejected", extra={"user_id": payload.sub})
            raise InvalidTokenError()

        return AuthenticatedUser(
            user=user,
            token_issued_at=payload.iat,
            token_expires_at=payload.exp,
        )
