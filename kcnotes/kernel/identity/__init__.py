"""
Identity Core - credentials, tokens and the user account lifecycle.
"""

from kcnotes.kernel.identity.password import PasswordHasher
from kcnotes.kernel.identity.jwt import JWTManager, AccessTokenPayload
from kcnotes.kernel.identity.repository import UserRepository, SqlAlchemyUserRepository
from kcnotes.kernel.identity.identity_service import IdentityService
from kcnotes.kernel.identity.authenticator import (
    AuthenticatedUser,
    RequestAuthenticator,
    extract_bearer_token,
)
from kcnotes.kernel.identity.errors import (
    IdentityError,
    DuplicateUserError,
    InvalidCredentialsError,
    MissingFieldsError,
    UserNotFoundError,
    InvalidCurrentCredentialError,
    AuthenticationError,
    UnauthenticatedError,
    InvalidTokenError,
    ExpiredTokenError,
    StorageError,
    UniqueViolationError,
)

__all__ = [
    "PasswordHasher",
    "JWTManager",
    "AccessTokenPayload",
    "UserRepository",
    "SqlAlchemyUserRepository",
    "IdentityService",
    "AuthenticatedUser",
    "RequestAuthenticator",
    "extract_bearer_token",
    # Errors
    "IdentityError",
    "DuplicateUserError",
    "InvalidCredentialsError",
    "MissingFieldsError",
    "UserNotFoundError",
    "InvalidCurrentCredentialError",
    "AuthenticationError",
    "UnauthenticatedError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "StorageError",
    "UniqueViolationError",
]
