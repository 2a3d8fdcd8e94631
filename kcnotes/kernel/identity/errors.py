"""
Error taxonomy for the identity core.

Every error carries a machine-readable ``code``, the HTTP ``status_code``
the API layer responds with, and a human-readable message.
"""

from typing import Optional

from fastapi import status


class IdentityError(Exception):
    """Base class for all identity errors surfaced to clients."""

    code: str = "identity_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Identity error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class DuplicateUserError(IdentityError):
    code = "duplicate_user"

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"User with username '{username}' already exists.")


class InvalidCredentialsError(IdentityError):
    """Unknown username and wrong password are deliberately indistinguishable."""

    code = "invalid_credentials"
    default_message = "Invalid credentials."


class MissingFieldsError(IdentityError):
    code = "missing_fields"
    default_message = "Current password and new password are required."


class UserNotFoundError(IdentityError):
    code = "user_not_found"
    default_message = "User not found."


class InvalidCurrentCredentialError(IdentityError):
    code = "invalid_current_credential"
    default_message = "Current password is incorrect."


class AuthenticationError(IdentityError):
    """Base for failures of the bearer-token gate."""

    code = "authentication_error"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"


class UnauthenticatedError(AuthenticationError):
    code = "unauthenticated"
    default_message = "Not authenticated"


class InvalidTokenError(AuthenticationError):
    code = "invalid_token"
    default_message = "Invalid token"


class ExpiredTokenError(AuthenticationError):
    code = "expired_token"
    default_message = "Token has expired"


class StorageError(IdentityError):
    """The user store failed; clients only ever see a generic message."""

    code = "storage_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class UniqueViolationError(StorageError):
    """The username uniqueness constraint rejected an insert."""

    code = "unique_violation"
