"""
JWT token management for authentication.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel

from kcnotes.kernel.identity.errors import ExpiredTokenError, InvalidTokenError

ACCESS_TOKEN_TYPE = "access"


class AccessTokenPayload(BaseModel):
    """JWT access token payload."""

    sub: str  # User ID
    exp: datetime
    iat: datetime
    jti: str

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.sub)


class JWTManager:
    """
    Issues and verifies self-contained access tokens.

    Nothing is stored server-side: a token stays valid until ``exp``.
    The signing key is fixed for the lifetime of the instance.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 1440,
    ):
        if not secret_key:
            raise ValueError("secret_key is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    @property
    def lifetime(self) -> timedelta:
        return timedelta(minutes=self.access_token_expire_minutes)

    def issue_token(
        self,
        user_id: uuid.UUID,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed access token for a user.

        Args:
            user_id: User's unique identifier
            expires_delta: Optional custom lifetime

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self.lifetime)

        payload = {
            "sub": str(user_id),
            "exp": expire,
            "iat": now,
            "jti": str(uuid.uuid4()),
            "type": ACCESS_TOKEN_TYPE,
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> AccessTokenPayload:
        """
        Verify and decode an access token.

        Raises:
            ExpiredTokenError: Signature is valid but ``exp`` has passed
            InvalidTokenError: Bad signature, malformed token or wrong claims
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
        except ExpiredSignatureError as e:
            raise ExpiredTokenError() from e
        except JWTError as e:
            raise InvalidTokenError() from e

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidTokenError()

        try:
            uuid.UUID(str(payload["sub"]))
            return AccessTokenPayload(
                sub=payload["sub"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                jti=payload["jti"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError() from e
