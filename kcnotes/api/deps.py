"""
FastAPI dependencies for authentication and the identity services.

The services are built once by ``create_app`` and stored on ``app.state``;
these dependencies only hand them to the routes.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from kcnotes.kernel.identity.authenticator import AuthenticatedUser, RequestAuthenticator
from kcnotes.kernel.identity.identity_service import IdentityService


# auto_error=False: missing credentials are reported by the authenticator
security = HTTPBearer(auto_error=False)


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


def get_authenticator(request: Request) -> RequestAuthenticator:
    return request.app.state.authenticator


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    authenticator: Annotated[RequestAuthenticator, Depends(get_authenticator)],
) -> AuthenticatedUser:
    """Get the authenticated user or raise a 401 identity error."""
    token = credentials.credentials if credentials else None
    return await authenticator.authenticate_token(token)


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)
