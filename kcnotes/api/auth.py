"""
Authentication endpoints.

Identity errors raised by the services are rendered by the application's
IdentityError handler, so the routes only deal with the happy path.
"""

from fastapi import APIRouter, status

from kcnotes.api.deps import CurrentUser, IdentityServiceDep
from kcnotes.schemas.auth import (
    Credentials,
    MeResponse,
    TokenResponse,
    UpdatePasswordRequest,
    UserResponse,
)
from kcnotes.schemas.common import ErrorResponse, MessageResponse

router = APIRouter()

_BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}
_UNAUTHORIZED = {status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}}


@router.post(
    "/signup",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_BAD_REQUEST,
)
async def signup(data: Credentials, identity_service: IdentityServiceDep):
    """Register a new user account and return a token."""
    token = await identity_service.signup(data.username, data.password)
    return TokenResponse(token=token)


@router.post("/signin", response_model=TokenResponse, responses=_BAD_REQUEST)
async def signin(data: Credentials, identity_service: IdentityServiceDep):
    """Authenticate a user and return a token."""
    token = await identity_service.signin(data.username, data.password)
    return TokenResponse(token=token)


@router.get("/me", response_model=MeResponse, responses=_UNAUTHORIZED)
async def me(current: CurrentUser):
    """Get the current user's profile."""
    return MeResponse(user=UserResponse.model_validate(current.user))


@router.get("/signout", response_model=TokenResponse, responses=_UNAUTHORIZED)
async def signout(current: CurrentUser):
    """
    Sign out.

    Tokens are stateless: the client discards its token, the server keeps
    accepting it until it expires.
    """
    return TokenResponse(token=None)


@router.patch(
    "/update-password",
    response_model=MessageResponse,
    responses={**_BAD_REQUEST, **_UNAUTHORIZED},
)
async def update_password(
    data: UpdatePasswordRequest,
    current: CurrentUser,
    identity_service: IdentityServiceDep,
):
    """Change the current user's password."""
    message = await identity_service.update_password(
        user_id=current.id,
        current_password=data.current_password,
        new_password=data.new_password,
    )
    return MessageResponse(message=message)


@router.delete(
    "/delete",
    response_model=MessageResponse,
    responses={**_BAD_REQUEST, **_UNAUTHORIZED},
)
async def delete_account(current: CurrentUser, identity_service: IdentityServiceDep):
    """Delete the current user's account and notes."""
    message = await identity_service.delete_user(current.id)
    return MessageResponse(message=message)
