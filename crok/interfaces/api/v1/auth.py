"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ....modules.common.exceptions import AuthenticationError
from ....modules.user.schemas import UserCredentials, UserIdentity, UserRead, UserSession
from ....modules.user.services import UserService
from ....modules.user.tokens import issue_token
from ..dependencies import CurrentSession, DbSession, get_user_service

router = APIRouter(prefix="/auth", tags=["Authentication"])

UserServiceDep = Annotated[UserService, Depends(get_user_service)]


def _signed_in(user: UserRead) -> UserSession:
    return UserSession(**user.model_dump(), access_token=issue_token(user.id))


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="""
    Creates an account and signs it in. Send the returned `access_token` as
    `Authorization: Bearer <token>` on later requests to act as this user.
    """,
    responses={
        201: {"description": "User registered"},
        409: {"description": "Username already taken"},
        422: {"description": "Empty username or password"},
    },
)
async def register(credentials: UserCredentials, user_service: UserServiceDep, db: DbSession) -> UserSession:
    return _signed_in(await user_service.register(credentials, db))


@router.post(
    "/login",
    summary="Sign In",
    responses={
        200: {"description": "Credentials accepted"},
        401: {"description": "Invalid username or password"},
    },
)
async def login(credentials: UserCredentials, user_service: UserServiceDep, db: DbSession) -> UserSession:
    return _signed_in(await user_service.login(credentials, db))


@router.get(
    "/me",
    summary="Current User",
    responses={401: {"description": "No signed-in user"}},
)
async def me(session: CurrentSession) -> UserIdentity:
    if session.current_user is None:
        raise AuthenticationError("Not signed in")
    return session.current_user
