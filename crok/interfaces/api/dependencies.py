"""FastAPI dependencies for use in API endpoints."""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database import async_session
from ...modules.common.exceptions import AuthenticationError
from ...modules.document.services import DocumentService
from ...modules.user.services import UserService
from ...modules.user.session import SessionContext
from ...modules.user.tokens import read_token

DbSession = Annotated[AsyncSession, Depends(async_session)]

bearer_scheme = HTTPBearer(auto_error=False, description="Token returned by /auth/register or /auth/login")


def get_user_service() -> UserService:
    """Dependency for providing a UserService instance."""
    return UserService()


async def get_session_context(
    db: DbSession,
    user_service: Annotated[UserService, Depends(get_user_service)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)] = None,
) -> SessionContext:
    """Resolve the caller into a request-scoped session.

    Requests without a bearer token are anonymous. A token that is forged,
    expired or names a user that no longer exists is rejected with 401.
    """
    if credentials is None:
        return SessionContext.for_user(None)

    user_id = read_token(credentials.credentials)
    if user_id is None:
        raise AuthenticationError("Invalid or expired session token")

    user = await user_service.get_user(user_id, db)
    if user is None:
        raise AuthenticationError("Unknown user")
    return SessionContext.for_user(user)


CurrentSession = Annotated[SessionContext, Depends(get_session_context)]


def require_signed_in(session: CurrentSession) -> SessionContext:
    """Reject anonymous callers on endpoints that change data."""
    if not session.is_authenticated:
        raise AuthenticationError("Sign in to change documents")
    return session


def get_document_service(session: CurrentSession) -> DocumentService:
    """Dependency for providing a DocumentService bound to the caller's session."""
    return DocumentService(session)
