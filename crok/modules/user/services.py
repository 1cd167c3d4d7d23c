"""User registration and sign-in."""

from typing import Optional

import anyio
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..common.exceptions import InvalidCredentialsError, UsernameTakenError
from .crud import user_crud
from .passwords import hash_password, verify_password
from .schemas import UserCreateInternal, UserCredentials, UserRead

logger = get_logger(__name__)


class UserService:
    """Registers users and checks their credentials.

    Passwords are only ever stored as scrypt hashes. Hashing runs in a
    worker thread so it does not block the event loop.
    """

    async def register(self, credentials: UserCredentials, db: AsyncSession) -> UserRead:
        """Create a new user.

        Raises:
            UsernameTakenError: If the username is already registered. Nothing
                is created and the existing user is left untouched.
        """
        if await user_crud.exists(db=db, username=credentials.username):
            raise UsernameTakenError(f"Username '{credentials.username}' is already taken")

        password_hash = await anyio.to_thread.run_sync(hash_password, credentials.password)
        try:
            user = await user_crud.create(
                db=db, object=UserCreateInternal(username=credentials.username, password_hash=password_hash)
            )
        except IntegrityError as e:
            await db.rollback()
            raise UsernameTakenError(f"Username '{credentials.username}' is already taken") from e

        logger.info("Registered user", extra={"user_id": user.id})
        return UserRead.model_validate(user)

    async def login(self, credentials: UserCredentials, db: AsyncSession) -> UserRead:
        """Resolve credentials to a user.

        Raises:
            InvalidCredentialsError: Unknown username or wrong password.
        """
        user = await user_crud.get(db=db, username=credentials.username)
        if user is None:
            raise InvalidCredentialsError("Invalid username or password")

        valid = await anyio.to_thread.run_sync(verify_password, credentials.password, user["password_hash"])
        if not valid:
            raise InvalidCredentialsError("Invalid username or password")

        return UserRead(**user)

    async def get_user(self, user_id: str, db: AsyncSession) -> Optional[UserRead]:
        user = await user_crud.get(db=db, id=user_id)
        if user is None:
            return None
        return UserRead(**user)
