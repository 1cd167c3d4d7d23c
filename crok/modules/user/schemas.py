"""Pydantic schemas for users and credentials."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.schemas import TimestampSchema


class UserCredentials(BaseModel):
    """Username and password as entered on the sign-in and sign-up forms."""

    username: Annotated[str, Field(min_length=1, max_length=100)]
    password: Annotated[str, Field(min_length=1)]

    @field_validator("username")
    @classmethod
    def _strip_username(cls, username: str) -> str:
        username = username.strip()
        if not username:
            raise ValueError("Username is required")
        return username


class UserCreateInternal(BaseModel):
    username: str
    password_hash: str


class UserIdentity(BaseModel):
    """The part of a user kept in the session: never includes the password."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str


class UserRead(TimestampSchema, UserIdentity):
    pass


class UserSession(UserRead):
    """A user together with the bearer token that signs later API requests in as them."""

    access_token: str
    token_type: str = "bearer"
