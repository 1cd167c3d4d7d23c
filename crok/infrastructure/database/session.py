from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
)

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Base class for all database models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass so every
    model gets a generated ``__init__``/``__repr__``/``__eq__`` from its
    ``Mapped`` annotations. Columns declared with ``init=False`` (ids,
    audit timestamps) are filled by their ``default_factory`` instead of
    being passed by the caller.

    Example:
        ```python
        class Tag(Base):
            __tablename__ = "tags"

            id: Mapped[str] = mapped_column(String(36), primary_key=True)
            tag: Mapped[str] = mapped_column(String(100))

        tag = Tag(id="...", tag="work")
        ```
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database session management.

    Yields an ``AsyncSession`` bound to the application engine and closes
    it when the request (or ``async with`` block) completes. Used as a
    FastAPI dependency via ``Depends(async_session)``; tests override it
    with a session bound to their own engine.

    Yields:
        AsyncSession: A configured async database session.
    """
    async with local_session() as db:
        yield db


async def create_tables() -> None:
    """Create all tables in the database if they don't exist.

    Idempotent: existing tables are left unchanged. Model modules must be
    imported before this runs so their tables are registered on
    ``Base.metadata``.
    """
    from ...modules.block import models as _block_models  # noqa: F401
    from ...modules.document import models as _document_models  # noqa: F401
    from ...modules.tag import models as _tag_models  # noqa: F401
    from ...modules.user import models as _user_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
