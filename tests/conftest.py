"""Test configuration and fixtures for the documents backend."""

import os

# Cheap password hashing for tests; read when settings are first imported.
os.environ.setdefault("SCRYPT_N", "1024")
os.environ.setdefault("ENVIRONMENT", "local")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

# mypy: disable-error-code="import-untyped"
from testcontainers.core.docker_client import DockerClient  # noqa: E402
from testcontainers.postgres import PostgresContainer  # noqa: E402

from crok.infrastructure.database.session import Base, async_session  # noqa: E402
from crok.infrastructure.logging import configure_testing_logging  # noqa: E402
from crok.interfaces.main import app  # noqa: E402
from crok.modules.block.models import Block  # noqa: E402, F401
from crok.modules.block.schemas import CodeBlock, TableBlock, TextBlock, TodoBlock  # noqa: E402
from crok.modules.document.models import Document  # noqa: E402, F401
from crok.modules.document.schemas import DocumentCreate, DocumentRead  # noqa: E402
from crok.modules.document.services import DocumentService  # noqa: E402
from crok.modules.tag.models import Tag  # noqa: E402, F401
from crok.modules.user.models import User  # noqa: E402, F401
from crok.modules.user.schemas import UserCredentials, UserRead  # noqa: E402
from crok.modules.user.services import UserService  # noqa: E402
from crok.modules.user.session import SessionContext  # noqa: E402

SQLITE_DATABASE_URL = "sqlite+aiosqlite://"

configure_testing_logging()


def is_docker_running() -> bool:
    """Check if Docker daemon is running."""
    try:
        DockerClient()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def test_db_url():
    """In-memory SQLite by default; a PostgreSQL container when TEST_WITH_POSTGRES is set."""
    if not os.environ.get("TEST_WITH_POSTGRES"):
        yield SQLITE_DATABASE_URL
        return

    if not is_docker_running():
        pytest.skip("TEST_WITH_POSTGRES is set, but Docker is not running")

    with PostgresContainer(driver="asyncpg") as pg:
        yield pg.get_connection_url()


@pytest_asyncio.fixture(scope="function")
async def test_db_engine(test_db_url: str):
    """Create a SQLAlchemy engine for testing, with fresh tables for every test."""
    if test_db_url.startswith("sqlite"):
        engine = create_async_engine(
            test_db_url,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    else:
        engine = create_async_engine(test_db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory):
    """Create a test client where each request gets its own session on the test engine."""
    app.dependency_overrides = {}

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[async_session] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def alice(db_session: AsyncSession) -> UserRead:
    return await UserService().register(UserCredentials(username="alice", password="wonderland"), db_session)


@pytest_asyncio.fixture
async def bob(db_session: AsyncSession) -> UserRead:
    return await UserService().register(UserCredentials(username="bob", password="builder"), db_session)


@pytest.fixture
def alice_service(alice: UserRead) -> DocumentService:
    """Document service acting as alice."""
    return DocumentService(SessionContext.for_user(alice))


@pytest.fixture
def bob_service(bob: UserRead) -> DocumentService:
    """Document service acting as bob."""
    return DocumentService(SessionContext.for_user(bob))


@pytest.fixture
def anonymous_service() -> DocumentService:
    return DocumentService(SessionContext.for_user(None))


@pytest_asyncio.fixture
async def public_document(alice_service: DocumentService, db_session: AsyncSession) -> DocumentRead:
    """A public document by alice with a heading, a checked to-do and a table."""
    data = DocumentCreate(
        title="Trip notes",
        blocks=[
            TextBlock(type="heading1", content="Packing"),
            TodoBlock(content="Passport", checked=True),
            TableBlock(rows=[["Day", "City"], ["1", "Lisbon"]]),
        ],
        tags=["travel", "2024"],
    )
    return await alice_service.create_document(data, db_session)


@pytest_asyncio.fixture
async def private_document(alice_service: DocumentService, db_session: AsyncSession) -> DocumentRead:
    """A private document by alice with a code block."""
    data = DocumentCreate(
        title="Diary",
        is_public=False,
        blocks=[TextBlock(content="Dear diary"), CodeBlock(content="print('hi')", language="python")],
        tags=["personal"],
    )
    return await alice_service.create_document(data, db_session)
