# This project was developed with assistance from AI tools.
"""Integration test fixtures -- real PostgreSQL + real MinIO, no mocks.

Session-scoped containers (started once per test run) provide real PostgreSQL
and MinIO instances. Function-scoped fixtures give each test an isolated DB
session with savepoint rollback so tests don't leak state.
"""

import os

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.minio import MinioContainer
from testcontainers.postgres import PostgresContainer

pytestmark = pytest.mark.integration

_DB_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "..", "db")


# ---------------------------------------------------------------------------
# Session-scoped: containers + engine + migrations
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_container():
    with PostgresContainer(
        image="postgres:16",
        username="test",
        password="test",
        dbname="test",
    ) as pg:
        yield pg


@pytest.fixture(scope="session")
def minio_container():
    with MinioContainer() as mc:
        yield mc


@pytest.fixture(scope="session")
def db_url(pg_container):
    """Async DB URL for asyncpg."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://test:test@{host}:{port}/test"


@pytest.fixture(scope="session", autouse=True)
def _run_migrations(db_url):
    """Run alembic upgrade head against the container."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(os.path.join(_DB_DIR, "alembic.ini"))
    alembic_cfg.set_main_option("script_location", os.path.join(_DB_DIR, "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(alembic_cfg, "head")


@pytest.fixture(scope="session")
def async_engine(db_url, _run_migrations):
    engine = create_async_engine(db_url, echo=False, poolclass=NullPool)
    yield engine


@pytest.fixture(scope="session", autouse=True)
def _patch_db_module(async_engine):
    """Point db.database at the test engine so get_db_service() and the
    health check talk to the container."""
    import db.database as db_mod

    db_mod.engine = async_engine
    db_mod.SessionLocal = async_sessionmaker(async_engine, class_=AsyncSession)
    db_mod.db_service = db_mod.DatabaseService(engine=async_engine)


@pytest.fixture(scope="session")
def storage(minio_container):
    from src.services.storage import StorageService

    host = minio_container.get_container_host_ip()
    port = minio_container.get_exposed_port(9000)
    return StorageService(
        endpoint=f"http://{host}:{port}",
        access_key=minio_container.access_key,
        secret_key=minio_container.secret_key,
        bucket="test-documents",
    )


# ---------------------------------------------------------------------------
# Function-scoped: per-test session with savepoint rollback
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(async_engine):
    conn = await async_engine.connect()
    txn = await conn.begin()
    session = AsyncSession(
        bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False
    )
    yield session
    await session.close()
    await txn.rollback()
    await conn.close()


@pytest_asyncio.fixture
async def loan(db_session):
    """A kiavi loan with one title-agent contact."""
    from db.models import Contact, Loan

    row = Loan(
        borrower_name="Jane Doe",
        property_address="123 Main Street, Springfield, IL 62704",
        loan_number="LN-1001",
        funder="kiavi",
    )
    db_session.add(row)
    await db_session.flush()
    db_session.add(
        Contact(loan_id=row.id, name="Title Desk", email="Closing@TitleCo.com", role="title")
    )
    await db_session.flush()
    return row


@pytest.fixture
def client_factory(db_session, storage):
    """Factory returning an async httpx client wired to the test DB and MinIO."""
    import db.database as db_mod
    from db.database import get_db, get_db_service

    from src.main import app
    from src.services.sync_guard import SyncRegistry

    async def _make():
        async def _get_db():
            yield db_session

        async def _get_db_service():
            return db_mod.db_service

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_db_service] = _get_db_service
        app.state.sync_registry = SyncRegistry()
        app.state.drive_client = None
        app.state.gmail_client = None
        app.state.storage = storage
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    yield _make

    app.dependency_overrides.clear()
