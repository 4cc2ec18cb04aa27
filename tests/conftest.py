"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.database import create_engine_for_url, get_db
from app.models import Base, Customer
from app.schemas.customer import CustomerCreate, EndCustomerProject
from app.services import customer as customer_service
from app.utils.jwt import create_access_token


@pytest.fixture
def test_database_url(tmp_path) -> str:
    """TEST_DATABASE_URL if set, otherwise a fresh SQLite file per test."""
    return os.environ.get(
        "TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'docuform_test.db'}"
    )


@pytest_asyncio.fixture(scope="function")
async def db_engine(test_database_url) -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine."""
    engine = create_engine_for_url(test_database_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory for tests that need several independent sessions."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def company_id() -> UUID:
    return uuid4()


@pytest.fixture
def user_id() -> str:
    return "user-somchai"


@pytest_asyncio.fixture
async def customer(db: AsyncSession, company_id: UUID, user_id: str) -> Customer:
    """Customer without an embedded end customer project."""
    return await customer_service.save_customer(
        db,
        company_id,
        user_id,
        CustomerCreate(
            customer_name="Baan Suay Co., Ltd.",
            customer_type="company",
            phone="081-234-5678",
            address="12 Sukhumvit Rd",
            province="Bangkok",
        ),
    )


@pytest_asyncio.fixture
async def customer_with_project(db: AsyncSession, company_id: UUID, user_id: str) -> Customer:
    """Customer created by the older form, with an embedded project."""
    return await customer_service.save_customer(
        db,
        company_id,
        user_id,
        CustomerCreate(
            customer_name="Khun Anan",
            phone="089-999-0000",
            end_customer_project=EndCustomerProject(
                project_name="Villa A",
                project_address="99 Moo 1, Chalong",
                contact_name="Khun Mali",
            ),
        ),
    )


@pytest.fixture
def auth_headers(company_id: UUID, user_id: str) -> dict[str, str]:
    token = create_access_token(user_id, company_id)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """API client backed by the test database."""
    from app.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
