"""Global test configuration and fixtures for the BlockTrade Access API."""

import os

os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-for-testing-only")
os.environ["BOOTSTRAP_DEFAULT_ROLES"] = "false"
os.environ["RESEND_API_KEY"] = ""

from collections.abc import AsyncGenerator
from typing import Callable

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.api.core.constants import JWT_ALGORITHM, PLATFORM_ORGANIZATION_ID
from src.database.models import Base, EntityType, Role
from src.modules.roles.registry import RoleRegistryService
from src.utils.settings.auth import AuthSettings
from tests.factories import (
    OnboardingStateFactory,
    RoleFactory,
    UserRoleAssignmentFactory,
)

TEST_ORGANIZATION_ID = "org-acme-bank"
OTHER_ORGANIZATION_ID = "org-globex-corp"


@pytest.fixture
def role_factory():
    return RoleFactory


@pytest.fixture
def assignment_factory():
    return UserRoleAssignmentFactory


@pytest.fixture
def onboarding_state_factory():
    return OnboardingStateFactory


@pytest_asyncio.fixture
async def async_engine():
    """In-memory SQLite engine shared by the test session and the app."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=async_engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for arranging and inspecting test data."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def app(session_factory):
    """Create FastAPI application with lifespan manager for testing."""
    from src.main import app

    app.state.session_factory = session_factory
    async with LifespanManager(app):
        yield app
    app.state.session_factory = None


# Role catalog fixtures
@pytest_asyncio.fixture
async def default_roles(db_session: AsyncSession) -> dict[str, Role]:
    """Seed the platform and default organization catalogs."""
    roles = await RoleRegistryService(db_session).initialize_default_roles()
    return {role.name: role for role in roles}


@pytest_asyncio.fixture
async def bank_roles(db_session: AsyncSession, default_roles) -> dict[str, Role]:
    """Seed the bank entity templates for the test organization."""
    roles = await RoleRegistryService(db_session).initialize_organization_roles(
        TEST_ORGANIZATION_ID, EntityType.BANK
    )
    return {role.name: role for role in roles}


@pytest.fixture
def grant_role(db_session: AsyncSession, assignment_factory):
    """Directly bind a role to a user, bypassing the assignment rules."""

    async def _grant(user_id: str, role: Role, organization_id: str, **kwargs):
        assignment = await assignment_factory.create_async(
            db_session,
            user_id=user_id,
            role_id=role.id,
            organization_id=organization_id,
            **kwargs,
        )
        await db_session.commit()
        return assignment

    return _grant


@pytest_asyncio.fixture
async def platform_super_admin_id(grant_role, default_roles) -> str:
    user_id = "user-platform-root"
    await grant_role(
        user_id, default_roles["platform_super_admin"], PLATFORM_ORGANIZATION_ID
    )
    return user_id


@pytest_asyncio.fixture
async def org_admin_id(grant_role, default_roles) -> str:
    user_id = "user-org-admin"
    await grant_role(
        user_id, default_roles["organization_admin"], TEST_ORGANIZATION_ID
    )
    return user_id


# JWT Token Fixtures
@pytest.fixture()
def jwt_token_factory() -> Callable[..., str]:
    """Factory for creating JWT tokens for test actors."""
    auth_settings = AuthSettings()

    def create_token(
        user_id: str,
        organization_id: str | None = TEST_ORGANIZATION_ID,
        email: str | None = None,
    ) -> str:
        payload: dict = {
            "sub": user_id,
            "email": email or f"{user_id}@example.com",
        }
        if organization_id:
            payload[auth_settings.JWT_ORGANIZATION_CLAIM] = organization_id

        return jwt.encode(
            payload,
            auth_settings.JWT_SECRET.get_secret_value(),
            algorithm=JWT_ALGORITHM,
        )

    return create_token


# HTTP Client Fixtures
@pytest_asyncio.fixture
async def public_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP client for testing public endpoints."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test-access-api",
    ) as ac:
        yield ac


@pytest.fixture
def client_factory(app: FastAPI, jwt_token_factory):
    """Factory for creating HTTP clients acting as different users."""

    def create_client_for_user(
        user_id: str, organization_id: str | None = TEST_ORGANIZATION_ID
    ) -> AsyncClient:
        token = jwt_token_factory(user_id, organization_id)
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test-access-api",
            headers={"Authorization": f"Bearer {token}"},
        )

    return create_client_for_user


@pytest_asyncio.fixture
async def platform_admin_client(
    client_factory, platform_super_admin_id: str
) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory(platform_super_admin_id, None) as ac:
        yield ac


@pytest_asyncio.fixture
async def org_admin_client(
    client_factory, org_admin_id: str
) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory(org_admin_id) as ac:
        yield ac


@pytest_asyncio.fixture
async def member_client(client_factory) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated user holding no roles."""
    async with client_factory("user-plain-member") as ac:
        yield ac
