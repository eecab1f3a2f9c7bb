import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.api.core.constants import PLATFORM_ORGANIZATION_ID
from src.api.core.exceptions.base import register_exception_handlers
from src.api.core.middleware.auth import auth_middleware
from src.api.core.middleware.logging import logging_middleware
from src.api.core.middleware.security import (
    PayloadSizeMiddleware,
    SecurityHeadersMiddleware,
)
from src.api.router import api_router
from src.database.connection import AsyncSessionLocal
from src.modules.access.authority import AssignmentAuthorityService
from src.modules.roles.registry import RoleRegistryService
from src.utils.logger import get_logger, setup_logging
from src.utils.settings.app import AppSettings


is_production = AppSettings().ENVIRONMENT.upper() == "PROD"


async def bootstrap_roles(
    session_factory: async_sessionmaker[AsyncSession], app_settings: AppSettings
) -> None:
    """Seed default role catalogs and grant the configured platform super admin."""
    logger = get_logger(__name__)
    async with session_factory() as session:
        created = await RoleRegistryService(session).initialize_default_roles()
        logger.info("Default role catalog ready", created=len(created))

        if app_settings.PLATFORM_SUPER_ADMIN_USER_ID:
            await AssignmentAuthorityService(session).grant_system_role(
                user_id=app_settings.PLATFORM_SUPER_ADMIN_USER_ID,
                role_name="platform_super_admin",
                organization_id=PLATFORM_ORGANIZATION_ID,
                reason="bootstrap",
            )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger = setup_logging(is_production)
    logger.info("Starting BlockTrade Access API...")

    app_settings = AppSettings()
    app_settings.validate_prod()

    # Tests may install their own factory before startup
    if getattr(app.state, "session_factory", None) is None:
        app.state.session_factory = AsyncSessionLocal
    logger.info("Database session factory added to app state")

    if app_settings.BOOTSTRAP_DEFAULT_ROLES:
        await bootstrap_roles(app.state.session_factory, app_settings)

    yield

    # Shutdown
    logger.info("Shutting down BlockTrade Access API...")


# Create app with production settings
app = FastAPI(
    title="BlockTrade Access API",
    description="Multi-tenant role-based access control and user onboarding",
    version=AppSettings().API_VERSION,
    lifespan=lifespan,
    # Security: Disable docs in production
    docs_url=None if is_production else "/docs",
    redoc_url=None if is_production else "/redoc",
    openapi_url=None if is_production else "/openapi.json",
)

# Register global exception handlers
register_exception_handlers(app)


app_settings = AppSettings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware, is_production=is_production)
app.add_middleware(PayloadSizeMiddleware, max_request_size=app_settings.MAX_REQUEST_SIZE)
app.middleware("http")(auth_middleware)
app.middleware("http")(logging_middleware)

app.include_router(api_router)


def run_dev_server():
    """Run development server with auto-reload."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=True, access_log=False
    )


def run_prod_server():
    """Run production server."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=False, access_log=False
    )
