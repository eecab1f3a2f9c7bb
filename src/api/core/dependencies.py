from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import AccessControlException
from src.api.core.messages import MessageCode
from src.core.context import AuthenticatedActorContext
from src.modules.access.authority import AssignmentAuthorityService
from src.modules.access.ledger import RoleLedgerService
from src.modules.access.permissions import PermissionResolverService
from src.modules.onboarding.engine import OnboardingEngineService
from src.modules.roles.hierarchy import HierarchyBuilderService
from src.modules.roles.registry import RoleRegistryService


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_role_registry_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> RoleRegistryService:
    """Get role registry service with database session."""
    return RoleRegistryService(db)


async def get_hierarchy_builder_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> HierarchyBuilderService:
    """Get hierarchy builder service with database session."""
    return HierarchyBuilderService(db)


async def get_assignment_authority_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> AssignmentAuthorityService:
    """Get assignment authority service with database session."""
    return AssignmentAuthorityService(db)


async def get_role_ledger_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> RoleLedgerService:
    """Get role ledger service with database session."""
    return RoleLedgerService(db)


async def get_permission_resolver_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> PermissionResolverService:
    """Get permission resolver service with database session."""
    return PermissionResolverService(db)


async def get_onboarding_engine_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> OnboardingEngineService:
    """Get onboarding engine service with database session."""
    return OnboardingEngineService(db)


async def get_current_actor(request: Request) -> AuthenticatedActorContext:
    """Dependency to get the caller identified by the bearer token.

    The auth middleware leaves ``request.state.actor`` as ``None`` when the
    token is missing or invalid.
    """
    actor = getattr(request.state, "actor", None)
    if actor is None:
        raise AccessControlException(
            MessageCode.AUTH_REQUIRED,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "A valid 'Authorization: Bearer <token>' header is required"},
        )
    return actor


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
RoleRegistryServiceDep = Annotated[
    RoleRegistryService, Depends(get_role_registry_service)
]
HierarchyBuilderServiceDep = Annotated[
    HierarchyBuilderService, Depends(get_hierarchy_builder_service)
]
AssignmentAuthorityServiceDep = Annotated[
    AssignmentAuthorityService, Depends(get_assignment_authority_service)
]
RoleLedgerServiceDep = Annotated[RoleLedgerService, Depends(get_role_ledger_service)]
PermissionResolverServiceDep = Annotated[
    PermissionResolverService, Depends(get_permission_resolver_service)
]
OnboardingEngineServiceDep = Annotated[
    OnboardingEngineService, Depends(get_onboarding_engine_service)
]

CurrentActorDep = Annotated[AuthenticatedActorContext, Depends(get_current_actor)]
