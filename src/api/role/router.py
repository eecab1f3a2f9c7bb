"""Role domain router."""

from uuid import UUID

from fastapi import APIRouter, Request

from src.api.core.decorators.auth import check_permission, require_permission
from src.api.core.dependencies import (
    AsyncSessionDep,
    CurrentActorDep,
    HierarchyBuilderServiceDep,
    RoleRegistryServiceDep,
)
from src.api.core.exceptions.errors import (
    InsufficientPermissionError,
    RoleNotFoundError,
)
from src.api.core.messages import APIResponse, MessageCode
from src.api.role.schemas import (
    CreateRoleRequest,
    InitializeOrganizationRolesRequest,
    RoleHierarchyModel,
    RoleHierarchyResponse,
    RoleListResponse,
    RoleModel,
    RoleResponse,
    RolesInitializedData,
    RolesInitializedResponse,
    UpdateRoleRequest,
)
from src.database.models import Role, RoleLevel
from src.modules.roles.catalog import Permission

router = APIRouter(
    prefix="/roles",
    tags=["roles"],
)


def _scoped_permission(
    organization_id: str | None, org_permission: Permission
) -> Permission:
    # Roles without an owning organization are managed at platform level
    if organization_id is None:
        return Permission.PLATFORM_ROLE_MANAGE
    return org_permission


async def _get_authorized_role(
    db, registry, actor, role_id: UUID, org_permission: Permission
) -> Role:
    """Load a role the actor may act on; anything else reads as not found."""
    role = await registry.get_role_by_id(role_id)
    if not role:
        raise RoleNotFoundError(role_id)
    try:
        await check_permission(
            db,
            actor,
            _scoped_permission(role.organization_id, org_permission),
            role.organization_id,
        )
    except InsufficientPermissionError:
        raise RoleNotFoundError(role_id) from None
    return role


@router.post("/", response_model=RoleResponse)
async def create_role(
    request: Request,
    role_data: CreateRoleRequest,
    db: AsyncSessionDep,
    registry: RoleRegistryServiceDep,
    current_actor: CurrentActorDep,
) -> RoleResponse:
    """Create a role, organization-owned or platform-scoped."""
    await check_permission(
        db,
        current_actor,
        _scoped_permission(role_data.organization_id, Permission.ORG_ROLE_CREATE),
        role_data.organization_id,
    )
    role = await registry.create_role(role_data, created_by=current_actor.user_id)
    return APIResponse.success(
        message_code=MessageCode.ROLE_CREATED,
        data=RoleModel.model_validate(role),
    )


@router.get("/", response_model=RoleListResponse)
@require_permission(Permission.ORG_ROLE_MANAGE)
async def list_organization_roles(
    request: Request,
    db: AsyncSessionDep,
    registry: RoleRegistryServiceDep,
    current_actor: CurrentActorDep,
    organization_id: str | None = None,
    level: RoleLevel | None = None,
    include_system: bool = True,
) -> RoleListResponse:
    """List active roles visible to an organization, ordered by level then name."""
    roles = await registry.get_roles_by_organization(
        organization_id or current_actor.organization_id,
        level=level,
        include_system=include_system,
    )
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[RoleModel.model_validate(role) for role in roles],
    )


@router.get("/platform", response_model=RoleListResponse)
@require_permission(Permission.PLATFORM_ROLE_MANAGE)
async def list_platform_roles(
    request: Request,
    db: AsyncSessionDep,
    registry: RoleRegistryServiceDep,
    current_actor: CurrentActorDep,
) -> RoleListResponse:
    """List active platform-level roles."""
    roles = await registry.get_platform_roles()
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[RoleModel.model_validate(role) for role in roles],
    )


@router.get("/hierarchy", response_model=RoleHierarchyResponse)
@require_permission(Permission.ORG_ROLE_MANAGE)
async def get_role_hierarchy(
    request: Request,
    db: AsyncSessionDep,
    hierarchy_service: HierarchyBuilderServiceDep,
    current_actor: CurrentActorDep,
    organization_id: str | None = None,
) -> RoleHierarchyResponse:
    """Get the management/assignment hierarchy of an organization."""
    snapshot = await hierarchy_service.get_role_hierarchy(
        organization_id or current_actor.organization_id
    )
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=RoleHierarchyModel.model_validate(snapshot),
    )


@router.post("/bootstrap/platform", response_model=RolesInitializedResponse)
@require_permission(Permission.PLATFORM_SYSTEM_CONFIG)
async def initialize_default_roles(
    request: Request,
    db: AsyncSessionDep,
    registry: RoleRegistryServiceDep,
    current_actor: CurrentActorDep,
) -> RolesInitializedResponse:
    """Seed the platform and default organization role catalogs."""
    created = await registry.initialize_default_roles()
    return APIResponse.success(
        message_code=MessageCode.ROLES_INITIALIZED,
        data=RolesInitializedData(
            created=[RoleModel.model_validate(role) for role in created],
            created_count=len(created),
        ),
    )


@router.post("/bootstrap/organizations", response_model=RolesInitializedResponse)
@require_permission(Permission.PLATFORM_ORG_MANAGE)
async def initialize_organization_roles(
    request: Request,
    bootstrap_data: InitializeOrganizationRolesRequest,
    db: AsyncSessionDep,
    registry: RoleRegistryServiceDep,
    current_actor: CurrentActorDep,
) -> RolesInitializedResponse:
    """Seed the entity role templates for an organization."""
    created = await registry.initialize_organization_roles(
        bootstrap_data.organization_id, bootstrap_data.entity_type
    )
    return APIResponse.success(
        message_code=MessageCode.ROLES_INITIALIZED,
        data=RolesInitializedData(
            created=[RoleModel.model_validate(role) for role in created],
            created_count=len(created),
        ),
    )


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: UUID,
    request: Request,
    db: AsyncSessionDep,
    registry: RoleRegistryServiceDep,
    current_actor: CurrentActorDep,
) -> RoleResponse:
    """Get a single role definition."""
    role = await _get_authorized_role(
        db, registry, current_actor, role_id, Permission.ORG_ROLE_MANAGE
    )
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=RoleModel.model_validate(role),
    )


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: UUID,
    request: Request,
    role_data: UpdateRoleRequest,
    db: AsyncSessionDep,
    registry: RoleRegistryServiceDep,
    current_actor: CurrentActorDep,
) -> RoleResponse:
    """Partially update a role definition."""
    role = await _get_authorized_role(
        db, registry, current_actor, role_id, Permission.ORG_ROLE_MANAGE
    )
    role = await registry.update_role(
        role_id, role_data, updated_by=current_actor.user_id
    )
    return APIResponse.success(
        message_code=MessageCode.ROLE_UPDATED,
        data=RoleModel.model_validate(role),
    )


@router.delete("/{role_id}", response_model=RoleResponse)
async def delete_role(
    role_id: UUID,
    request: Request,
    db: AsyncSessionDep,
    registry: RoleRegistryServiceDep,
    current_actor: CurrentActorDep,
) -> RoleResponse:
    """Deactivate a role that is neither a system role nor still assigned."""
    role = await _get_authorized_role(
        db, registry, current_actor, role_id, Permission.ORG_ROLE_CREATE
    )
    role = await registry.delete_role(role_id, deleted_by=current_actor.user_id)
    return APIResponse.success(
        message_code=MessageCode.ROLE_DELETED,
        data=RoleModel.model_validate(role),
    )
