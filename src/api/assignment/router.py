"""Role assignment domain router."""

from fastapi import APIRouter, Request

from src.api.assignment.schemas import (
    GrantRoleRequest,
    RevokeRoleRequest,
    RoleAssignmentListResponse,
    RoleAssignmentModel,
    RoleAssignmentResponse,
    UserPermissionsData,
    UserPermissionsResponse,
)
from src.api.core.decorators.auth import check_self_or_permission
from src.api.core.dependencies import (
    AssignmentAuthorityServiceDep,
    AsyncSessionDep,
    CurrentActorDep,
    PermissionResolverServiceDep,
    RoleLedgerServiceDep,
)
from src.api.core.messages import APIResponse, MessageCode
from src.core.context import AuthenticatedActorContext
from src.modules.roles.catalog import Permission

router = APIRouter(
    prefix="/assignments",
    tags=["assignments"],
)


def _read_scope(
    actor: AuthenticatedActorContext, user_id: str, organization_id: str | None
) -> str | None:
    # Callers reading someone else are limited to the organization they were checked in
    if actor.user_id == user_id:
        return organization_id
    return organization_id or actor.organization_id


@router.post("/", response_model=RoleAssignmentResponse)
async def assign_role(
    request: Request,
    assignment_data: GrantRoleRequest,
    authority: AssignmentAuthorityServiceDep,
    current_actor: CurrentActorDep,
) -> RoleAssignmentResponse:
    """Grant a role to a user within an organization scope."""
    assignment = await authority.assign_role(
        assignment_data, actor_id=current_actor.user_id
    )
    return APIResponse.success(
        message_code=MessageCode.ROLE_GRANTED,
        data=RoleAssignmentModel.model_validate(assignment),
    )


@router.post("/revoke", response_model=RoleAssignmentResponse)
async def revoke_role(
    request: Request,
    revoke_data: RevokeRoleRequest,
    authority: AssignmentAuthorityServiceDep,
    current_actor: CurrentActorDep,
) -> RoleAssignmentResponse:
    """Revoke a user's active role binding."""
    assignment = await authority.revoke_role(
        user_id=revoke_data.user_id,
        role_id=revoke_data.role_id,
        organization_id=revoke_data.organization_id,
        actor_id=current_actor.user_id,
    )
    return APIResponse.success(
        message_code=MessageCode.ROLE_REVOKED,
        data=RoleAssignmentModel.model_validate(assignment),
    )


@router.get("/users/{user_id}", response_model=RoleAssignmentListResponse)
async def get_user_roles(
    user_id: str,
    request: Request,
    db: AsyncSessionDep,
    ledger: RoleLedgerServiceDep,
    current_actor: CurrentActorDep,
    organization_id: str | None = None,
) -> RoleAssignmentListResponse:
    """Active, unexpired role assignments of a user, newest first."""
    await check_self_or_permission(
        db, current_actor, user_id, Permission.ORG_USER_VIEW, organization_id
    )
    assignments = await ledger.get_user_roles(
        user_id, _read_scope(current_actor, user_id, organization_id)
    )
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[RoleAssignmentModel.model_validate(a) for a in assignments],
    )


@router.get("/users/{user_id}/permissions", response_model=UserPermissionsResponse)
async def get_user_permissions(
    user_id: str,
    request: Request,
    db: AsyncSessionDep,
    resolver: PermissionResolverServiceDep,
    current_actor: CurrentActorDep,
    organization_id: str | None = None,
) -> UserPermissionsResponse:
    """Effective permissions of a user."""
    await check_self_or_permission(
        db, current_actor, user_id, Permission.ORG_USER_VIEW, organization_id
    )
    scope = _read_scope(current_actor, user_id, organization_id)
    permissions = await resolver.get_user_permissions(user_id, scope)
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=UserPermissionsData(
            user_id=user_id,
            organization_id=scope,
            permissions=sorted(permissions),
        ),
    )
