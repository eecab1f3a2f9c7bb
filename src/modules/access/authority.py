"""Assignment authority: who may grant or revoke which role where."""

from uuid import UUID

from sqlalchemy import select

from src.api.core.constants import PLATFORM_ORGANIZATION_ID, SYSTEM_ACTOR_ID
from src.api.core.exceptions.errors import (
    InsufficientPermissionError,
    OrganizationMismatchError,
    RoleAssignmentExistsError,
    RoleNotFoundError,
)
from src.core.base import BaseService
from src.database.models import Role, RoleLevel, UserRoleAssignment
from src.modules.access.ledger import RoleLedgerService, active_assignment_filter
from src.modules.access.models import AssignRoleRequest
from src.modules.roles.catalog import get_assignment_rule
from src.modules.roles.registry import RoleRegistryService
from src.modules.roles.restrictions import AssignmentMetadata
from src.utils.datetime_helpers import utcnow


class AssignmentAuthorityService(BaseService):
    """Authorizes and performs role grants and revocations."""

    def __init__(self, db):
        super().__init__(db)
        self.registry = RoleRegistryService(db)
        self.ledger = RoleLedgerService(db)

    async def get_actor_role_names(self, actor_id: str, organization_id: str) -> set[str]:
        """Names of the actor's active roles in the organization or platform scope."""
        scopes = {organization_id, PLATFORM_ORGANIZATION_ID}
        result = await self.db.execute(
            select(Role.name)
            .join(UserRoleAssignment, UserRoleAssignment.role_id == Role.id)
            .where(
                UserRoleAssignment.user_id == actor_id,
                UserRoleAssignment.organization_id.in_(scopes),
                active_assignment_filter(utcnow()),
                Role.is_active.is_(True),
            )
        )
        return set(result.scalars().all())

    async def _is_authorized(
        self, actor_id: str, target_role: Role, organization_id: str
    ) -> bool:
        for role_name in await self.get_actor_role_names(actor_id, organization_id):
            rule = get_assignment_rule(role_name)
            if rule and rule.allows(target_role.name):
                return True
        return False

    async def can_user_assign_role(
        self, actor_id: str, target_role_id: UUID, organization_id: str
    ) -> bool:
        role = await self.registry.get_role_by_id(target_role_id)
        if not role or not role.is_active:
            return False
        return await self._is_authorized(actor_id, role, organization_id)

    @staticmethod
    def _check_scope(role: Role, organization_id: str) -> None:
        is_platform_role = role.level == RoleLevel.PLATFORM
        if is_platform_role and organization_id != PLATFORM_ORGANIZATION_ID:
            raise OrganizationMismatchError(
                role.id,
                organization_id,
                "Platform roles can only be granted in the platform scope",
            )
        if not is_platform_role and organization_id == PLATFORM_ORGANIZATION_ID:
            raise OrganizationMismatchError(
                role.id,
                organization_id,
                "Only platform roles can be granted in the platform scope",
            )
        if role.organization_id is not None and role.organization_id != organization_id:
            raise OrganizationMismatchError(
                role.id,
                organization_id,
                "Role belongs to a different organization",
            )

    async def _authorize(
        self, actor_id: str, role: Role, organization_id: str, action: str
    ) -> None:
        if not await self._is_authorized(actor_id, role, organization_id):
            self.logger.warning(
                f"Role {action} denied",
                actor_id=actor_id,
                role_id=str(role.id),
                organization_id=organization_id,
            )
            raise InsufficientPermissionError(f"Not allowed to {action} this role")

    async def assign_role(
        self, request: AssignRoleRequest, actor_id: str
    ) -> UserRoleAssignment:
        role = await self.registry.get_role_by_id(request.role_id)
        if not role or not role.is_active:
            raise RoleNotFoundError(request.role_id)

        await self._authorize(actor_id, role, request.organization_id, "assign")
        self._check_scope(role, request.organization_id)

        if await self.ledger.get_active_assignment(
            request.user_id, role.id, request.organization_id
        ):
            raise RoleAssignmentExistsError(
                request.user_id, role.id, request.organization_id
            )

        assignment = await self.ledger.insert_assignment(
            user_id=request.user_id,
            role_id=role.id,
            organization_id=request.organization_id,
            assigned_by=actor_id,
            expires_at=request.expires_at,
            is_temporary=request.is_temporary,
            restrictions=request.restrictions,
            metadata=request.metadata,
        )
        self.logger.info(
            "Role assigned",
            user_id=request.user_id,
            role=role.name,
            organization_id=request.organization_id,
            assigned_by=actor_id,
        )
        return assignment

    async def revoke_role(
        self, user_id: str, role_id: UUID, organization_id: str, actor_id: str
    ) -> UserRoleAssignment:
        role = await self.registry.get_role_by_id(role_id)
        if not role:
            raise RoleNotFoundError(role_id)

        await self._authorize(actor_id, role, organization_id, "revoke")

        assignment = await self.ledger.deactivate_assignment(
            user_id, role_id, organization_id, revoked_by=actor_id
        )
        self.logger.info(
            "Role revoked",
            user_id=user_id,
            role=role.name,
            organization_id=organization_id,
            revoked_by=actor_id,
        )
        return assignment

    async def grant_system_role(
        self, user_id: str, role_name: str, organization_id: str, reason: str
    ) -> UserRoleAssignment | None:
        """Grant a role on behalf of the service itself, bypassing the rule table.

        Prefers an organization-owned role of that name over the platform-scoped
        one. Returns the existing binding if the user already holds the role and
        ``None`` if no such active role exists.
        """
        role = await self.registry.get_role_by_name(
            role_name, organization_id
        ) or await self.registry.get_role_by_name(role_name, None)
        if not role or not role.is_active:
            self.logger.warning(
                "System grant skipped, role not found",
                role=role_name,
                user_id=user_id,
                organization_id=organization_id,
            )
            return None

        existing = await self.ledger.get_active_assignment(
            user_id, role.id, organization_id
        )
        if existing:
            self.logger.info(
                "System grant skipped, already assigned",
                role=role_name,
                user_id=user_id,
                organization_id=organization_id,
            )
            return existing

        try:
            return await self.ledger.insert_assignment(
                user_id=user_id,
                role_id=role.id,
                organization_id=organization_id,
                assigned_by=SYSTEM_ACTOR_ID,
                metadata=AssignmentMetadata(assignment_reason=reason),
            )
        except RoleAssignmentExistsError:
            return await self.ledger.get_active_assignment(
                user_id, role.id, organization_id
            )
