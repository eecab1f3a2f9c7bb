"""Effective permission resolution."""

from sqlalchemy import select

from src.core.base import BaseService
from src.database.models import Role, UserRoleAssignment
from src.modules.access.ledger import active_assignment_filter
from src.modules.roles.catalog import Permission
from src.utils.datetime_helpers import utcnow


class PermissionResolverService(BaseService):
    """Computes the union of permissions granted through active assignments.

    Nothing is cached across calls; every check reads the ledger.
    """

    async def get_user_permissions(
        self, user_id: str, organization_id: str | None = None
    ) -> set[str]:
        stmt = (
            select(Role.permissions)
            .join(UserRoleAssignment, UserRoleAssignment.role_id == Role.id)
            .where(
                UserRoleAssignment.user_id == user_id,
                active_assignment_filter(utcnow()),
                Role.is_active.is_(True),
            )
        )
        if organization_id is not None:
            stmt = stmt.where(UserRoleAssignment.organization_id == organization_id)

        result = await self.db.execute(stmt)
        permissions: set[str] = set()
        for role_permissions in result.scalars().all():
            permissions.update(role_permissions or [])
        return permissions

    async def has_permission(
        self,
        user_id: str,
        permission: Permission | str,
        organization_id: str | None = None,
    ) -> bool:
        value = permission.value if isinstance(permission, Permission) else permission
        permissions = await self.get_user_permissions(user_id, organization_id)
        return value in permissions
