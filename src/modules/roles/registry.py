"""Role registry: role definitions, their lifecycle and catalog bootstrap."""

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from src.api.core.constants import SYSTEM_ACTOR_ID
from src.api.core.exceptions.errors import (
    DuplicateRoleError,
    RoleInUseError,
    RoleNotFoundError,
    SystemRoleProtectedError,
)
from src.core.base import BaseService
from src.database.models import (
    EntityType,
    Role,
    RoleLevel,
    UserRoleAssignment,
    level_rank,
)
from src.modules.access.ledger import active_assignment_filter
from src.modules.roles.catalog import (
    DEFAULT_ORGANIZATION_ROLES,
    DEFAULT_PLATFORM_ROLES,
    ENTITY_ROLE_TEMPLATES,
    RoleTemplate,
    permission_values,
)
from src.modules.roles.models import RoleCreate, RoleUpdate
from src.modules.roles.restrictions import dump_role_restrictions
from src.utils.datetime_helpers import utcnow


def _sorted_by_level(roles: list[Role]) -> list[Role]:
    return sorted(roles, key=lambda role: (level_rank(role.level), role.name))


class RoleRegistryService(BaseService):
    """CRUD and bootstrap for role definitions."""

    async def create_role(self, definition: RoleCreate, created_by: str) -> Role:
        if await self.get_role_by_name(definition.name, definition.organization_id):
            raise DuplicateRoleError(definition.name, definition.organization_id)

        parent: Role | None = None
        if definition.parent_role_id is not None:
            parent = await self.get_role_by_id(definition.parent_role_id)
            if not parent:
                raise RoleNotFoundError(definition.parent_role_id)

        role = Role(
            name=definition.name,
            display_name=definition.display_name,
            description=definition.description,
            level=definition.level.value,
            category=definition.category.value,
            permissions=list(definition.permissions),
            is_default=definition.is_default,
            is_system_role=definition.is_system_role,
            organization_id=definition.organization_id,
            entity_type=(
                definition.entity_type.value if definition.entity_type else None
            ),
            parent_role_id=definition.parent_role_id,
            child_roles=[],
            restrictions=dump_role_restrictions(definition.restrictions),
            role_metadata=(
                definition.metadata.model_dump(mode="json")
                if definition.metadata
                else None
            ),
            is_active=True,
            created_by=created_by,
        )
        self.db.add(role)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateRoleError(definition.name, definition.organization_id)

        if parent is not None and str(role.id) not in parent.child_roles:
            # Reassign so the JSON column is flagged dirty
            parent.child_roles = [*parent.child_roles, str(role.id)]

        await self.db.commit()
        await self.db.refresh(role)

        self.logger.info(
            "Role created",
            role_id=str(role.id),
            name=role.name,
            organization_id=role.organization_id,
            created_by=created_by,
        )
        await self._invalidate_hierarchy(role.organization_id)
        return role

    async def get_role_by_id(self, role_id: UUID) -> Role | None:
        return await self.db.get(Role, role_id)

    async def get_role_by_name(
        self, name: str, organization_id: str | None = None
    ) -> Role | None:
        stmt = select(Role).where(Role.name == name)
        if organization_id is None:
            stmt = stmt.where(Role.organization_id.is_(None))
        else:
            stmt = stmt.where(Role.organization_id == organization_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_roles_by_organization(
        self,
        organization_id: str,
        level: RoleLevel | None = None,
        include_system: bool = True,
    ) -> list[Role]:
        """Active roles visible to an organization, ordered by level then name."""
        scope = Role.organization_id == organization_id
        if include_system:
            scope = or_(
                scope,
                (Role.organization_id.is_(None)) & (Role.is_system_role.is_(True)),
            )

        stmt = select(Role).where(Role.is_active.is_(True), scope)
        if level is not None:
            stmt = stmt.where(Role.level == RoleLevel(level).value)

        result = await self.db.execute(stmt)
        return _sorted_by_level(list(result.scalars().all()))

    async def get_platform_roles(self) -> list[Role]:
        result = await self.db.execute(
            select(Role)
            .where(
                Role.level == RoleLevel.PLATFORM.value,
                Role.is_active.is_(True),
            )
            .order_by(Role.name)
        )
        return list(result.scalars().all())

    async def update_role(
        self, role_id: UUID, patch: RoleUpdate, updated_by: str
    ) -> Role:
        role = await self.get_role_by_id(role_id)
        if not role:
            raise RoleNotFoundError(role_id)

        changes = patch.model_fields_set
        if "is_active" in changes and patch.is_active is False and role.is_active:
            await self._ensure_removable(role)

        if "display_name" in changes and patch.display_name is not None:
            role.display_name = patch.display_name
        if "description" in changes and patch.description is not None:
            role.description = patch.description
        if "permissions" in changes and patch.permissions is not None:
            role.permissions = list(dict.fromkeys(patch.permissions))
        if "restrictions" in changes:
            role.restrictions = dump_role_restrictions(patch.restrictions or [])
        if "metadata" in changes:
            role.role_metadata = (
                patch.metadata.model_dump(mode="json") if patch.metadata else None
            )
        if "is_active" in changes and patch.is_active is not None:
            role.is_active = patch.is_active

        role.updated_by = updated_by
        role.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(role)

        self.logger.info(
            "Role updated",
            role_id=str(role.id),
            fields=sorted(changes),
            updated_by=updated_by,
        )
        await self._invalidate_hierarchy(role.organization_id)
        return role

    async def count_active_assignments(self, role_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(UserRoleAssignment.id)).where(
                UserRoleAssignment.role_id == role_id,
                active_assignment_filter(utcnow()),
            )
        )
        return result.scalar_one()

    async def _ensure_removable(self, role: Role) -> None:
        if role.is_system_role:
            raise SystemRoleProtectedError(role.id)

        active_assignments = await self.count_active_assignments(role.id)
        if active_assignments > 0:
            raise RoleInUseError(role.id, active_assignments)

    async def delete_role(self, role_id: UUID, deleted_by: str) -> Role:
        """Soft-delete a role that is neither a system role nor in use."""
        role = await self.get_role_by_id(role_id)
        if not role:
            raise RoleNotFoundError(role_id)
        await self._ensure_removable(role)

        role.is_active = False
        role.updated_by = deleted_by
        role.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(role)

        self.logger.info("Role deleted", role_id=str(role.id), deleted_by=deleted_by)
        await self._invalidate_hierarchy(role.organization_id)
        return role

    async def initialize_default_roles(self) -> list[Role]:
        """Seed the platform and default organization catalogs.

        Safe to call repeatedly; existing names are left untouched.
        """
        created = await self._seed_templates(
            [*DEFAULT_PLATFORM_ROLES, *DEFAULT_ORGANIZATION_ROLES],
            organization_id=None,
        )
        self.logger.info("Default roles initialized", created=len(created))
        if created:
            await self._invalidate_hierarchy(None)
        return created

    async def initialize_organization_roles(
        self, organization_id: str, entity_type: EntityType
    ) -> list[Role]:
        """Seed entity templates for an organization and materialize its hierarchy."""
        from src.modules.roles.hierarchy import HierarchyBuilderService

        templates = ENTITY_ROLE_TEMPLATES.get(EntityType(entity_type), [])
        created = await self._seed_templates(templates, organization_id)

        hierarchy_service = HierarchyBuilderService(self.db)
        if created:
            await hierarchy_service.invalidate(organization_id)
        await hierarchy_service.get_role_hierarchy(organization_id)

        self.logger.info(
            "Organization roles initialized",
            organization_id=organization_id,
            entity_type=EntityType(entity_type).value,
            created=len(created),
        )
        return created

    async def _seed_templates(
        self, templates: list[RoleTemplate], organization_id: str | None
    ) -> list[Role]:
        created: list[Role] = []
        for template in templates:
            if await self.get_role_by_name(template.name, organization_id):
                continue
            role = Role(
                name=template.name,
                display_name=template.display_name,
                description=template.description,
                level=template.level.value,
                category=template.category.value,
                permissions=permission_values(template.permissions),
                is_default=template.is_default,
                is_system_role=template.is_system_role,
                organization_id=organization_id,
                entity_type=(
                    template.entity_type.value if template.entity_type else None
                ),
                child_roles=[],
                restrictions=[],
                is_active=True,
                created_by=SYSTEM_ACTOR_ID,
            )
            self.db.add(role)
            created.append(role)

        if created:
            await self.db.commit()
            for role in created:
                await self.db.refresh(role)
        return created

    async def _invalidate_hierarchy(self, organization_id: str | None) -> None:
        from src.modules.roles.hierarchy import HierarchyBuilderService

        # Platform-scoped roles are visible to every organization
        await HierarchyBuilderService(self.db).invalidate(organization_id)
