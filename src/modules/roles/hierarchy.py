"""Role hierarchy derivation and per-organization snapshots."""

from uuid import UUID

from sqlalchemy import delete, select

from src.core.base import BaseService
from src.database.models import ROLE_LEVEL_ORDER, Role, RoleHierarchy, level_rank
from src.modules.roles.catalog import get_assignment_rule
from src.modules.roles.models import RoleHierarchyNode


def _rule_targets(role: Role, roles: list[Role]) -> tuple[list[UUID], list[UUID]]:
    """Resolve (can_manage, can_assign) role ids for a role from the rule table."""
    rule = get_assignment_rule(role.name)
    if rule is None:
        return [], []
    can_assign = [r.id for r in roles if rule.allows(r.name)]
    can_manage = list(can_assign) if rule.can_manage_users else []
    return can_manage, can_assign


def build_hierarchy_tree(roles: list[Role]) -> list[RoleHierarchyNode]:
    """Nest roles into a forest by level.

    Levels are walked outermost first. Each role not yet placed becomes a node
    and adopts every unplaced role at a strictly later level, so every child
    sits at a higher rank than its parent and each role appears exactly once.
    Declared ``parent_role_id`` edges do not shape the tree.
    """
    by_level: dict[int, list[Role]] = {}
    for role in roles:
        by_level.setdefault(level_rank(role.level), []).append(role)
    for bucket in by_level.values():
        bucket.sort(key=lambda r: r.name)

    visited: set[UUID] = set()

    def build_node(role: Role) -> RoleHierarchyNode:
        visited.add(role.id)
        rank = level_rank(role.level)
        can_manage, can_assign = _rule_targets(role, roles)
        node = RoleHierarchyNode(
            role_id=role.id,
            role_name=role.name,
            level=rank,
            permissions=list(role.permissions),
            can_manage=can_manage,
            can_assign=can_assign,
        )
        for child_rank in range(rank + 1, len(ROLE_LEVEL_ORDER)):
            for child in by_level.get(child_rank, []):
                if child.id not in visited:
                    node.children.append(build_node(child))
        return node

    tree: list[RoleHierarchyNode] = []
    for rank in range(len(ROLE_LEVEL_ORDER)):
        for role in by_level.get(rank, []):
            if role.id not in visited:
                tree.append(build_node(role))
    return tree


class HierarchyBuilderService(BaseService):
    """Builds and stores the management/assignment forest per organization."""

    async def create_organization_hierarchy(self, organization_id: str) -> RoleHierarchy:
        from src.modules.roles.registry import RoleRegistryService

        roles = await RoleRegistryService(self.db).get_roles_by_organization(
            organization_id, include_system=True
        )
        tree = build_hierarchy_tree(roles)

        snapshot = await self.get_organization_hierarchy(organization_id)
        if snapshot is None:
            snapshot = RoleHierarchy(organization_id=organization_id)
            self.db.add(snapshot)

        snapshot.hierarchy_tree = [node.model_dump(mode="json") for node in tree]
        snapshot.default_roles = [str(r.id) for r in roles if r.is_default]
        snapshot.allowed_roles = [str(r.id) for r in roles]
        snapshot.custom_roles = [
            str(r.id)
            for r in roles
            if r.organization_id == organization_id and not r.is_default
        ]
        await self.db.commit()
        await self.db.refresh(snapshot)

        self.logger.info(
            "Role hierarchy built",
            organization_id=organization_id,
            roles=len(roles),
            roots=len(tree),
        )
        return snapshot

    async def get_organization_hierarchy(
        self, organization_id: str
    ) -> RoleHierarchy | None:
        result = await self.db.execute(
            select(RoleHierarchy).where(
                RoleHierarchy.organization_id == organization_id
            )
        )
        return result.scalar_one_or_none()

    async def get_role_hierarchy(self, organization_id: str) -> RoleHierarchy:
        """Stored snapshot for an organization, built on first read."""
        snapshot = await self.get_organization_hierarchy(organization_id)
        if snapshot is not None:
            return snapshot
        return await self.create_organization_hierarchy(organization_id)

    async def invalidate(self, organization_id: str | None) -> None:
        """Drop the snapshot for one organization, or all of them for ``None``."""
        stmt = delete(RoleHierarchy)
        if organization_id is not None:
            stmt = stmt.where(RoleHierarchy.organization_id == organization_id)
        await self.db.execute(stmt)
        await self.db.commit()
        self.logger.debug(
            "Role hierarchy invalidated", organization_id=organization_id or "*"
        )
