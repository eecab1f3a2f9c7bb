"""Role ledger: user-role bindings and their lifecycle."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError

from src.api.core.exceptions.errors import (
    AssignmentNotFoundError,
    RoleAssignmentExistsError,
)
from src.core.base import BaseService
from src.database.models import UserRoleAssignment
from src.modules.roles.restrictions import (
    AssignmentMetadata,
    AssignmentRestriction,
    dump_assignment_restrictions,
)
from src.utils.datetime_helpers import ensure_utc, utcnow


def active_assignment_filter(now: datetime):
    """Rows that are flagged active and not past their expiry."""
    return and_(
        UserRoleAssignment.is_active.is_(True),
        or_(
            UserRoleAssignment.expires_at.is_(None),
            UserRoleAssignment.expires_at > now,
        ),
    )


class RoleLedgerService(BaseService):
    """Stores user-role bindings; source of truth for permission aggregation."""

    async def get_user_roles(
        self, user_id: str, organization_id: str | None = None
    ) -> list[UserRoleAssignment]:
        """Active, unexpired assignments for a user, newest first.

        ``organization_id=None`` spans every organization.
        """
        stmt = select(UserRoleAssignment).where(
            UserRoleAssignment.user_id == user_id,
            active_assignment_filter(utcnow()),
        )
        if organization_id is not None:
            stmt = stmt.where(UserRoleAssignment.organization_id == organization_id)
        stmt = stmt.order_by(UserRoleAssignment.assigned_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_role_holders(self, role_id: UUID) -> list[UserRoleAssignment]:
        result = await self.db.execute(
            select(UserRoleAssignment)
            .where(
                UserRoleAssignment.role_id == role_id,
                active_assignment_filter(utcnow()),
            )
            .order_by(UserRoleAssignment.assigned_at.desc())
        )
        return list(result.scalars().all())

    async def get_active_assignment(
        self, user_id: str, role_id: UUID, organization_id: str
    ) -> UserRoleAssignment | None:
        result = await self.db.execute(
            select(UserRoleAssignment).where(
                UserRoleAssignment.user_id == user_id,
                UserRoleAssignment.role_id == role_id,
                UserRoleAssignment.organization_id == organization_id,
                active_assignment_filter(utcnow()),
            )
        )
        return result.scalar_one_or_none()

    async def insert_assignment(
        self,
        user_id: str,
        role_id: UUID,
        organization_id: str,
        assigned_by: str,
        expires_at: datetime | None = None,
        is_temporary: bool = False,
        restrictions: list[AssignmentRestriction] | None = None,
        metadata: AssignmentMetadata | None = None,
    ) -> UserRoleAssignment:
        """Insert an active binding unless one already exists.

        The partial unique index on active rows is authoritative: a concurrent
        insert of the same triple surfaces as ``RoleAssignmentExistsError``.
        """
        now = utcnow()

        # Expired rows still flagged active would otherwise hold the unique slot
        await self.db.execute(
            update(UserRoleAssignment)
            .where(
                UserRoleAssignment.user_id == user_id,
                UserRoleAssignment.role_id == role_id,
                UserRoleAssignment.organization_id == organization_id,
                UserRoleAssignment.is_active.is_(True),
                UserRoleAssignment.expires_at.is_not(None),
                UserRoleAssignment.expires_at <= now,
            )
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )

        assignment = UserRoleAssignment(
            user_id=user_id,
            role_id=role_id,
            organization_id=organization_id,
            assigned_by=assigned_by,
            assigned_at=now,
            expires_at=ensure_utc(expires_at),
            is_temporary=is_temporary,
            is_active=True,
            restrictions=dump_assignment_restrictions(
                restrictions or [], applied_by=assigned_by, applied_at=now
            ),
            assignment_metadata=(
                metadata.model_dump(mode="json") if metadata is not None else None
            ),
        )
        self.db.add(assignment)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            self.logger.info(
                "Concurrent role assignment rejected",
                user_id=user_id,
                role_id=str(role_id),
                organization_id=organization_id,
            )
            raise RoleAssignmentExistsError(user_id, role_id, organization_id)

        await self.db.refresh(assignment)
        return assignment

    async def deactivate_assignment(
        self, user_id: str, role_id: UUID, organization_id: str, revoked_by: str
    ) -> UserRoleAssignment:
        assignment = await self.get_active_assignment(
            user_id, role_id, organization_id
        )
        if not assignment:
            raise AssignmentNotFoundError(user_id, role_id, organization_id)

        assignment.is_active = False
        assignment.revoked_at = utcnow()
        assignment.revoked_by = revoked_by
        await self.db.commit()
        await self.db.refresh(assignment)
        return assignment
