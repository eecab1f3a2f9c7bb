"""Role definition model and related enums."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType


class RoleLevel(str, Enum):
    PLATFORM = "platform"
    ORGANIZATION_SUPER = "organization_super"
    ORGANIZATION_ADMIN = "organization_admin"
    ORGANIZATION_STANDARD = "organization_standard"
    ENTITY_SPECIFIC = "entity_specific"


# Outermost scope first; a role's rank is its index in this list
ROLE_LEVEL_ORDER: list[RoleLevel] = [
    RoleLevel.PLATFORM,
    RoleLevel.ORGANIZATION_SUPER,
    RoleLevel.ORGANIZATION_ADMIN,
    RoleLevel.ORGANIZATION_STANDARD,
    RoleLevel.ENTITY_SPECIFIC,
]


def level_rank(level: RoleLevel | str) -> int:
    """Return the numeric rank of a role level (0 = platform)."""
    return ROLE_LEVEL_ORDER.index(RoleLevel(level))


class RoleCategory(str, Enum):
    SYSTEM = "system"
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"
    VIEWER = "viewer"
    SPECIALIST = "specialist"


class EntityType(str, Enum):
    BANK = "bank"
    NBFC = "nbfc"
    CORPORATE = "corporate"
    LOGISTICS = "logistics"
    INSURANCE = "insurance"


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    level: Mapped[RoleLevel] = mapped_column(String(32), nullable=False)
    category: Mapped[RoleCategory] = mapped_column(String(32), nullable=False)
    permissions: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_system_role: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    # NULL means the role is platform-scoped
    organization_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    entity_type: Mapped[EntityType | None] = mapped_column(String(32), nullable=True)
    parent_role_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True
    )
    child_roles: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    restrictions: Mapped[list[dict]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    role_metadata: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)


# Platform roles (organization_id IS NULL) share one scope key
Index(
    "uq_roles_name_scope",
    Role.name,
    func.coalesce(Role.organization_id, ""),
    unique=True,
)
