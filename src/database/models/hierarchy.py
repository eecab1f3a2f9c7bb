"""Per-organization role hierarchy snapshot."""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType


class RoleHierarchy(Base):
    __tablename__ = "role_hierarchies"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True
    )
    hierarchy_tree: Mapped[list[dict]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    default_roles: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    allowed_roles: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    custom_roles: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
