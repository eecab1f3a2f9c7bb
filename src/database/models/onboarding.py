"""Onboarding journey state model."""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, JSONType
from .roles import EntityType


class OnboardingState(Base):
    __tablename__ = "onboarding_states"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)
    organization_type: Mapped[EntityType] = mapped_column(String(32), nullable=False)
    current_step: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    completed_steps: Mapped[list[int]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    # Keyed "step1" .. "step5"
    step_data: Mapped[dict[str, dict]] = mapped_column(
        JSONType, nullable=False, default=dict
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    is_complete: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    assigned_roles: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    temporary_permissions: Mapped[list[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id", "organization_id", name="unique_user_org_onboarding"
        ),
    )
