"""Assignment domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.modules.roles.restrictions import AssignmentMetadata, AssignmentRestriction
from src.utils.datetime_helpers import ensure_utc, utcnow


class AssignRoleRequest(BaseModel):
    """Grant of one role to one user within one organization scope."""

    user_id: str = Field(min_length=1, max_length=64)
    role_id: UUID
    organization_id: str = Field(min_length=1, max_length=64)
    expires_at: datetime | None = None
    is_temporary: bool = False
    restrictions: list[AssignmentRestriction] = Field(default_factory=list)
    metadata: AssignmentMetadata | None = None

    @field_validator("expires_at")
    @classmethod
    def validate_expiry(cls, value: datetime | None) -> datetime | None:
        value = ensure_utc(value)
        if value is not None and value <= utcnow():
            raise ValueError("expires_at must be in the future")
        return value


class RevokeRoleRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    role_id: UUID
    organization_id: str = Field(min_length=1, max_length=64)
