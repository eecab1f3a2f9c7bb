"""Assignment API schemas (combined models/requests)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.api.core.messages import APIResponse
from src.modules.access.models import AssignRoleRequest, RevokeRoleRequest
from src.utils.datetime_helpers import ensure_utc


class RoleAssignmentModel(BaseModel):
    id: UUID
    user_id: str
    role_id: UUID
    organization_id: str
    assigned_by: str
    assigned_at: datetime
    expires_at: datetime | None = None
    is_temporary: bool
    is_active: bool
    restrictions: list[dict] = Field(default_factory=list)
    metadata: dict | None = Field(default=None, validation_alias="assignment_metadata")
    revoked_at: datetime | None = None
    revoked_by: str | None = None

    model_config = {"from_attributes": True, "populate_by_name": True}

    @field_validator("assigned_at", "expires_at", "revoked_at")
    @classmethod
    def as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class UserPermissionsData(BaseModel):
    user_id: str
    organization_id: str | None = None
    permissions: list[str]


GrantRoleRequest = AssignRoleRequest

RoleAssignmentResponse = APIResponse[RoleAssignmentModel]
RoleAssignmentListResponse = APIResponse[list[RoleAssignmentModel]]
UserPermissionsResponse = APIResponse[UserPermissionsData]

__all__ = [
    "GrantRoleRequest",
    "RevokeRoleRequest",
    "RoleAssignmentModel",
    "UserPermissionsData",
    "RoleAssignmentResponse",
    "RoleAssignmentListResponse",
    "UserPermissionsResponse",
]
