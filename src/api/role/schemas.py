"""Role API schemas (combined models/requests)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.api.core.messages import APIResponse
from src.database.models import EntityType
from src.modules.roles.models import RoleCreate, RoleUpdate
from src.utils.datetime_helpers import ensure_utc


class RoleModel(BaseModel):
    id: UUID
    name: str
    display_name: str
    description: str
    level: str
    category: str
    permissions: list[str]
    is_default: bool
    is_system_role: bool
    organization_id: str | None = None
    entity_type: str | None = None
    parent_role_id: UUID | None = None
    child_roles: list[str] = Field(default_factory=list)
    restrictions: list[dict] = Field(default_factory=list)
    metadata: dict | None = Field(default=None, validation_alias="role_metadata")
    is_active: bool
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str | None = None

    model_config = {"from_attributes": True, "populate_by_name": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class RoleHierarchyModel(BaseModel):
    organization_id: str
    hierarchy_tree: list[dict]
    default_roles: list[str]
    allowed_roles: list[str]
    custom_roles: list[str]
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("updated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class InitializeOrganizationRolesRequest(BaseModel):
    organization_id: str = Field(..., min_length=1, max_length=64)
    entity_type: EntityType


class RolesInitializedData(BaseModel):
    created: list[RoleModel]
    created_count: int


CreateRoleRequest = RoleCreate
UpdateRoleRequest = RoleUpdate

RoleResponse = APIResponse[RoleModel]
RoleListResponse = APIResponse[list[RoleModel]]
RoleHierarchyResponse = APIResponse[RoleHierarchyModel]
RolesInitializedResponse = APIResponse[RolesInitializedData]
