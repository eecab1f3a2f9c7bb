"""Role domain models."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.database.models.roles import EntityType, RoleCategory, RoleLevel
from src.modules.roles.restrictions import RoleMetadata, RoleRestriction

ROLE_NAME_PATTERN = r"^[a-z][a-z0-9_]{1,99}$"


class RoleCreate(BaseModel):
    """Input for creating a role definition."""

    name: str = Field(pattern=ROLE_NAME_PATTERN)
    display_name: str = Field(min_length=1, max_length=200)
    description: str = ""
    level: RoleLevel
    category: RoleCategory
    permissions: list[str] = Field(default_factory=list)
    organization_id: str | None = Field(default=None, max_length=64)
    entity_type: EntityType | None = None
    parent_role_id: UUID | None = None
    is_default: bool = False
    is_system_role: bool = False
    restrictions: list[RoleRestriction] = Field(default_factory=list)
    metadata: RoleMetadata | None = None

    @field_validator("permissions")
    @classmethod
    def dedupe_permissions(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def check_organization_scope(self) -> "RoleCreate":
        if self.organization_id is None:
            return self
        if self.level == RoleLevel.PLATFORM:
            raise ValueError("platform level roles cannot belong to an organization")
        if self.is_system_role:
            raise ValueError("organization roles cannot be system roles")
        return self


class RoleUpdate(BaseModel):
    """Partial update of a role.

    ``name``, ``level`` and ``organization_id`` are immutable and therefore not
    part of this shape; unknown fields are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    permissions: list[str] | None = None
    restrictions: list[RoleRestriction] | None = None
    metadata: RoleMetadata | None = None
    is_active: bool | None = None


class RoleHierarchyNode(BaseModel):
    role_id: UUID
    role_name: str
    level: int
    permissions: list[str]
    can_manage: list[UUID] = Field(default_factory=list)
    can_assign: list[UUID] = Field(default_factory=list)
    children: list["RoleHierarchyNode"] = Field(default_factory=list)


RoleHierarchyNode.model_rebuild()
