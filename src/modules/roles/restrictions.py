"""Typed role restrictions and metadata.

Restrictions are persisted and returned with roles and assignments; they are
not evaluated when resolving permissions.
"""

import ipaddress
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class TimeWindow(BaseModel):
    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=0, le=23)
    # 0 = Monday
    weekdays: list[int] = Field(default_factory=lambda: list(range(7)))

    @field_validator("weekdays")
    @classmethod
    def validate_weekdays(cls, value: list[int]) -> list[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("weekdays must be between 0 and 6")
        return sorted(set(value))


class IpAllowList(BaseModel):
    cidrs: list[str] = Field(min_length=1)

    @field_validator("cidrs")
    @classmethod
    def validate_cidrs(cls, value: list[str]) -> list[str]:
        return [str(ipaddress.ip_network(cidr, strict=False)) for cidr in value]


class FeatureSet(BaseModel):
    features: list[str] = Field(min_length=1)


class DataScope(BaseModel):
    field: str
    allowed_values: list[str] = Field(min_length=1)


class _RestrictionBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str = ""


class TimeBasedRestriction(_RestrictionBase):
    type: Literal["time_based"] = "time_based"
    value: TimeWindow


class IpBasedRestriction(_RestrictionBase):
    type: Literal["ip_based"] = "ip_based"
    value: IpAllowList


class FeatureBasedRestriction(_RestrictionBase):
    type: Literal["feature_based"] = "feature_based"
    value: FeatureSet


class DataBasedRestriction(_RestrictionBase):
    type: Literal["data_based"] = "data_based"
    value: DataScope


RoleRestriction = Annotated[
    Union[
        TimeBasedRestriction,
        IpBasedRestriction,
        FeatureBasedRestriction,
        DataBasedRestriction,
    ],
    Field(discriminator="type"),
]


class _AppliedRestrictionMixin(BaseModel):
    applied_by: str | None = None
    applied_at: datetime | None = None


class AssignedTimeBasedRestriction(TimeBasedRestriction, _AppliedRestrictionMixin):
    pass


class AssignedIpBasedRestriction(IpBasedRestriction, _AppliedRestrictionMixin):
    pass


class AssignedFeatureBasedRestriction(
    FeatureBasedRestriction, _AppliedRestrictionMixin
):
    pass


class AssignedDataBasedRestriction(DataBasedRestriction, _AppliedRestrictionMixin):
    pass


AssignmentRestriction = Annotated[
    Union[
        AssignedTimeBasedRestriction,
        AssignedIpBasedRestriction,
        AssignedFeatureBasedRestriction,
        AssignedDataBasedRestriction,
    ],
    Field(discriminator="type"),
]


class RoleMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid")

    department_id: str | None = None
    region_id: str | None = None
    branch_id: str | None = None
    cost_center: str | None = None
    reporting_to: str | None = None
    custom_fields: dict[str, str] = Field(default_factory=dict)


class AssignmentMetadata(RoleMetadata):
    assignment_reason: str | None = None
    notes: str | None = None


_role_restrictions_adapter = TypeAdapter(list[RoleRestriction])
_assignment_restrictions_adapter = TypeAdapter(list[AssignmentRestriction])


def dump_role_restrictions(restrictions: list[RoleRestriction]) -> list[dict]:
    return _role_restrictions_adapter.dump_python(restrictions, mode="json")


def load_role_restrictions(raw: list[dict] | None) -> list[RoleRestriction]:
    return _role_restrictions_adapter.validate_python(raw or [])


def dump_assignment_restrictions(
    restrictions: list[AssignmentRestriction], applied_by: str, applied_at: datetime
) -> list[dict]:
    """Serialize assignment restrictions, stamping who applied them and when."""
    stamped = [
        r.model_copy(
            update={
                "applied_by": r.applied_by or applied_by,
                "applied_at": r.applied_at or applied_at,
            }
        )
        for r in restrictions
    ]
    return _assignment_restrictions_adapter.dump_python(stamped, mode="json")


def load_assignment_restrictions(
    raw: list[dict] | None,
) -> list[AssignmentRestriction]:
    return _assignment_restrictions_adapter.validate_python(raw or [])
