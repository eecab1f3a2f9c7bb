"""Onboarding API schemas (combined models/requests)."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.api.core.messages import APIResponse
from src.database.models import EntityType
from src.modules.onboarding.journey import JourneyStep
from src.utils.datetime_helpers import ensure_utc


class OnboardingStateModel(BaseModel):
    id: UUID
    user_id: str
    organization_id: str
    organization_type: str
    current_step: int
    completed_steps: list[int]
    step_data: dict[str, Any]
    started_at: datetime
    completed_at: datetime | None = None
    updated_at: datetime
    is_complete: bool
    assigned_roles: list[str]
    temporary_permissions: list[str]

    model_config = {"from_attributes": True}

    @field_validator("started_at", "completed_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class StartJourneyRequest(BaseModel):
    organization_type: EntityType
    user_id: str | None = Field(None, min_length=1, max_length=64)
    organization_id: str | None = Field(None, min_length=1, max_length=64)


class CompleteStepRequest(BaseModel):
    data: dict[str, Any]
    user_id: str | None = Field(None, min_length=1, max_length=64)
    organization_id: str | None = Field(None, min_length=1, max_length=64)


OnboardingStateResponse = APIResponse[OnboardingStateModel]
JourneyStepsResponse = APIResponse[list[JourneyStep]]
