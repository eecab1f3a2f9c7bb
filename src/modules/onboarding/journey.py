"""Onboarding journey step definitions and step-data validation."""

import re
from typing import Any, Literal

from pydantic import BaseModel, Field


class JourneyValidation(BaseModel):
    field: str
    type: Literal["required", "format", "custom"]
    rule: str
    message: str


class JourneyStep(BaseModel):
    step: int
    name: str
    description: str
    required_fields: list[str]
    optional_fields: list[str] = Field(default_factory=list)
    validations: list[JourneyValidation] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)
    role_assignments: list[str] | None = None


FORMAT_PATTERNS: dict[str, re.Pattern] = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "phone": re.compile(r"^\+?[\d\s\-()]+$"),
}

USER_JOURNEY_STEPS: list[JourneyStep] = [
    JourneyStep(
        step=1,
        name="organization_setup",
        description="Organization and Role Setup",
        required_fields=["organizationRole", "department", "reportingManager"],
        optional_fields=["teamMembers", "projectAssignments"],
        validations=[
            JourneyValidation(
                field="organizationRole",
                type="required",
                rule="required",
                message="Organization role is required",
            )
        ],
        next_steps=["profile_completion"],
        permissions=["org:view", "profile:edit"],
        role_assignments=["organization_viewer"],
    ),
    JourneyStep(
        step=2,
        name="profile_completion",
        description="Complete Your Profile",
        required_fields=["firstName", "lastName", "email", "phone"],
        optional_fields=["bio", "profilePicture", "timezone", "language"],
        validations=[
            JourneyValidation(
                field="email",
                type="format",
                rule="email",
                message="Valid email address required",
            ),
            JourneyValidation(
                field="phone",
                type="format",
                rule="phone",
                message="Valid phone number required",
            ),
        ],
        next_steps=["security_setup"],
        permissions=["profile:edit", "profile:view"],
    ),
    JourneyStep(
        step=3,
        name="security_setup",
        description="Security and Authentication Setup",
        required_fields=["passwordConfirmed", "securityQuestions"],
        optional_fields=["mfaEnabled", "backupEmail"],
        validations=[
            JourneyValidation(
                field="passwordConfirmed",
                type="required",
                rule="required",
                message="Password confirmation required",
            )
        ],
        next_steps=["preferences_setup"],
        permissions=["security:setup", "mfa:setup"],
    ),
    JourneyStep(
        step=4,
        name="preferences_setup",
        description="Set Your Preferences",
        required_fields=["notifications"],
        optional_fields=["theme", "language", "timezone"],
        next_steps=["training_completion"],
        permissions=["preferences:edit"],
    ),
    JourneyStep(
        step=5,
        name="training_completion",
        description="Complete Required Training",
        required_fields=["trainingModulesCompleted", "complianceAcknowledgment"],
        optional_fields=["additionalTraining"],
        validations=[
            JourneyValidation(
                field="complianceAcknowledgment",
                type="required",
                rule="required",
                message="Compliance acknowledgment required",
            )
        ],
        next_steps=[],
        permissions=["training:access", "compliance:view"],
    ),
]

LAST_STEP = USER_JOURNEY_STEPS[-1].step

# step1.organizationRole -> role granted when the journey completes
FINAL_ROLE_BY_ORGANIZATION_ROLE = {
    "admin": "organization_admin",
    "manager": "organization_manager",
}
DEFAULT_FINAL_ROLE = "organization_user"


def get_journey_step(step_number: int) -> JourneyStep | None:
    return next((s for s in USER_JOURNEY_STEPS if s.step == step_number), None)


def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def _passes(validation: JourneyValidation, value: Any) -> bool:
    if validation.type == "required":
        return not _is_blank(value)
    if validation.type == "format":
        pattern = FORMAT_PATTERNS.get(validation.rule)
        if pattern is None:
            return True
        return isinstance(value, str) and bool(pattern.match(value))
    # custom rules are accepted as-is
    return True


def validate_step_data(step: JourneyStep, data: dict[str, Any]) -> dict[str, str]:
    """Return a field -> message map of failures; empty when the data is valid."""
    errors: dict[str, str] = {}
    for field_name in step.required_fields:
        if _is_blank(data.get(field_name)):
            errors[field_name] = f"{field_name} is required"

    for validation in step.validations:
        if validation.field in errors:
            continue
        if not _passes(validation, data.get(validation.field)):
            errors[validation.field] = validation.message
    return errors


def determine_final_roles(step_data: dict[str, dict]) -> list[str]:
    organization_role = (step_data.get("step1") or {}).get("organizationRole")
    if not isinstance(organization_role, str):
        return [DEFAULT_FINAL_ROLE]
    return [
        FINAL_ROLE_BY_ORGANIZATION_ROLE.get(
            organization_role.strip().lower(), DEFAULT_FINAL_ROLE
        )
    ]
