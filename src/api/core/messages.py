"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"

    # Authentication & Authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    AUTH_MISSING_CONTEXT = "AUTH_MISSING_CONTEXT"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Role registry
    ROLE_CREATED = "ROLE_CREATED"
    ROLE_UPDATED = "ROLE_UPDATED"
    ROLE_DELETED = "ROLE_DELETED"
    ROLES_INITIALIZED = "ROLES_INITIALIZED"
    DUPLICATE_ROLE = "DUPLICATE_ROLE"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    SYSTEM_ROLE_PROTECTED = "SYSTEM_ROLE_PROTECTED"
    ROLE_IN_USE = "ROLE_IN_USE"

    # Role assignments
    ROLE_GRANTED = "ROLE_GRANTED"
    ROLE_REVOKED = "ROLE_REVOKED"
    ROLE_ASSIGNMENT_EXISTS = "ROLE_ASSIGNMENT_EXISTS"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    ORGANIZATION_MISMATCH = "ORGANIZATION_MISMATCH"

    # Onboarding
    JOURNEY_STARTED = "JOURNEY_STARTED"
    STEP_COMPLETED = "STEP_COMPLETED"
    ONBOARDING_COMPLETED = "ONBOARDING_COMPLETED"
    JOURNEY_NOT_FOUND = "JOURNEY_NOT_FOUND"
    INVALID_STEP_NUMBER = "INVALID_STEP_NUMBER"
    STEP_VALIDATION_FAILED = "STEP_VALIDATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT"
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"


# Default messages for each message code
DEFAULT_MESSAGES = {
    # Success messages
    MessageCode.SUCCESS: "Operation completed successfully",
    MessageCode.CREATED: "Resource created successfully",
    MessageCode.UPDATED: "Resource updated successfully",
    MessageCode.DELETED: "Resource deleted successfully",
    # Authentication & Authorization
    MessageCode.AUTH_REQUIRED: "Authentication required",
    MessageCode.UNAUTHORIZED: "Authentication required",
    MessageCode.FORBIDDEN: "Access denied",
    MessageCode.INVALID_TOKEN: "Invalid authentication token",
    MessageCode.AUTH_MISSING_CONTEXT: "Authentication context required",
    MessageCode.INSUFFICIENT_PERMISSIONS: "Insufficient permissions",
    # Role registry
    MessageCode.ROLE_CREATED: "Role created successfully",
    MessageCode.ROLE_UPDATED: "Role updated successfully",
    MessageCode.ROLE_DELETED: "Role deleted successfully",
    MessageCode.ROLES_INITIALIZED: "Roles initialized successfully",
    MessageCode.DUPLICATE_ROLE: "A role with this name already exists in this scope",
    MessageCode.ROLE_NOT_FOUND: "Role not found",
    MessageCode.SYSTEM_ROLE_PROTECTED: "System roles cannot be deleted",
    MessageCode.ROLE_IN_USE: "Role is still assigned to active users",
    # Role assignments
    MessageCode.ROLE_GRANTED: "Role granted successfully",
    MessageCode.ROLE_REVOKED: "Role revoked successfully",
    MessageCode.ROLE_ASSIGNMENT_EXISTS: "User already has this role in the organization",
    MessageCode.ASSIGNMENT_NOT_FOUND: "Active role assignment not found",
    MessageCode.ORGANIZATION_MISMATCH: "Role does not belong to the target organization",
    # Onboarding
    MessageCode.JOURNEY_STARTED: "Onboarding journey started",
    MessageCode.STEP_COMPLETED: "Onboarding step completed",
    MessageCode.ONBOARDING_COMPLETED: "Onboarding completed",
    MessageCode.JOURNEY_NOT_FOUND: "No active onboarding journey found",
    MessageCode.INVALID_STEP_NUMBER: "Invalid onboarding step",
    MessageCode.STEP_VALIDATION_FAILED: "Step data failed validation",
    # Validation errors
    MessageCode.VALIDATION_ERROR: "Validation failed",
    MessageCode.INVALID_INPUT: "Invalid input provided",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.INTERNAL_SERVER_ERROR: "Internal server error",
    MessageCode.RESOURCE_NOT_FOUND: "Resource not found",
    MessageCode.CONFLICT: "Data integrity constraint violated",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.NOT_FOUND: "Resource not found",
}

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Base API response model with consistent structure and proper typing."""

    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Success"),
            data=data,
        )

    @classmethod
    def error(
        cls,
        message_code: MessageCode,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create an error response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Error occurred"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
