"""Typed access control errors raised by the domain services."""

from fastapi import status

from ..messages import MessageCode
from .base import AccessControlException


class DuplicateRoleError(AccessControlException):
    def __init__(self, name: str, organization_id: str | None):
        super().__init__(
            MessageCode.DUPLICATE_ROLE,
            status.HTTP_409_CONFLICT,
            {"name": name, "organization_id": organization_id},
        )


class RoleNotFoundError(AccessControlException):
    def __init__(self, role_id: object):
        super().__init__(
            MessageCode.ROLE_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            {"role_id": str(role_id)},
        )


class SystemRoleProtectedError(AccessControlException):
    def __init__(self, role_id: object):
        super().__init__(
            MessageCode.SYSTEM_ROLE_PROTECTED,
            status.HTTP_403_FORBIDDEN,
            {"role_id": str(role_id)},
        )


class RoleInUseError(AccessControlException):
    def __init__(self, role_id: object, active_assignments: int):
        super().__init__(
            MessageCode.ROLE_IN_USE,
            status.HTTP_409_CONFLICT,
            {"role_id": str(role_id), "active_assignments": active_assignments},
        )


class InsufficientPermissionError(AccessControlException):
    """Authorization failure.

    Details stay generic so a caller cannot probe which roles or rules exist.
    """

    def __init__(self, description: str = "Insufficient permissions"):
        super().__init__(
            MessageCode.INSUFFICIENT_PERMISSIONS,
            status.HTTP_403_FORBIDDEN,
            {"description": description},
        )


class RoleAssignmentExistsError(AccessControlException):
    def __init__(self, user_id: str, role_id: object, organization_id: str):
        super().__init__(
            MessageCode.ROLE_ASSIGNMENT_EXISTS,
            status.HTTP_409_CONFLICT,
            {
                "user_id": user_id,
                "role_id": str(role_id),
                "organization_id": organization_id,
            },
        )


class AssignmentNotFoundError(AccessControlException):
    def __init__(self, user_id: str, role_id: object, organization_id: str):
        super().__init__(
            MessageCode.ASSIGNMENT_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            {
                "user_id": user_id,
                "role_id": str(role_id),
                "organization_id": organization_id,
            },
        )


class OrganizationMismatchError(AccessControlException):
    def __init__(self, role_id: object, organization_id: str, description: str):
        super().__init__(
            MessageCode.ORGANIZATION_MISMATCH,
            status.HTTP_400_BAD_REQUEST,
            {
                "role_id": str(role_id),
                "organization_id": organization_id,
                "description": description,
            },
        )


class StepValidationFailedError(AccessControlException):
    def __init__(self, step_number: int, field_errors: dict[str, str]):
        self.field_errors = field_errors
        super().__init__(
            MessageCode.STEP_VALIDATION_FAILED,
            status.HTTP_400_BAD_REQUEST,
            {"step": step_number, "field_errors": field_errors},
        )


class InvalidStepNumberError(AccessControlException):
    def __init__(self, step_number: int, expected_step: int | None = None):
        details: dict = {"step": step_number}
        if expected_step is not None:
            details["expected_step"] = expected_step
        super().__init__(
            MessageCode.INVALID_STEP_NUMBER, status.HTTP_400_BAD_REQUEST, details
        )


class JourneyNotFoundError(AccessControlException):
    def __init__(self, user_id: str, organization_id: str):
        super().__init__(
            MessageCode.JOURNEY_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            {"user_id": user_id, "organization_id": organization_id},
        )
