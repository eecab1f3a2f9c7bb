"""Test factories for creating model instances."""

from .assignments import UserRoleAssignmentFactory
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory
from .onboarding import OnboardingStateFactory
from .roles import RoleFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "UUIDFactory",
    "RoleFactory",
    "UserRoleAssignmentFactory",
    "OnboardingStateFactory",
]
