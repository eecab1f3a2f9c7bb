"""Database models for the BlockTrade Access API."""

from .assignments import UserRoleAssignment
from .base import Base
from .hierarchy import RoleHierarchy
from .onboarding import OnboardingState
from .roles import (
    ROLE_LEVEL_ORDER,
    EntityType,
    Role,
    RoleCategory,
    RoleLevel,
    level_rank,
)

# Export all models and enums
__all__ = [
    # Base
    "Base",
    # Enums
    "RoleLevel",
    "RoleCategory",
    "EntityType",
    "ROLE_LEVEL_ORDER",
    "level_rank",
    # Models
    "Role",
    "RoleHierarchy",
    "UserRoleAssignment",
    "OnboardingState",
]
