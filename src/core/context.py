"""Authentication context model for typed actor authentication."""

from dataclasses import dataclass


@dataclass
class AuthenticatedActorContext:
    """Identity of the caller as asserted by a verified bearer token."""

    user_id: str
    organization_id: str | None
    email: str | None = None

    def __post_init__(self):
        """Ensure all required fields are present and valid."""
        if not self.user_id:
            raise ValueError("User id is required in authentication context")
