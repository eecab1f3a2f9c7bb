"""Authentication and permission decorators."""

from functools import wraps

from fastapi import Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.constants import PLATFORM_ORGANIZATION_ID
from src.api.core.exceptions.base import AccessControlException
from src.api.core.exceptions.errors import InsufficientPermissionError
from src.api.core.messages import MessageCode
from src.core.context import AuthenticatedActorContext
from src.modules.access.permissions import PermissionResolverService
from src.modules.roles.catalog import PLATFORM_PERMISSIONS, Permission
from src.utils.logger import get_logger

logger = get_logger(__name__)


def permission_scope(
    permission: Permission,
    actor: AuthenticatedActorContext,
    organization_id: str | None = None,
) -> str | None:
    """Organization scope a permission is checked in.

    Platform permissions live in the platform scope; everything else in the
    requested organization, falling back to the organization on the token.
    """
    if permission in PLATFORM_PERMISSIONS:
        return PLATFORM_ORGANIZATION_ID
    return organization_id or actor.organization_id


async def check_permission(
    db: AsyncSession,
    actor: AuthenticatedActorContext,
    permission: Permission,
    organization_id: str | None = None,
) -> None:
    """Raise ``InsufficientPermissionError`` unless the actor holds the permission."""
    scope = permission_scope(permission, actor, organization_id)
    if scope is None:
        raise AccessControlException(
            MessageCode.AUTH_MISSING_CONTEXT,
            status.HTTP_400_BAD_REQUEST,
            {"description": "organization_id is required"},
        )

    allowed = await PermissionResolverService(db).has_permission(
        actor.user_id, permission, scope
    )
    if not allowed:
        logger.warning(
            "Permission check failed",
            user_id=actor.user_id,
            permission=permission.value,
            organization_id=scope,
        )
        raise InsufficientPermissionError()


async def check_self_or_permission(
    db: AsyncSession,
    actor: AuthenticatedActorContext,
    user_id: str,
    permission: Permission,
    organization_id: str | None = None,
) -> None:
    """Callers may always act on themselves; acting on others needs the permission."""
    if actor.user_id == user_id:
        return
    await check_permission(db, actor, permission, organization_id)


def require_permission(permission: Permission):
    """
    Decorator to check a permission before running the endpoint.

    Args:
        permission: The permission to check

    Uses the actor from request.state (set by auth middleware) and, for
    organization permissions, the endpoint's ``organization_id`` argument when
    it has one.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = None
            db = None

            for value in [*args, *kwargs.values()]:
                if isinstance(value, Request):
                    request = value
                elif isinstance(value, AsyncSession):
                    db = value

            if not request:
                raise AccessControlException(
                    MessageCode.AUTH_REQUIRED,
                    status.HTTP_401_UNAUTHORIZED,
                    {"description": "Request object not found"},
                )
            if not db:
                raise ValueError("Database session not found in function parameters")

            actor = getattr(request.state, "actor", None)
            if actor is None:
                raise AccessControlException(
                    MessageCode.AUTH_REQUIRED, status.HTTP_401_UNAUTHORIZED
                )

            await check_permission(
                db, actor, permission, kwargs.get("organization_id")
            )
            return await func(*args, **kwargs)

        return wrapper

    return decorator
