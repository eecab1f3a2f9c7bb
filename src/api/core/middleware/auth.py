import structlog
from fastapi import Request
from jose import JWTError, jwt

from src.api.core.constants import JWT_ALGORITHM, SKIP_AUTH_PATHS
from src.core.context import AuthenticatedActorContext
from src.utils.path_helpers import path_matches
from src.utils.settings.auth import AuthSettings

logger = structlog.get_logger(__name__)


def decode_actor_token(token: str) -> AuthenticatedActorContext | None:
    """Verify a bearer token and build the actor it identifies.

    Returns ``None`` for anything that is not a valid, signed token with a subject.
    """
    settings = AuthSettings()
    secret = settings.JWT_SECRET.get_secret_value()
    if not secret:
        logger.error("JWT_SECRET is not configured, rejecting bearer token")
        return None

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options={
                "verify_aud": settings.JWT_AUDIENCE is not None,
                "require_aud": settings.JWT_AUDIENCE is not None,
            },
        )
    except JWTError as e:
        logger.debug(f"JWT decoding failed: {e}")
        return None

    subject = payload.get("sub")
    if not subject:
        logger.debug("JWT has no subject claim")
        return None

    organization_id = payload.get(settings.JWT_ORGANIZATION_CLAIM)
    return AuthenticatedActorContext(
        user_id=str(subject),
        organization_id=str(organization_id) if organization_id else None,
        email=payload.get("email"),
    )


async def auth_middleware(request: Request, call_next):
    """
    Resolve the calling actor from the bearer token.

    Never rejects a request itself: ``request.state.actor`` is ``None`` when no
    valid token is present and protected routes raise through ``CurrentActorDep``.
    """
    request.state.actor = None

    if path_matches(request.url.path, SKIP_AUTH_PATHS):
        logger.debug("Skipping auth for path", path=request.url.path)
        return await call_next(request)

    authorization = request.headers.get("Authorization", "")
    auth_parts = authorization.split(" ")
    if len(auth_parts) == 2 and auth_parts[0].lower() == "bearer":
        request.state.actor = decode_actor_token(auth_parts[1])
    elif authorization:
        logger.debug(
            "Invalid authorization header format",
            auth_parts_count=len(auth_parts),
        )

    if request.state.actor is not None:
        structlog.contextvars.bind_contextvars(
            user_id=request.state.actor.user_id,
            organization_id=request.state.actor.organization_id,
        )

    return await call_next(request)
