API_VERSION_HEADER = "X-BlockTrade-Version"

# JWT Configuration
JWT_ALGORITHM = "HS256"

# Organization scope that platform-level roles are granted in
PLATFORM_ORGANIZATION_ID = "platform"

# assigned_by / revoked_by for grants made by the service itself
SYSTEM_ACTOR_ID = "system"

SHOULD_SEND_WELCOME_EMAIL = True

# Authentication endpoints configuration
SKIP_AUTH_PATHS = {
    "/openapi.json",
    "/docs",
    "/redoc",
    "/health",
    "/health/liveness",
    "/",
}
