from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DEBUG: bool = False
    ENVIRONMENT: str = "DEV"
    API_VERSION: str = "0.1.0"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "https://app.blocktrade.io",
    ]

    # Seed the platform and default organization role catalogs at startup
    BOOTSTRAP_DEFAULT_ROLES: bool = True
    # Receives platform_super_admin in the platform scope when bootstrapping
    PLATFORM_SUPER_ADMIN_USER_ID: str | None = None

    # 1MB request bodies
    MAX_REQUEST_SIZE: int = 1024 * 1024

    def validate_prod(self) -> None:
        """Sanity checks for production environment."""
        if self.ENVIRONMENT.upper() == "PROD":
            if not self.CORS_ORIGINS:
                raise ValueError("CORS_ORIGINS must be set in production")
