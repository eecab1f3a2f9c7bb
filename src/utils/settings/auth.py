from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.logger import get_logger

logger = get_logger(__name__)


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Tokens are issued by the identity provider; this service only verifies them
    JWT_SECRET: SecretStr = SecretStr("")
    JWT_AUDIENCE: str | None = None
    JWT_ORGANIZATION_CLAIM: str = "org"
