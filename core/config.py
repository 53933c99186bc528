from functools import lru_cache
from urllib.parse import quote_plus

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_JWT_SECRET = "default-secret"


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    CORS_ORIGINS: str = "*"

    DB_DRIVER: str = "postgresql+psycopg2"
    DB_USER: str = "bim_user"
    DB_PASSWORD: str = "password"
    DB_HOST: str = "localhost"
    DB_PORT: str = "5432"
    DB_NAME: str = "bim_db"
    DATABASE_URL: str | None = None
    AUTO_CREATE_TABLES: bool = True

    JWT_SECRET: str = INSECURE_JWT_SECRET
    TOKEN_TTL_HOURS: int = 24
    BCRYPT_ROUNDS: int = 12

    FORGE_CLIENT_ID: str | None = None
    FORGE_CLIENT_SECRET: str | None = None
    FORGE_BASE_URL: str = "https://developer.api.autodesk.com"
    FORGE_BUCKET_KEY: str = "bim-system-bucket-demo"
    FORGE_UPLOAD_TIMEOUT_SECONDS: int = 30 * 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            # Hosted Postgres providers still hand out the legacy scheme
            if self.DATABASE_URL.startswith("postgres://"):
                return "postgresql://" + self.DATABASE_URL[len("postgres://"):]
            return self.DATABASE_URL
        return (
            f"{self.DB_DRIVER}://{self.DB_USER}:{quote_plus(self.DB_PASSWORD)}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in ("prod", "production")

    @property
    def uses_insecure_jwt_secret(self) -> bool:
        return self.JWT_SECRET == INSECURE_JWT_SECRET


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """The settings the running app was built with."""
    return request.app.state.settings
