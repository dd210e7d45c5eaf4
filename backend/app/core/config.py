from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unknown env vars so a shared .env can carry frontend-only keys.
    # Load backend/.env first, then the repo-root .env.
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "Helpdesk Dashboard"
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"

    SECRET_KEY: str = "change_me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60
    JWT_ALGORITHM: str = "HS256"

    # Single admin account; generate the hash with `python -m app.bootstrap`.
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD_HASH: str = ""

    DATABASE_URL: str = ""
    POSTGRES_SERVER: str = "db"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "helpdesk_dashboard"

    BACKEND_CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    ALLOWED_HOSTS: list[str] = Field(default_factory=lambda: ["*"])

    ENABLE_API_DOCS: bool = False

    # Re:amaze reporting API. Brand rows may override the shared credentials.
    REAMAZE_DOMAIN: str = "reamaze.io"
    REAMAZE_EMAIL: str = ""
    REAMAZE_API_TOKEN: str = ""
    # None waits for every brand; set a value to bound slow accounts.
    REAMAZE_TIMEOUT_SECONDS: float | None = None

    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False

    @model_validator(mode="after")
    def _prod_guards(self):
        if self.ENVIRONMENT.lower() == "production":
            if self.ENABLE_API_DOCS:
                raise ValueError("ENABLE_API_DOCS must be false in production")
            if not self.SECRET_KEY or len(self.SECRET_KEY) < 32:
                raise ValueError("SECRET_KEY must be 32+ chars in production")
            if any(h == "*" for h in self.ALLOWED_HOSTS):
                raise ValueError('ALLOWED_HOSTS must not contain "*" in production')
            if not self.ADMIN_PASSWORD_HASH:
                raise ValueError("ADMIN_PASSWORD_HASH must be set in production")
        else:
            if not self.ALLOWED_HOSTS:
                self.ALLOWED_HOSTS = ["*"]
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.ENVIRONMENT.lower() == "development":
            return "sqlite:///./helpdesk_dashboard.db"
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
