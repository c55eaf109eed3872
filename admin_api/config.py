import logging
import platform
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env", ".env.staging", ".env.prod"), extra="ignore")

    ENV: str = "local"
    DEBUG_MODE: bool = False
    PORT: int = 8000
    ALLOWED_ORIGINS: list[str] = ["*"]
    # modules exposing configure_app(app), used to plug in the token verifier
    ADDITIONAL_MODULES: list[str] = []

    JSON_LOGGING: bool = False
    LOG_LEVEL: str = "INFO"

    DATABASE_STRING: str = (
        "postgresql+asyncpg://admin_api@localhost/admin_api"
        if platform.system() == "Windows"
        else "postgresql+psycopg://admin_api@localhost/admin_api"
    )
    DATABASE_STATEMENT_TIMEOUT_MS: int = 60000
    DISABLE_CONNECTION_POOL: bool = False

    # "local" keeps task DTOs in-process, "redis" shares them across workers
    CACHE_TYPE: str = "local"
    REDIS_URL: str = "redis://localhost:6379/0"
    TASK_CACHE_TTL_SECONDS: int = 5 * 60
    LOCAL_CACHE_MAX_ITEMS: int = 1000

    CASSANDRA_HOSTS: list[str] = ["127.0.0.1"]
    CASSANDRA_PORT: int = 9042
    CASSANDRA_KEYSPACE: str = "admin_api"
    CASSANDRA_USERNAME: str | None = None
    CASSANDRA_PASSWORD: str | None = None
    ARTIFACT_TABLE: str = "task_run_artifacts"
    ARTIFACT_FETCH_SIZE: int = 500
    ARTIFACT_MAX_PAGE_SIZE: int = 100

    AUTH0_DOMAIN: str = ""
    AUTH0_CLIENT_ID: str = ""
    AUTH0_CLIENT_SECRET: str = ""
    AUTH0_REQUEST_TIMEOUT_SECONDS: int = 30
    AUTH0_USER_ROLE_ID: str = "rol_wgtsNMZVvH6xhrnu"
    AUTH0_MEMBER_ROLE_ID: str = "rol_ojPUsNcwlWeofPmS"
    AUTH0_ADMIN_ROLE_ID: str = "rol_9wVRSPWcCNB3AypM"
    IDENTITY_PAGE_SIZE: int = 100

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        super().model_post_init(__context)
        if platform.system() != "Windows":
            return

        scheme, sep, remainder = self.DATABASE_STRING.partition("://")
        if not sep:
            return

        dialect, driver_sep, driver = scheme.partition("+")
        if not driver_sep or driver not in {"psycopg", "psycopg2"}:
            return

        updated_string = f"{dialect}+asyncpg://{remainder}"
        if updated_string == self.DATABASE_STRING:
            return

        LOG.warning(
            "Detected Windows environment: switching DATABASE_STRING driver from psycopg to asyncpg "
            "for compatibility with the Proactor event loop policy."
        )
        object.__setattr__(self, "DATABASE_STRING", updated_string)

    @property
    def auth0_base_url(self) -> str:
        domain = self.AUTH0_DOMAIN.rstrip("/")
        if domain.startswith("http://") or domain.startswith("https://"):
            return domain
        return f"https://{domain}"


settings = Settings()
