from functools import lru_cache
from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    http_timeout: float = Field(10.0, gt=0, alias="HTTP_TIMEOUT")
    http_max_connections: int = Field(20, ge=1, alias="HTTP_MAX_CONNECTIONS")
    http_max_keepalive: int = Field(10, ge=1, alias="HTTP_MAX_KEEPALIVE")
    http_user_agent: str = Field(
        "Sitemapi/0.1 (+https://example.com; contact=admin@example.com)",
        alias="HTTP_USER_AGENT",
    )

    sitemap_url: HttpUrl = Field(
        "https://www.ndtv.com/sitemap/google-news-sitemap", alias="SITEMAP_URL"
    )
    sitemap_strict_parsing: bool = Field(False, alias="SITEMAP_STRICT_PARSING")

    database_url: str = Field(
        "sqlite+aiosqlite:///./sitemap.db", alias="DATABASE_URL"
    )
    database_echo: bool = Field(False, alias="DATABASE_ECHO")

    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()
