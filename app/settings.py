from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env eagerly so uvicorn/gunicorn picks up values.
load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    database_url: str = Field(..., alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    port: int = Field(8081, alias="PORT")
    cors_allow_origins: str = Field("*", alias="CORS_ALLOW_ORIGINS")
    session_ttl_days: int = Field(30, alias="SESSION_TTL_DAYS")
    save_max_retries: int = Field(3, alias="SAVE_MAX_RETRIES")
    save_retry_delay_ms: int = Field(500, alias="SAVE_RETRY_DELAY_MS")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


def cors_origins_list(settings: Settings) -> List[str]:
    raw = settings.cors_allow_origins
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]
