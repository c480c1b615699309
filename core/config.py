from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr
from functools import lru_cache
from typing import Optional


class DatabaseSettings(BaseSettings):
    # Postgres
    HOST: str
    PORT: int = 5432
    USER: str
    PASSWORD: SecretStr
    NAME: str

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class APISettings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 1
    LOG_LEVEL: str = "INFO"

    # Admin endpoint authentication
    API_KEY: Optional[SecretStr] = None
    ALLOWED_API_KEYS: str = ""

    # Connection pool
    POOL_MIN_SIZE: int = 2
    POOL_MAX_SIZE: int = 10
    POOL_TIMEOUT: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings()  # type: ignore


@lru_cache()
def get_api_settings() -> APISettings:
    return APISettings()  # type: ignore
