from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudreg.domain.entities import CloudProvider


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Infra
    database_url: str = "postgresql://rmt:rmt@db:5432/rmt"
    redis_url: str = "redis://redis:6379/0"
    cache_backend: Literal["redis", "memory"] = "redis"

    # Instance verification
    verification_ttl_seconds: int = 86400
    registry_ttl_seconds: int = 3600
    verification_timeout_seconds: float = 10.0
    default_cloud_provider: CloudProvider = CloudProvider.AWS
    aws_verify_url: str | None = None
    gce_verify_url: str | None = None
    azure_verify_url: str | None = None

    # Repository listing
    repo_cache_dir: str = "repo/cache"
    service_url_scheme: str = "susecloud"

    # Security / policies
    bcrypt_rounds: int = 12

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("default_cloud_provider", mode="before")
    @classmethod
    def _lower_provider(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
