from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "market-jobs-api"
    environment: str = "dev"
    cors_origins: list[str] = ["http://localhost:5173"]
    access_token_secret: str | None = None
    access_token_salt: str = "market-jobs-access-token"
    access_token_ttl_seconds: int = 3600
    cookie_name: str = "token"
    storage_backend: str = "postgres"
    database_url: str | None = None
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10
    otel_enabled: bool = True
    otel_service_name: str = "market-jobs-api"
    otel_exporter_otlp_endpoint: str | None = None
    otel_trace_sample_ratio: float = 1.0
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="MJ_", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
