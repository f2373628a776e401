"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Dashboard configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    # Risk model backend, defaults to the mock server (uvicorn mock_risk_api.main:app --port 8001).
    # "" means same origin as the dashboard.
    risk_api_base: str = "http://localhost:8001"
    same_origin_url: str = "http://127.0.0.1:8000"

    # Service
    service_name: str = "riskmap-dashboard"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0

    # Age weight slider
    default_age_weight: float = 1.0


settings = Settings()
