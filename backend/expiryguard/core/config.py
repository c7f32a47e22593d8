# backend/expiryguard/core/config.py

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_env: str = "dev"

    database_url: str = "sqlite:///./expiryguard.db"

    # put this on Render as JWT_SECRET_KEY
    jwt_secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080

    # comma-separated allowlist, e.g. "https://expiryguard.onrender.com,http://localhost:3000"
    cors_origins: str = ""
    frontend_url: str = "http://localhost:3000"

    # risk zone listing looks 5 days ahead, the dashboard counter only 3.
    # nobody knows why they differ, so they stay separate.
    risk_zone_horizon_days: int = 5
    dashboard_risk_horizon_days: int = 3

    default_discount_percent: int = 30

    log_level: str = "INFO"
    log_file: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
