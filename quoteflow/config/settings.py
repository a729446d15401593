from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    upload_url: str = "http://localhost:8000/upload"
    status_url: str = "http://localhost:8000/check-analysis"
    delivery_mode: Literal["synchronous", "polling", "callback"] = "synchronous"

    submit_timeout_seconds: float = 600
    poll_interval_seconds: float = 10
    poll_timeout_seconds: float = 600

    accepted_media_type: str = "application/pdf"
    max_file_size_bytes: int = 10 * 1024 * 1024
    max_files: int = 10

    processor_webhook_url: str = "http://localhost:5678/webhook/analise-cotacoes"
    processor_timeout_seconds: float = 600
    public_base_url: str = "http://localhost:8000"
    cors_origins: str = "*"

    report_store: str = "local"
    reports_dir: str = "reports"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "quoteflow"
    db_username: str = "quoteflow"
    db_password: str = "secret"
    db_pool_max_size: int = 5
    db_pool_timeout_seconds: float = 10

    relay_host: str = "0.0.0.0"
    relay_port: int = 8000
