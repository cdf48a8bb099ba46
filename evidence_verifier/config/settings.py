from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "voteshield"
    db_username: str = "voteshield"
    db_password: str = "secret"

    storage_root: Path = Path("/app/files")
    max_upload_bytes: int = 10 * 1024 * 1024

    pdf_engine: str = "pdfplumber"

    heuristics_mode: str = "signature"
    heuristics_random_seed: int | None = None

    scheduler_backend: str = "thread"
    scheduler_max_workers: int = 4
    job_poll_interval_seconds: int = 5
    verification_timeout_seconds: float = 60.0
