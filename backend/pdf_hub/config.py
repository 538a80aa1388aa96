"""Application configuration from environment variables."""
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config comes from env vars or .env file."""

    UPLOAD_DIR: str = "uploads"
    CATALOG_PATH: str = "database.json"
    PUBLIC_DIR: str = "public"
    PUBLIC_PREFIX: str = "/pdfs"

    # Uploads
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024
    MULTIPART_OVERHEAD_BYTES: int = 1024 * 1024  # headroom for form fields and boundaries

    # Categories
    DEFAULT_CATEGORY: str = "exercise"
    INITIAL_CATEGORIES: str = "exercise,math"

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def upload_path(self) -> Path:
        return Path(self.UPLOAD_DIR)

    @property
    def initial_categories(self) -> list[str]:
        return [c.strip() for c in self.INITIAL_CATEGORIES.split(",") if c.strip()]


settings = Settings()
