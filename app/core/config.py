# app/core/config.py
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string)
      - SUPABASE_URL
      - SUPABASE_SERVICE_ROLE_KEY (storage uploads/deletes bypass RLS)

    Optional:
      - STORAGE_BUCKET (bucket holding product images, default "products")
      - DOMAIN (host used to build redirect targets after form posts)
      - MAX_SIZE_MB (upload limit per image, default 10)
      - ENABLE_AUTH / ADMIN_USERNAME / ADMIN_PASSWORD (basic auth on admin routes)
      - IMAGE_CACHE_SECONDS (Cache-Control max-age for image responses)
    """

    PROJECT_NAME: str = "Product Catalog Admin"

    # DB / storage config
    DATABASE_URL: str
    SUPABASE_URL: str
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "products"

    # Public host, e.g. "catalog.example.com"
    DOMAIN: str | None = None

    MAX_SIZE_MB: int = 10

    # Basic auth for the admin routes
    ENABLE_AUTH: bool = False
    ADMIN_USERNAME: str | None = None
    ADMIN_PASSWORD: str | None = None

    IMAGE_CACHE_SECONDS: int = 86400

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_SIZE_MB * 1024 * 1024

    @property
    def redirect_url(self) -> str:
        """Where form posts redirect to once they succeed."""
        if self.DOMAIN:
            return f"https://{self.DOMAIN}/"
        return "/"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
