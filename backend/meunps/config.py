import json
import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

from meunps.utils import extract_origin


PROJECT_ROOT = Path(__file__).resolve().parent.parent
LOCAL_ENV_FILE = PROJECT_ROOT / ".env.local"

if LOCAL_ENV_FILE.exists():
    load_dotenv(LOCAL_ENV_FILE, override=True)


class Settings(BaseSettings):
    class Config:
        env_file = ".env"
        extra = "ignore"
    database_url: str = "sqlite:///./meunps.db"
    database_public_url: str = ""
    environment: str = "development"
    log_level: str = Field(default="INFO")
    jwt_secret_key: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7)  # 7 days
    frontend_base_url: str = Field(default="http://localhost:5173")
    additional_cors_origins: str | None = Field(default=None)
    default_commission_amount: float = Field(default=25.00)
    webhook_timeout_seconds: float = Field(default=30.0)
    smtp_timeout_seconds: float = Field(default=15.0)

    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def get_database_url(self) -> str:
        """
        Get the appropriate database URL.
        Prefers DATABASE_PUBLIC_URL for local development (external access).
        Falls back to DATABASE_URL.
        """
        public_url = os.getenv('DATABASE_PUBLIC_URL') or self.database_public_url
        internal_url = os.getenv('DATABASE_URL') or self.database_url

        if public_url:
            return public_url

        return internal_url

    def get_additional_cors_origins(self) -> list[str]:
        value = self.additional_cors_origins
        if not value:
            return []

        stripped = value.strip()
        if not stripped:
            return []
        if stripped.startswith("[") and stripped.endswith("]"):
            try:
                parsed = json.loads(stripped)
                if isinstance(parsed, list):
                    return [
                        str(origin).strip()
                        for origin in parsed
                        if str(origin).strip()
                    ]
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in stripped.split(",") if item.strip()]


def get_cors_origins(settings: Settings) -> List[str]:
    """Frontend origin plus any additional origins, valid and de-duplicated."""
    origins: List[str] = []
    candidates = [settings.frontend_base_url, *settings.get_additional_cors_origins()]
    for candidate in candidates:
        origin = extract_origin(candidate)
        if origin and origin not in origins:
            origins.append(origin)
    return origins


@lru_cache()
def get_settings():
    return Settings()
