import logging
import os
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()

logger = logging.getLogger(__name__)


def split_origins(raw_value: str, name: str) -> List[str]:
    """Comma separated origins; anything that is not an http(s) URL is dropped."""
    items = [v.strip().rstrip("/") for v in raw_value.split(",") if v.strip()]
    origins = [v for v in items if v.startswith(("http://", "https://"))]
    if len(origins) != len(items):
        logger.warning(
            "Ignored %d malformed origin(s) in %s", len(items) - len(origins), name
        )
    return origins


class Settings(BaseSettings):
    PROJECT_NAME: str = "Angaza Property Management API"
    DATABASE_URL: str = "sqlite+aiosqlite:///./angaza.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    JWT_SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_EXPIRE_MINUTES: int = 60 * 24
    ENVIRONMENT: str = "development"
    AUTO_CREATE_TABLES: bool = True
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    ALLOWED_HOSTS_RAW: str = os.getenv(
        "ALLOWED_HOSTS", "http://localhost:3000,http://localhost:5173"
    )

    @property
    def ALLOWED_HOSTS(self) -> List[str]:
        return split_origins(self.ALLOWED_HOSTS_RAW, "ALLOWED_HOSTS")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "development"

    class Config:
        env_file = ".env"
        extra = "ignore"
        case_sensitive = False


settings = Settings()
