import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


# -------------------------------------------------------------
# Service configuration
# Built once at startup and handed to create_app(); every
# collaborator receives it explicitly instead of reading os.environ.
# -------------------------------------------------------------
class Settings(BaseModel):
    DATABASE_URL: str = "sqlite:///./seo_reports.db"

    # Remote plan / usage service. Unset means every check is allowed.
    PLAN_SERVICE_URL: Optional[str] = None
    PLAN_SERVICE_KEY: Optional[str] = None

    # Object storage
    STORAGE_BACKEND: str = "local"  # "local" or "http"
    STORAGE_DIR: str = "./storage"
    STORAGE_URL: Optional[str] = None
    STORAGE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "pdf-reports"
    PUBLIC_BASE_URL: str = "http://localhost:8000/files"

    # PDF fonts (DejaVuSans.ttf / DejaVuSans-Bold.ttf); Helvetica when absent
    FONTS_DIR: Optional[str] = None

    HTTP_TIMEOUT: float = 20.0
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the process environment (and a local .env file)."""
        load_dotenv()
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(name)
            if raw is None or raw == "":
                continue
            if name == "CORS_ORIGINS":
                values[name] = [o.strip() for o in raw.split(",") if o.strip()]
            else:
                values[name] = raw
        settings = cls(**values)
        settings.LOG_LEVEL = settings.LOG_LEVEL.upper()
        return settings
