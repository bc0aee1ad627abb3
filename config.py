"""
Application settings.

Values come from environment variables, with a ``.env`` file in the
working directory loaded first if one exists.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    """Settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Flower Stop API")
    database_url: str = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
    database_name: str = os.getenv("DATABASE_NAME", "flower_stop_database")
    port: int = int(os.getenv("PORT", "3000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: List[str] = field(default_factory=lambda: _split(os.getenv("CORS_ORIGINS", "*")))


settings = Settings()
