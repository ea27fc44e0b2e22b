import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# .env is looked up next to the package so the app can be started from any directory
load_dotenv(Path(__file__).with_name(".env"))


class Settings(BaseModel):
    database_url: Optional[str] = None
    database_password: Optional[str] = None
    database_echo: bool = False
    api_prefix: str = "/api"
    pagination_mode: Literal["exact", "countless"] = "exact"
    log_level: str = "INFO"


def _flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    """Reads settings from the environment (after .env has been loaded)."""
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        database_password=os.getenv("DATABASE_PASSWORD") or None,
        database_echo=_flag("DATABASE_ECHO"),
        api_prefix=os.getenv("API_PREFIX", "/api"),
        pagination_mode=(os.getenv("PAGINATION_MODE") or "exact").strip().lower(),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
