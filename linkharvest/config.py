import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LINKHARVEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = DATA_DIR / "links.db"
    rules_file: Optional[Path] = None

    profile_fetch_timeout: float = 10.0
    meta_fetch_timeout: float = 5.0
    max_body_bytes: int = 5 * 1024 * 1024
    user_agent: str = BROWSER_USER_AGENT

    api_host: str = "127.0.0.1"
    api_port: int = 8765
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"


settings = Settings()


def setup_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
