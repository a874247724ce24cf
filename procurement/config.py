# config.py
# Environment-driven settings for the procurement client

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _float_or_none(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    return float(value)


class Settings:
    API_BASE_URL: str = os.getenv("PROCUREMENT_API_URL", "http://localhost:3001/api")
    SESSION_FILE: Path = Path(
        os.getenv("PROCUREMENT_SESSION_FILE", str(Path.home() / ".procurement" / "session.json"))
    ).expanduser()
    # no timeout unless one is configured
    API_TIMEOUT: Optional[float] = _float_or_none(os.getenv("PROCUREMENT_API_TIMEOUT"))
    DASHBOARD_WORKERS: int = int(os.getenv("PROCUREMENT_DASHBOARD_WORKERS", "4"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
