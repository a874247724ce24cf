"""
Console logging for the procurement client.
Call setup_logging() once at start-up (the Streamlit app does this).
"""
import logging
import re
import sys
from typing import Optional

from .config import settings

_BEARER = re.compile(r"(Bearer\s+)[\w\-.~+/=]+")

_LEVEL_COLORS = {
    logging.DEBUG: "\033[2m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


class RedactTokens(logging.Filter):
    """Masks bearer tokens that end up in a message or its arguments."""

    def filter(self, record):
        message = record.getMessage()
        if "Bearer" in message:
            record.msg = _BEARER.sub(r"\1***", message)
            record.args = None
        return True


class ConsoleFormatter(logging.Formatter):
    def __init__(self, color: bool = False):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s | %(message)s", datefmt="%H:%M:%S")
        self.color = color

    def format(self, record):
        line = super().format(record)
        tint = _LEVEL_COLORS.get(record.levelno) if self.color else None
        return f"{tint}{line}\033[0m" if tint else line


def setup_logging(level: Optional[str] = None) -> None:
    level = (level or settings.LOG_LEVEL).upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter(color=sys.stderr.isatty()))
    console.addFilter(RedactTokens())
    root.addHandler(console)

    # requests' connection pool logs every request at DEBUG
    for name in ("urllib3", "watchdog"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("procurement").info("Logging initialized at %s", level)
