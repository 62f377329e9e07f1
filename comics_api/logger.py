# comics_api/logger.py
import logging
import sys
from typing import Optional

from comics_api.config import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# follow the app level
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "gunicorn.error", "gunicorn.access")
# never below INFO, they log every request/statement at DEBUG
_CLIENT_LOGGERS = ("urllib3", "httpx", "openai", "google.auth", "sqlalchemy.engine")

_configured = False


def _resolve_level(level: Optional[str]) -> int:
    return getattr(logging, (level or config.log_level).upper(), logging.INFO)


def configure_logging(level: Optional[str] = None) -> None:
    """Set up the root logger once; later calls are no-ops."""
    global _configured
    if _configured:
        return

    value = _resolve_level(level)
    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(value)

    if root.handlers:
        for handler in root.handlers:
            handler.setLevel(value)
            handler.formatter = handler.formatter or formatter
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _SERVER_LOGGERS:
        logging.getLogger(name).setLevel(value)
    for name in _CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(max(value, logging.INFO))

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name or "comics_api")
