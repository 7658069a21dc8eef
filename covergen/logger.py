# covergen/logger.py
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import List, Optional

from covergen.config import config

TEXT_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# kept in step with the app level
FRAMEWORK_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "gunicorn.error", "gunicorn.access", "asyncio")
# SDK wire logs are noisy at DEBUG
SDK_LOGGERS = ("httpx", "httpcore", "openai", "stripe", "botocore", "urllib3", "google_genai", "replicate")

_configured = False


class JsonLineFormatter(logging.Formatter):
    """One JSON object per line; `severity` is the key Cloud Logging reads."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "severity": record.levelname,
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def make_formatter(fmt: str) -> logging.Formatter:
    return JsonLineFormatter() if fmt == "json" else logging.Formatter(TEXT_FMT)


def build_handlers(fmt: str, log_file: str = "") -> List[logging.Handler]:
    formatter = make_formatter(fmt)
    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(formatter)
    handlers: List[logging.Handler] = [stream]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = TimedRotatingFileHandler(path, when="midnight", backupCount=14, encoding="utf-8")
        rotating.setFormatter(formatter)
        handlers.append(rotating)
    return handlers


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure logging once from LOG_LEVEL / LOG_FORMAT / LOG_FILE, overruling prior basicConfig."""
    global _configured
    if _configured:
        return

    level_name = (level or config.log_level).upper()
    level_value = getattr(logging, level_name, logging.INFO)
    fmt = (fmt or config.log_format).lower()
    log_file = config.log_file if log_file is None else log_file

    root = logging.getLogger()
    root.setLevel(level_value)

    if not root.handlers:
        for h in build_handlers(fmt, log_file):
            h.setLevel(level_value)
            root.addHandler(h)
    else:
        # gunicorn or pytest already attached handlers: adopt them
        for h in root.handlers:
            h.setLevel(level_value)
            if not h.formatter or fmt == "json":
                h.setFormatter(make_formatter(fmt))

    for name in FRAMEWORK_LOGGERS:
        logging.getLogger(name).setLevel(level_value)
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(max(level_value, logging.INFO))

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name or "covergen")
