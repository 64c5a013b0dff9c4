"""Logging setup for the character browser.

Application log lines are already ``event.name key=value ...`` (``upstream.page``,
``dataset.loaded``, ``route.view``), so the ``kv`` format only prefixes them with
the same kind of fields a log shipper can split on::

    ts=2026-10-18 12:00:00,000 level=INFO logger=app.api upstream.page url=... count=20

``plain`` keeps the usual human-readable layout for local runs.

Environment:
    LOG_LEVEL      root level, default INFO
    LOG_FORMAT     ``plain`` (default) or ``kv``
    LOG_FILE_PATH  optional file, reopened when rotated externally
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Optional

_configured = False

FORMATS: Dict[str, str] = {
    "plain": "%(asctime)s %(levelname)s %(name)s: %(message)s",
    "kv": "ts=%(asctime)s level=%(levelname)s logger=%(name)s %(message)s",
}

# httpx logs one INFO line per request; the fetcher already logs one per page
_QUIET_LOGGERS = ("httpx", "httpcore")
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")


def _build_dict_config(
    log_file: Optional[str], level: str, fmt: str = "plain"
) -> Dict[str, Any]:
    if fmt not in FORMATS:
        raise ValueError(f"unknown LOG_FORMAT {fmt!r}, expected one of {sorted(FORMATS)}")

    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": fmt,
        }
    }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.WatchedFileHandler",
            "filename": log_file,
            "formatter": fmt,
        }

    quiet_level = "DEBUG" if level == "DEBUG" else "WARNING"
    loggers: Dict[str, Any] = {name: {"level": quiet_level} for name in _QUIET_LOGGERS}
    # the app package follows the root level but stays explicit so it can be raised alone
    loggers["app"] = {"level": level}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {name: {"format": pattern} for name, pattern in FORMATS.items()},
        "handlers": handlers,
        "loggers": loggers,
        "root": {"level": level, "handlers": list(handlers)},
    }


def configure_logging() -> None:
    """Apply the logging config once per process.

    Called at import of `app.main`; uvicorn reloads and workers import it again,
    so repeated calls are no-ops. An unknown ``LOG_FORMAT`` raises ``ValueError``
    rather than silently falling back.
    """
    global _configured
    if _configured:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    fmt = os.getenv("LOG_FORMAT", "plain").lower()
    log_file = os.getenv("LOG_FILE_PATH") or None

    logging.config.dictConfig(_build_dict_config(log_file, level, fmt))

    for name in _SERVER_LOGGERS:
        logging.getLogger(name).setLevel(level)

    _configured = True
    logging.getLogger(__name__).debug("logging.configured level=%s format=%s", level, fmt)
