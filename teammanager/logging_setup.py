"""Loguru configuration shared by the Streamlit app and the admin CLI."""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Iterable, Optional, Set

from loguru import logger

_MASK = "********"
_SENSITIVE_EXTRA_KEYS = ("key", "token", "password", "secret")
_secrets: Set[str] = set()
_configured_level: Optional[str] = None


def register_secret(*values: Optional[str]) -> None:
    """Mask ``values`` wherever they show up in a log message."""
    for value in values:
        if value and len(value) >= 8:
            _secrets.add(value)


def _mask(value: str) -> str:
    return value[:4] + "****" + value[-4:] if len(value) > 8 else _MASK


def sensitive_data_filter(record: Dict[str, Any]) -> bool:
    extra = record.get("extra")
    if isinstance(extra, dict):
        for extra_key, value in list(extra.items()):
            if isinstance(value, str) and any(k in extra_key.lower() for k in _SENSITIVE_EXTRA_KEYS):
                extra[extra_key] = _mask(value)
    message = record.get("message", "")
    for secret in _secrets:
        if secret in message:
            message = message.replace(secret, _MASK)
    record["message"] = message
    return True


class InterceptHandler(logging.Handler):
    """Route stdlib ``logging`` records (httpx, postgrest) through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", *, quiet_loggers: Iterable[str] = ("httpx", "httpcore", "hpack")) -> None:
    """Install the stderr sink once; later calls only change the level."""
    global _configured_level

    level = level.upper()
    if _configured_level == level:
        return

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=False,
        filter=sensitive_data_filter,
    )
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured_level = level
    logger.debug("Logging initialized with level {}", level)


__all__ = ["InterceptHandler", "register_secret", "sensitive_data_filter", "setup_logging"]
