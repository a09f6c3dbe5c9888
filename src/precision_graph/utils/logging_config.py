"""Logger helpers for pipeline modules.

:func:`get_logger` falls back to ``basicConfig`` when nothing configured the
root logger (library use without the CLI), and :func:`log_dict` logs a run
summary both as readable text and as ``extra`` fields for the JSON formatter.
"""

from __future__ import annotations

import logging
from numbers import Real
from typing import Mapping

FALLBACK_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def get_logger(name: str, *, level: int | None = None) -> logging.Logger:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format=FALLBACK_FORMAT)
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def _fmt(value: object) -> str:
    if isinstance(value, Real) and not isinstance(value, (bool, int)):
        return f"{float(value):.6g}"
    return str(value)


def log_dict(
    logger: logging.Logger,
    message: str,
    payload: Mapping[str, object],
    level: int = logging.INFO,
) -> None:
    """Log ``message | key=value, ...``; the keys also travel as record attributes."""

    text = ", ".join(f"{key}={_fmt(value)}" for key, value in payload.items())
    logger.log(level, "%s | %s", message, text, extra={f"run_{key}": value for key, value in payload.items()})
