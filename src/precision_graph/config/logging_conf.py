"""Logging do pipeline: texto simples ou uma linha JSON por registro.

Cada execução escreve no *stream* (``stderr`` por padrão) e em
``settings.logs_dir / precision_graph.log``.  Campos passados via ``extra=``
ou ``context`` aparecem como chaves próprias no JSON, o que permite filtrar
por ``command``, ``intensity`` ou ``quantile`` sem parsear a mensagem.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Mapping

from .constants import LOG_FILE_NAME
from .settings import Settings, get_settings

__all__ = ["JSONFormatter", "configure_logging"]

PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, merging ``context`` and ``extra`` fields."""

    def __init__(self, *, default_context: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._context = dict(default_context or {})

    def format(self, record: logging.LogRecord) -> str:
        extras = {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}
        payload: dict[str, Any] = {
            **self._context,
            **extras,
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _reset_root() -> logging.Logger:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG)
    return root


def _file_handler(path: Path) -> logging.Handler | None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, encoding="utf-8")
    except OSError:  # pragma: no cover - read-only log directory
        logging.getLogger(__name__).warning("Cannot write log file %s; stream only", path)
        return None


def configure_logging(
    *,
    settings: Settings | None = None,
    level: int | str = logging.INFO,
    structured: bool | None = None,
    module_levels: Mapping[str, int | str] | None = None,
    stream: IO[str] | None = None,
    context: Mapping[str, Any] | None = None,
    log_file: Path | None = None,
) -> None:
    """Replace the root handlers with a stream handler and a log file handler.

    ``structured=None`` follows ``settings.structured_logging``; ``context``
    fields are only emitted in JSON mode.  ``module_levels`` tunes individual
    loggers (e.g. ``{"precision_graph.graph": "DEBUG"}``).
    """

    settings = settings or get_settings()
    use_json = settings.structured_logging if structured is None else structured
    formatter: logging.Formatter = (
        JSONFormatter(default_context=context)
        if use_json
        else logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )

    root = _reset_root()
    handlers = [
        logging.StreamHandler(stream),
        _file_handler(log_file or settings.logs_dir / LOG_FILE_NAME),
    ]
    for handler in filter(None, handlers):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name, name_level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(name_level)
