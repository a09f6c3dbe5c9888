"""YAML configuration files for ``build`` and ``sweep`` runs.

Every failure (missing file, bad YAML, empty document, schema violation)
surfaces as :class:`ConfigError`, so the CLI can map it to a single exit code.

Example
-------
>>> from precision_graph.config.loader import load_config
>>> from precision_graph.config.schemas import NetworkConfig
>>>
>>> config = load_config("configs/network_default.yaml", NetworkConfig)
>>> print(config.quantile)
0.9
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ValidationError

__all__ = ["load_config", "save_config", "ConfigError"]

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

PathLike = Union[str, Path]


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or does not validate."""


def _default_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_config_path(file_path: PathLike, project_root: Optional[Path] = None) -> Path:
    """Locate ``file_path``: as given if absolute, else under ``project_root``, else the cwd.

    Raises
    ------
    FileNotFoundError
        If none of the candidates exists.
    """
    path = Path(file_path).expanduser()
    if path.is_absolute():
        candidates = [path]
    else:
        candidates = [(project_root or _default_root()) / path, path.resolve()]

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise FileNotFoundError(f"Config file not found: {file_path}")


def load_config(
    file_path: PathLike,
    schema: Type[T],
    *,
    project_root: Optional[Path] = None,
) -> T:
    """Read a YAML mapping from ``file_path`` and validate it against ``schema``.

    Raises
    ------
    ConfigError
        If the file is missing, is not valid YAML, holds no mapping, or fails
        validation.  The original exception is chained.
    """
    try:
        resolved = _resolve_config_path(file_path, project_root)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {file_path}") from exc

    try:
        data = yaml.safe_load(resolved.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML syntax in {file_path}: {exc}") from exc

    if data is None:
        raise ConfigError(f"Empty configuration file: {file_path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {file_path} must hold a mapping, got {type(data).__name__}")

    try:
        config = schema.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Configuration validation failed for {file_path}:\n{exc}") from exc

    logger.info("Loaded %s from %s", schema.__name__, resolved)
    return config


def save_config(
    config: BaseModel, file_path: PathLike, *, project_root: Optional[Path] = None
) -> Path:
    """Write ``config`` as YAML (``None`` fields omitted) and return the path written."""
    path = Path(file_path).expanduser()
    if not path.is_absolute():
        path = (project_root or _default_root()) / path
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = config.model_dump(mode="json", exclude_none=True)
    path.write_text(
        yaml.safe_dump(payload, default_flow_style=False, sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    logger.info("Saved %s to %s", type(config).__name__, path)
    return path
