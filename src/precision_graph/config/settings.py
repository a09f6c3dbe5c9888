"""Configurações de execução do pipeline de grafos de precisão.

Só três valores afetam uma execução: a raiz do projeto (base para todos os
caminhos relativos de entrada/saída), o diretório de logs e o formato dos
logs.  Cada um pode vir, em ordem crescente de precedência, do valor padrão,
de um arquivo ``.env``, de variáveis ``PRECISION_GRAPH_*`` ou de
``overrides`` explícitos.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

__all__ = [
    "ENV_PREFIX",
    "Settings",
    "get_settings",
    "load_env_file",
    "reset_settings_cache",
]


ENV_PREFIX = "PRECISION_GRAPH_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Cannot interpret '{value}' as boolean")


def load_env_file(path: Path) -> dict[str, str]:
    """``KEY=VALUE`` pairs of a ``.env`` file; comments and malformed lines are skipped."""

    if not path.exists():
        return {}

    entries: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or key.startswith("#"):
            continue
        entries[key.strip()] = value.strip()
    return entries


def _default_root() -> Path:
    return Path(__file__).resolve().parents[3]


@dataclass(slots=True, frozen=True)
class Settings:
    """Raiz do projeto, destino dos logs e formato (JSON ou texto)."""

    project_root: Path
    logs_dir: Path
    structured_logging: bool = False

    def resolve(self, path: str | Path) -> Path:
        """Absolute ``path``; relative paths are taken from ``project_root``."""

        candidate = Path(path).expanduser()
        return candidate if candidate.is_absolute() else self.project_root / candidate

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_root": str(self.project_root),
            "logs_dir": str(self.logs_dir),
            "structured_logging": self.structured_logging,
        }

    @classmethod
    def from_env(
        cls,
        *,
        overrides: Mapping[str, Any] | None = None,
        env_file: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "Settings":
        """Resolve settings from defaults, ``.env``, environment and ``overrides``.

        ``overrides`` accepts ``project_root``, ``LOGS_DIR`` and
        ``STRUCTURED_LOGGING``; anything else raises :class:`KeyError`.
        """

        extra = dict(overrides or {})
        system = dict(os.environ if environ is None else environ)
        from_file = load_env_file(Path(env_file).expanduser()) if env_file is not None else {}

        root_value = extra.pop("project_root", None)
        if root_value is None:
            root_value = system.get(f"{ENV_PREFIX}PROJECT_ROOT", from_file.get(f"{ENV_PREFIX}PROJECT_ROOT"))
        root = Path(root_value).expanduser().resolve() if root_value is not None else _default_root()

        if env_file is None:
            from_file = load_env_file(root / ".env")
        layered = {**from_file, **system}

        def lookup(name: str, default: Any) -> Any:
            if name in extra:
                return extra.pop(name)
            return layered.get(f"{ENV_PREFIX}{name}", default)

        logs_dir = Path(lookup("LOGS_DIR", "logs")).expanduser()
        structured = _as_bool(lookup("STRUCTURED_LOGGING", False))

        if extra:
            raise KeyError(f"Unknown override(s): {', '.join(sorted(extra))}")

        return cls(
            project_root=root,
            logs_dir=logs_dir if logs_dir.is_absolute() else root / logs_dir,
            structured_logging=structured,
        )


_cached: Settings | None = None


def get_settings(**kwargs: Any) -> Settings:
    """Process-wide settings; keyword arguments bypass the cache."""

    global _cached
    if kwargs:
        return Settings.from_env(**kwargs)
    if _cached is None:
        _cached = Settings.from_env()
    return _cached


def reset_settings_cache() -> None:
    global _cached
    _cached = None
