"""Precision Graph Lab.

Estimates sparse conditional-dependence graphs among asset return series:
shrunk covariance, precision matrix, quantile threshold and edge list.

O código-fonte vive em `src/precision_graph/` e é consumido principalmente via:

- CLI: `precision-graph build ...`
- Biblioteca: :func:`precision_graph.pipeline.recompute`
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:  # pragma: no cover - depende de instalação do pacote
    __version__ = version("precision-graph-lab")
except PackageNotFoundError:  # pragma: no cover - fallback para ambiente sem install
    __version__ = "0.0.0"

__all__ = ["__version__"]
