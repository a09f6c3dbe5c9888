"""Constantes centrais utilizadas em múltiplos módulos.

Valores padrão do pipeline (intensidade de shrinkage, quantil de corte),
limites numéricos e nomes de colunas dos artefatos exportados.
"""

from __future__ import annotations

from typing import Final

__all__ = [
    "COLUMN_PARTIAL_CORR",
    "COLUMN_PRECISION",
    "COLUMN_SECTOR",
    "COLUMN_SOURCE",
    "COLUMN_SYMBOL",
    "COLUMN_TARGET",
    "COND_WARNING_THRESHOLD",
    "DEFAULT_QUANTILE",
    "DEFAULT_SHRINKAGE",
    "LOG_FILE_NAME",
    "PALETTE_QUALITATIVE",
    "PALETTE_CONTINUOUS",
    "QUANTILE_METHOD",
]


# Numeric defaults ----------------------------------------------------------

DEFAULT_SHRINKAGE: Final[float] = 0.1
"""Intensidade de shrinkage usada quando nenhuma é informada."""

DEFAULT_QUANTILE: Final[float] = 0.9
"""Quantil de |P| abaixo do qual as entradas são zeradas."""

COND_WARNING_THRESHOLD: Final[float] = 1e12
"""Número de condição acima do qual uma covariância gera ``RuntimeWarning``."""


# Colour palettes -----------------------------------------------------------

PALETTE_QUALITATIVE: Final[str] = "tab10"
"""Colormap para até 10 setores distintos."""

PALETTE_CONTINUOUS: Final[str] = "hsv"
"""Colormap amostrado uniformemente quando há mais de 10 setores."""


# Column names --------------------------------------------------------------

COLUMN_SOURCE: Final[str] = "source"
COLUMN_TARGET: Final[str] = "target"
COLUMN_PRECISION: Final[str] = "precision"
COLUMN_PARTIAL_CORR: Final[str] = "partial_corr"
COLUMN_SYMBOL: Final[str] = "symbol"
COLUMN_SECTOR: Final[str] = "sector"

LOG_FILE_NAME: Final[str] = "precision_graph.log"

QUANTILE_METHOD: Final[str] = "interpolated_inverted_cdf"
"""Método de ``numpy.quantile`` para o corte: tipo 4 de Hyndman-Fan (interpolação
linear da CDF empírica), não o tipo 7; é o que dá 0.74 para o quantil 0.9 de
``{0.1, 0.2, 0.5, 0.9}``.  ``"linear"`` seleciona o tipo 7."""
