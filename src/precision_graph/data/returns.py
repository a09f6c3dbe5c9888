"""Funções de carregamento de retornos e setores.

Conversão de preços em log-retornos e leitura dos arquivos de entrada do
pipeline (matriz de retornos, mapeamento ``symbol -> sector``).
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from precision_graph.config.constants import COLUMN_SECTOR, COLUMN_SYMBOL
from precision_graph.utils.data_loading import read_dataframe

__all__ = ["compute_log_returns", "load_prices", "load_returns", "load_sectors"]

logger = logging.getLogger(__name__)


def compute_log_returns(prices_df: pd.DataFrame) -> pd.DataFrame:
    """Log-returns ``log(p_t / p_{t-1})``; non-positive prices become NaN."""

    prices = prices_df.sort_index()
    prices = prices.where(prices > 0)
    rets = np.log(prices.divide(prices.shift(1)))
    return rets.dropna(how="all")


def _load_frame(path: Path, kind: str) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{kind} file not found: {path}")

    loaded = read_dataframe(path)
    frame = loaded.to_frame() if isinstance(loaded, pd.Series) else loaded
    if frame.empty:
        raise ValueError(f"{kind} file {path} is empty.")
    logger.info("Loaded %s from %s (%d rows, %d columns)", kind, path, *frame.shape)
    return frame.sort_index()


def load_returns(path: Path, *, window: int | None = None) -> pd.DataFrame:
    """Read a returns matrix (rows = dates, columns = assets).

    ``window`` keeps only the trailing observations.
    """

    returns = _load_frame(path, "returns")
    if window is not None:
        returns = returns.tail(int(window))
    return returns


def load_prices(path: Path) -> pd.DataFrame:
    return _load_frame(path, "prices")


def load_sectors(path: Path) -> dict[str, str]:
    """Read a ``symbol,sector`` csv into a label -> sector mapping."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"sectors file not found: {path}")

    frame = pd.read_csv(path, dtype=str)
    required = {COLUMN_SYMBOL, COLUMN_SECTOR}
    if not required.issubset(frame.columns):
        raise ValueError(f"Sectors file must contain columns: {sorted(required)}")

    frame = frame.dropna(subset=[COLUMN_SYMBOL, COLUMN_SECTOR])
    symbols = frame[COLUMN_SYMBOL].str.strip()
    if symbols.duplicated().any():
        duplicated = sorted(symbols[symbols.duplicated()].unique())
        raise ValueError(f"Duplicate symbols in sectors file: {duplicated}")
    return dict(zip(symbols, frame[COLUMN_SECTOR].str.strip()))
