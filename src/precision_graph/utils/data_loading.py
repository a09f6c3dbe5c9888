"""Lightweight helpers to load tabular data for the estimation pipeline."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

__all__ = ["read_dataframe"]


def read_dataframe(path: Path) -> pd.DataFrame | pd.Series:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in {".parquet", ".pq"}:
        return pd.read_parquet(path)
    if suffix in {".csv"}:
        return pd.read_csv(path, index_col=0, parse_dates=True)
    if suffix in {".pkl", ".pickle"}:
        return pd.read_pickle(path)
    if suffix in {".feather"}:
        # Feather has no index; the first column holds the dates.
        frame = pd.read_feather(path)
        return frame.set_index(frame.columns[0])
    raise ValueError(f"Unsupported data format for {path}")
