from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from precision_graph.data.returns import (
    compute_log_returns,
    load_prices,
    load_returns,
    load_sectors,
)


def test_compute_log_returns_matches_definition():
    idx = pd.date_range("2024-01-01", periods=4, freq="B")
    prices = pd.DataFrame({"A": [100.0, 101.0, 99.0, 100.0], "B": [50.0, 50.0, 50.5, 51.0]}, index=idx)

    rets = compute_log_returns(prices)

    assert list(rets.index) == list(idx[1:])
    assert rets.loc[idx[1], "A"] == pytest.approx(np.log(101.0 / 100.0))
    assert rets.loc[idx[2], "B"] == pytest.approx(np.log(50.5 / 50.0))


def test_compute_log_returns_sorts_and_masks_non_positive_prices():
    idx = pd.date_range("2024-01-01", periods=3, freq="B")
    prices = pd.DataFrame({"A": [100.0, 0.0, 102.0], "B": [10.0, 11.0, 12.0]}, index=idx)

    rets = compute_log_returns(prices.iloc[::-1])

    assert rets.index.is_monotonic_increasing
    assert np.isnan(rets.loc[idx[1], "A"])
    assert np.isnan(rets.loc[idx[2], "A"])
    assert rets.loc[idx[2], "B"] == pytest.approx(np.log(12.0 / 11.0))


def test_load_returns_csv_with_window(tmp_path, market_returns):
    path = tmp_path / "returns.csv"
    market_returns.to_csv(path)

    loaded = load_returns(path, window=20)

    assert loaded.shape == (20, 6)
    assert isinstance(loaded.index, pd.DatetimeIndex)
    np.testing.assert_allclose(loaded.to_numpy(), market_returns.tail(20).to_numpy())


def test_load_prices_parquet(tmp_path):
    idx = pd.date_range("2024-01-01", periods=3, freq="B")
    prices = pd.DataFrame({"A": [1.0, 2.0, 3.0]}, index=idx)
    path = tmp_path / "prices.parquet"
    prices.to_parquet(path)

    loaded = load_prices(path)
    pd.testing.assert_frame_equal(loaded, prices, check_freq=False, check_index_type=False)


def test_load_returns_missing_or_empty(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_returns(tmp_path / "missing.csv")

    empty = tmp_path / "empty.csv"
    pd.DataFrame(columns=["A"]).to_csv(empty)
    with pytest.raises(ValueError, match="empty"):
        load_returns(empty)


def test_load_sectors_strips_values(tmp_path):
    path = tmp_path / "sectors.csv"
    path.write_text("symbol,sector\nAAPL , Tech\nXOM,Energy\n", encoding="utf-8")

    assert load_sectors(path) == {"AAPL": "Tech", "XOM": "Energy"}


def test_load_sectors_requires_columns(tmp_path):
    path = tmp_path / "sectors.csv"
    path.write_text("ticker,group\nAAPL,Tech\n", encoding="utf-8")
    with pytest.raises(ValueError, match="columns"):
        load_sectors(path)


def test_load_sectors_rejects_duplicates(tmp_path):
    path = tmp_path / "sectors.csv"
    path.write_text("symbol,sector\nAAPL,Tech\nAAPL,Energy\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Duplicate"):
        load_sectors(path)


def test_load_sectors_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_sectors(tmp_path / "sectors.csv")
