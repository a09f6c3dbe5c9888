from __future__ import annotations

import logging

import numpy as np
import pandas as pd
import pytest

from precision_graph.config.settings import reset_settings_cache

SCENARIO_COV = np.array(
    [
        [1.0, 0.8, 0.1],
        [0.8, 1.0, 0.05],
        [0.1, 0.05, 1.0],
    ]
)


def returns_with_covariance(
    target: np.ndarray, n_obs: int = 60, seed: int = 7, columns=None
) -> pd.DataFrame:
    """Returns whose unbiased sample covariance equals ``target`` exactly (up to round-off)."""

    rng = np.random.default_rng(seed)
    n_assets = target.shape[0]
    raw = rng.standard_normal((n_obs, n_assets))
    centred = raw - raw.mean(axis=0)
    cov = centred.T @ centred / (n_obs - 1)
    whitened = centred @ np.linalg.inv(np.linalg.cholesky(cov)).T
    values = whitened @ np.linalg.cholesky(target).T
    index = pd.date_range("2024-01-01", periods=n_obs, freq="B")
    return pd.DataFrame(values, index=index, columns=columns)


@pytest.fixture
def scenario_returns() -> pd.DataFrame:
    return returns_with_covariance(SCENARIO_COV, columns=["A", "B", "C"])


@pytest.fixture
def toy_returns() -> pd.DataFrame:
    data = np.array(
        [
            [0.01, 0.02, 0.015],
            [0.011, 0.018, 0.016],
            [0.013, 0.017, 0.014],
            [0.012, 0.021, 0.015],
        ]
    )
    return pd.DataFrame(data, columns=["A", "B", "C"])


@pytest.fixture
def market_returns() -> pd.DataFrame:
    """Two correlated blocks of assets plus noise, 250 daily observations."""

    rng = np.random.default_rng(42)
    n_obs = 250
    tech_factor = rng.normal(0.0, 0.010, n_obs)
    energy_factor = rng.normal(0.0, 0.012, n_obs)
    columns = ["AAPL", "MSFT", "NVDA", "XOM", "CVX", "GLD"]
    data = np.column_stack(
        [
            tech_factor + rng.normal(0.0, 0.004, n_obs),
            tech_factor + rng.normal(0.0, 0.005, n_obs),
            tech_factor + rng.normal(0.0, 0.006, n_obs),
            energy_factor + rng.normal(0.0, 0.004, n_obs),
            energy_factor + rng.normal(0.0, 0.005, n_obs),
            rng.normal(0.0, 0.008, n_obs),
        ]
    )
    index = pd.date_range("2023-01-02", periods=n_obs, freq="B")
    return pd.DataFrame(data, index=index, columns=columns)


@pytest.fixture
def market_sectors() -> dict[str, str]:
    return {
        "AAPL": "Tech",
        "MSFT": "Tech",
        "NVDA": "Tech",
        "XOM": "Energy",
        "CVX": "Energy",
        "GLD": "Commodities",
    }


@pytest.fixture
def wide_returns() -> pd.DataFrame:
    """More assets than observations: the sample covariance is singular."""

    rng = np.random.default_rng(3)
    return pd.DataFrame(
        rng.normal(0.0, 0.01, size=(5, 8)),
        columns=[f"S{i}" for i in range(8)],
    )


@pytest.fixture(autouse=True)
def _isolate_settings_and_logging():
    reset_settings_cache()
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler).__module__.startswith("_pytest"):
            continue
        handler.close()
        root.removeHandler(handler)
    reset_settings_cache()


@pytest.fixture
def covariance_returns():
    """Factory building returns with a prescribed sample covariance."""

    return returns_with_covariance
