"""Tests for covariance estimation utilities."""

import math

import numpy as np
import pandas as pd
import pytest

from precision_graph.errors import DimensionError, InvalidParameterError, NumericalError
from precision_graph.estimators import cov


def test_sample_cov_matches_numpy(toy_returns):
    cov_df = cov.sample_cov(toy_returns)
    expected = np.cov(toy_returns.to_numpy().T, ddof=1)
    np.testing.assert_allclose(cov_df.to_numpy(), expected, rtol=1e-12, atol=1e-15)
    assert list(cov_df.columns) == ["A", "B", "C"]
    assert list(cov_df.index) == ["A", "B", "C"]


def test_sample_cov_accepts_plain_arrays(toy_returns):
    cov_df = cov.sample_cov(toy_returns.to_numpy().tolist())
    assert cov_df.shape == (3, 3)
    np.testing.assert_allclose(cov_df.to_numpy(), cov_df.to_numpy().T)


def test_sample_cov_drops_incomplete_rows(toy_returns):
    with_gap = toy_returns.copy()
    with_gap.iloc[0, 1] = np.nan
    cov_df = cov.sample_cov(with_gap)
    expected = np.cov(toy_returns.iloc[1:].to_numpy().T, ddof=1)
    np.testing.assert_allclose(cov_df.to_numpy(), expected, rtol=1e-12, atol=1e-15)


@pytest.mark.parametrize(
    "returns",
    [
        np.array([[0.01, 0.02]]),  # T = 1
        np.empty((5, 0)),  # N = 0
        np.array([0.01, 0.02, 0.03]),  # not 2D
    ],
)
def test_sample_cov_rejects_bad_shapes(returns):
    with pytest.raises(DimensionError):
        cov.sample_cov(returns)


def test_dimension_error_is_value_error():
    with pytest.raises(ValueError):
        cov.shrunk_cov(np.array([[0.01, 0.02]]), 0.5)


@pytest.mark.parametrize("intensity", [-0.1, 1.1, math.nan, math.inf, True, "0.5"])
def test_shrunk_cov_rejects_invalid_intensity(toy_returns, intensity):
    with pytest.raises(InvalidParameterError):
        cov.shrunk_cov(toy_returns, intensity)


def test_zero_variance_raises_numerical_error():
    flat = pd.DataFrame(np.ones((10, 3)), columns=["A", "B", "C"])
    with pytest.raises(NumericalError):
        cov.shrunk_cov(flat, 0.5)


def test_zero_intensity_returns_sample_covariance(market_returns):
    sample = cov.sample_cov(market_returns)
    shrunk = cov.shrunk_cov(market_returns, 0.0)
    np.testing.assert_allclose(shrunk.to_numpy(), sample.to_numpy(), rtol=1e-12, atol=1e-18)


def test_full_intensity_returns_isotropic_target(market_returns):
    sample = cov.sample_cov(market_returns)
    shrunk = cov.shrunk_cov(market_returns, 1.0)
    mean_var = float(np.mean(np.diag(sample.to_numpy())))
    np.testing.assert_allclose(shrunk.to_numpy(), np.eye(6) * mean_var, rtol=1e-12, atol=0.0)


def test_target_preserves_total_variance(market_returns):
    sample = cov.sample_cov(market_returns)
    target = cov.shrinkage_target(sample)
    assert np.trace(target.to_numpy()) == pytest.approx(np.trace(sample.to_numpy()))
    assert list(target.columns) == list(sample.columns)


@pytest.mark.parametrize("intensity", [0.01, 0.3, 0.7, 1.0])
def test_positive_intensity_is_positive_definite_even_when_wide(wide_returns, intensity):
    shrunk = cov.shrunk_cov(wide_returns, intensity)
    values = shrunk.to_numpy()
    np.testing.assert_allclose(values, values.T)
    assert np.all(np.linalg.eigvalsh(values) > 0)


def test_zero_intensity_wide_returns_singular_matrix(wide_returns):
    with pytest.warns(RuntimeWarning):
        shrunk = cov.shrunk_cov(wide_returns, 0.0)
    assert np.linalg.matrix_rank(shrunk.to_numpy()) < wide_returns.shape[1]


def test_shrink_covariance_scales_off_diagonals():
    sample = pd.DataFrame(
        [[1.0, 0.8, 0.1], [0.8, 1.0, 0.05], [0.1, 0.05, 1.0]],
        index=list("ABC"),
        columns=list("ABC"),
    )
    shrunk = cov.shrink_covariance(sample, 0.3)
    np.testing.assert_allclose(np.diag(shrunk.to_numpy()), 1.0)
    assert shrunk.loc["A", "B"] == pytest.approx(0.56)
    assert shrunk.loc["A", "C"] == pytest.approx(0.07)
    assert shrunk.loc["B", "C"] == pytest.approx(0.035)


def test_shrink_covariance_requires_square_matrix():
    with pytest.raises(DimensionError):
        cov.shrink_covariance(np.ones((2, 3)), 0.5)


def test_ledoit_wolf_intensity_bounds(market_returns):
    intensity = cov.ledoit_wolf_intensity(market_returns)
    assert 0.0 <= intensity <= 1.0


def test_ledoit_wolf_intensity_small_for_long_correlated_sample(market_returns):
    assert cov.ledoit_wolf_intensity(market_returns) < 0.5


def test_ledoit_wolf_intensity_single_asset_is_zero():
    returns = pd.DataFrame({"A": [0.01, -0.02, 0.015, 0.003]})
    assert cov.ledoit_wolf_intensity(returns) == 0.0


def test_ledoit_wolf_intensity_rejects_zero_variance():
    with pytest.raises(NumericalError):
        cov.ledoit_wolf_intensity(np.zeros((6, 2)))


def test_ledoit_wolf_shrinkage_applies_derived_intensity(market_returns):
    shrunk, intensity = cov.ledoit_wolf_shrinkage(market_returns)
    expected = cov.shrunk_cov(market_returns, intensity)
    np.testing.assert_allclose(shrunk.to_numpy(), expected.to_numpy())
    assert np.all(np.linalg.eigvalsh(shrunk.to_numpy()) > 0)
