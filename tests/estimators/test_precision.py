"""Tests for the Cholesky-based precision matrix solver."""

import numpy as np
import pandas as pd
import pytest
from numpy.linalg import LinAlgError

from precision_graph.errors import DimensionError, NumericalError, SingularMatrixError
from precision_graph.estimators import cov
from precision_graph.estimators.precision import partial_correlations, precision_matrix


def test_precision_matches_direct_inverse(market_returns):
    sample = cov.sample_cov(market_returns)
    precision = precision_matrix(sample)
    np.testing.assert_allclose(
        precision.to_numpy(), np.linalg.inv(sample.to_numpy()), rtol=1e-8
    )
    assert list(precision.columns) == list(market_returns.columns)


def test_precision_is_symmetric_and_inverts(market_returns):
    shrunk = cov.shrunk_cov(market_returns, 0.2)
    precision = precision_matrix(shrunk).to_numpy()
    np.testing.assert_array_equal(precision, precision.T)
    np.testing.assert_allclose(precision @ shrunk.to_numpy(), np.eye(6), atol=1e-8)


def test_precision_accepts_plain_arrays():
    matrix = np.array([[2.0, 0.5], [0.5, 1.0]])
    precision = precision_matrix(matrix)
    np.testing.assert_allclose(precision.to_numpy(), np.linalg.inv(matrix))


def test_full_shrinkage_gives_diagonal_precision(market_returns):
    precision = precision_matrix(cov.shrunk_cov(market_returns, 1.0)).to_numpy()
    off_diagonal = precision[~np.eye(6, dtype=bool)]
    assert np.all(off_diagonal == 0.0)
    assert np.all(np.diag(precision) > 0)


def test_singular_covariance_raises(wide_returns):
    with pytest.warns(RuntimeWarning):
        singular = cov.shrunk_cov(wide_returns, 0.0)
    with pytest.raises(SingularMatrixError) as excinfo:
        precision_matrix(singular)
    assert isinstance(excinfo.value, LinAlgError)
    assert isinstance(excinfo.value, NumericalError)


def test_indefinite_matrix_raises():
    with pytest.raises(SingularMatrixError):
        precision_matrix(np.array([[1.0, 2.0], [2.0, 1.0]]))


def test_non_square_matrix_raises():
    with pytest.raises(DimensionError):
        precision_matrix(np.ones((2, 3)))


def test_non_finite_entries_raise():
    with pytest.raises(NumericalError):
        precision_matrix(np.array([[1.0, np.nan], [np.nan, 1.0]]))


def test_partial_correlations_unit_diagonal_and_sign():
    covariance = pd.DataFrame(
        [[1.0, 0.6], [0.6, 1.0]], index=["A", "B"], columns=["A", "B"]
    )
    partial = partial_correlations(precision_matrix(covariance))
    np.testing.assert_allclose(np.diag(partial.to_numpy()), 1.0)
    # With two assets the partial correlation equals the plain correlation.
    assert partial.loc["A", "B"] == pytest.approx(0.6)


def test_partial_correlations_bounded(market_returns):
    partial = partial_correlations(precision_matrix(cov.shrunk_cov(market_returns, 0.1)))
    values = partial.to_numpy()
    assert np.all(np.abs(values) <= 1.0 + 1e-12)
    np.testing.assert_allclose(values, values.T)
