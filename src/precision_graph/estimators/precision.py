"""Precision matrix (inverse covariance) via Cholesky factorisation."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from scipy.linalg import LinAlgError, cho_factor, cho_solve

from precision_graph.errors import DimensionError, NumericalError, SingularMatrixError

__all__ = ["precision_matrix", "partial_correlations"]

logger = logging.getLogger(__name__)


def _square_frame(matrix: pd.DataFrame | np.ndarray, name: str) -> pd.DataFrame:
    if isinstance(matrix, pd.DataFrame):
        frame = matrix.astype(float)
    else:
        array = np.asarray(matrix, dtype=float)
        if array.ndim != 2:
            raise DimensionError(f"{name} must be a 2D matrix.")
        frame = pd.DataFrame(array)

    if frame.shape[0] != frame.shape[1] or frame.shape[0] < 1:
        raise DimensionError(f"{name} must be a non-empty square matrix, got {frame.shape}.")
    if not np.all(np.isfinite(frame.to_numpy())):
        raise NumericalError(f"{name} contains non-finite entries.")
    return frame


def precision_matrix(covariance: pd.DataFrame | np.ndarray) -> pd.DataFrame:
    """Invert a symmetric positive definite covariance matrix.

    The matrix is factored as ``L L^T`` and the factorisation solved against
    the identity.  Labels of ``covariance`` are carried over to the result.

    Raises
    ------
    DimensionError
        If the input is not a non-empty square matrix.
    SingularMatrixError
        If the factorisation fails, or its smallest pivot squared is at most
        ``100 * N * eps * max(diag)``.  Rank-deficient data therefore fails
        at intensity 0 and also at intensities below roughly
        ``100 * N * eps``, where the blend is singular in floating point;
        such near-zero intensities count as zero shrinkage.
    """

    frame = _square_frame(covariance, "covariance")
    values = frame.to_numpy()
    values = 0.5 * (values + values.T)
    n_assets = values.shape[0]

    try:
        factor = cho_factor(values, lower=True, check_finite=False)
    except LinAlgError as exc:
        raise SingularMatrixError(
            "Covariance matrix is not positive definite; increase the shrinkage intensity."
        ) from exc

    # Rank-deficient input can slip through LAPACK with round-off sized pivots.
    pivots = np.abs(np.diag(factor[0]))
    tol = 100.0 * n_assets * np.finfo(float).eps * float(np.max(np.abs(np.diag(values))))
    if float(np.min(pivots)) ** 2 <= tol:
        raise SingularMatrixError(
            "Covariance matrix is numerically singular; increase the shrinkage intensity."
        )

    inverse = cho_solve(factor, np.eye(n_assets), check_finite=False)
    inverse = 0.5 * (inverse + inverse.T)
    logger.debug("Precision matrix computed (N=%d)", n_assets)
    return pd.DataFrame(inverse, index=frame.index, columns=frame.columns)


def partial_correlations(precision: pd.DataFrame | np.ndarray) -> pd.DataFrame:
    """Partial correlations ``-P_ij / sqrt(P_ii * P_jj)`` with a unit diagonal."""

    frame = _square_frame(precision, "precision")
    values = frame.to_numpy()
    diag = np.diag(values)
    if np.any(diag <= 0):
        raise NumericalError("precision matrix must have a strictly positive diagonal.")

    scale = np.sqrt(np.outer(diag, diag))
    partial = -values / scale
    np.fill_diagonal(partial, 1.0)
    return pd.DataFrame(partial, index=frame.index, columns=frame.columns)
