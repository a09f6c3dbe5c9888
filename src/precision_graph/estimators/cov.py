"""Covariance estimators feeding the precision-graph pipeline.

The routines below compute the unbiased sample covariance of a returns matrix
and blend it with an isotropic target (average sample variance times the
identity).  Each routine accepts a ``pandas.DataFrame`` of aligned asset
returns, or any 2D array-like, and returns labelled frames so that asset
labels are preserved end-to-end.

The shrinkage intensity is a caller decision.  :func:`ledoit_wolf_intensity`
offers the closed-form optimal intensity as an alternative entry point; it
never changes how the blend itself is computed.

References
----------
Ledoit, O. and Wolf, M. (2004), *A Well-Conditioned Estimator for Large-Dimensional
    Covariance Matrices*. Journal of Multivariate Analysis 88.
"""

from __future__ import annotations

import logging
import math
import warnings
from numbers import Real
from typing import Sequence, Union

import numpy as np
import pandas as pd
from numpy.linalg import LinAlgError

from precision_graph.config.constants import COND_WARNING_THRESHOLD
from precision_graph.errors import DimensionError, InvalidParameterError, NumericalError

ArrayOrFrame = Union[pd.DataFrame, pd.Series, np.ndarray, Sequence[Sequence[float]]]

__all__ = [
    "sample_cov",
    "shrinkage_target",
    "shrink_covariance",
    "shrunk_cov",
    "ledoit_wolf_intensity",
    "ledoit_wolf_shrinkage",
    "validate_intensity",
]

logger = logging.getLogger(__name__)


def _ensure_dataframe(returns: ArrayOrFrame, min_obs: int = 2) -> pd.DataFrame:
    """Uniformly convert inputs to a float DataFrame and drop NaN rows.

    Parameters
    ----------
    returns
        Historical returns arranged as observations (rows) by assets (columns).
    min_obs
        Minimum number of complete observations required.

    Returns
    -------
    pandas.DataFrame
        Cleaned view of the input ready for estimation.
    """

    if isinstance(returns, pd.DataFrame):
        df = returns.copy()
    elif isinstance(returns, pd.Series):
        df = returns.to_frame()
    else:
        array = np.asarray(returns, dtype=float)
        if array.ndim != 2:
            raise DimensionError("returns must be a 2D array-like structure.")
        df = pd.DataFrame(array)

    if df.shape[1] < 1:
        raise DimensionError("returns must contain at least one asset column (N >= 1).")

    df = df.apply(pd.to_numeric, errors="coerce")
    df = df.replace([np.inf, -np.inf], np.nan).dropna(axis=0, how="any")

    if df.shape[0] < min_obs:
        raise DimensionError(
            f"At least {min_obs} complete observations required (T >= {min_obs}), "
            f"got {df.shape[0]}."
        )

    return df.astype(float)


def _as_square_frame(matrix: pd.DataFrame | np.ndarray, name: str) -> pd.DataFrame:
    if isinstance(matrix, pd.DataFrame):
        frame = matrix.astype(float)
    else:
        array = np.asarray(matrix, dtype=float)
        if array.ndim != 2:
            raise DimensionError(f"{name} must be a 2D matrix.")
        frame = pd.DataFrame(array)

    n_rows, n_cols = frame.shape
    if n_rows != n_cols or n_rows < 1:
        raise DimensionError(f"{name} must be a non-empty square matrix, got {frame.shape}.")
    return frame


def _format_matrix(matrix: np.ndarray, labels: Sequence) -> pd.DataFrame:
    """Return a symmetric DataFrame preserving asset labels."""

    sym = 0.5 * (matrix + matrix.T)
    return pd.DataFrame(sym, index=labels, columns=labels)


def _warn_if_ill_conditioned(matrix: np.ndarray, threshold: float = COND_WARNING_THRESHOLD) -> None:
    """Emit warnings for poorly conditioned matrices."""

    try:
        cond_number = np.linalg.cond(matrix)
    except LinAlgError:
        warnings.warn("Covariance matrix appears singular.", RuntimeWarning, stacklevel=3)
        return

    if not np.isfinite(cond_number):
        warnings.warn("Covariance matrix conditioning is not finite.", RuntimeWarning, stacklevel=3)
        return

    if cond_number > threshold:
        warnings.warn(
            f"Covariance matrix is poorly conditioned (cond > {threshold:.1e}).",
            RuntimeWarning,
            stacklevel=3,
        )


def validate_intensity(intensity: float) -> float:
    """Return ``intensity`` as a float, failing unless it lies in ``[0, 1]``."""

    if isinstance(intensity, bool) or not isinstance(intensity, Real):
        raise InvalidParameterError(f"Shrinkage intensity must be a real number, got {intensity!r}.")
    value = float(intensity)
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise InvalidParameterError(f"Shrinkage intensity must lie in [0, 1], got {value}.")
    return value


def sample_cov(returns: ArrayOrFrame) -> pd.DataFrame:
    """Unbiased sample covariance ``Xc^T Xc / (T - 1)`` of column-centred returns.

    The matrix may be singular when ``N >= T``; it is returned unchanged and a
    ``RuntimeWarning`` flags the conditioning.
    """

    clean = _ensure_dataframe(returns, min_obs=2)
    values = clean.to_numpy(dtype=float)
    centred = values - values.mean(axis=0, keepdims=True)
    n_samples = centred.shape[0]

    cov = (centred.T @ centred) / float(n_samples - 1)
    _warn_if_ill_conditioned(cov)
    logger.debug("Sample covariance computed (T=%d, N=%d)", n_samples, centred.shape[1])
    return _format_matrix(cov, clean.columns)


def shrinkage_target(sample: pd.DataFrame | np.ndarray) -> pd.DataFrame:
    """Isotropic target ``mean(diag(S)) * I`` preserving total variance.

    Raises :class:`NumericalError` when every asset has zero variance, since
    the target would then be the zero matrix.
    """

    frame = _as_square_frame(sample, "sample covariance")
    diag = np.diag(frame.to_numpy())
    mu = float(np.mean(diag))
    if not math.isfinite(mu) or mu <= 0.0:
        raise NumericalError(
            "Degenerate shrinkage target: all assets have zero (or non-finite) variance."
        )
    n_assets = frame.shape[0]
    return pd.DataFrame(np.eye(n_assets) * mu, index=frame.index, columns=frame.columns)


def shrink_covariance(sample: pd.DataFrame | np.ndarray, intensity: float) -> pd.DataFrame:
    """Blend ``(1 - intensity) * S + intensity * F`` with the isotropic target ``F``.

    ``intensity = 0`` returns ``S`` itself (possibly singular); ``intensity =
    1`` returns the target.  Any positive intensity yields a positive definite
    matrix because ``F`` is positive definite and ``S`` is PSD.
    """

    lam = validate_intensity(intensity)
    frame = _as_square_frame(sample, "sample covariance")
    target = shrinkage_target(frame)

    shrunk = (1.0 - lam) * frame.to_numpy() + lam * target.to_numpy()
    result = _format_matrix(shrunk, frame.columns)
    if lam < 1.0:
        _warn_if_ill_conditioned(result.to_numpy())
    logger.debug("Shrunk covariance with intensity %.4f (N=%d)", lam, frame.shape[0])
    return result


def shrunk_cov(returns: ArrayOrFrame, intensity: float) -> pd.DataFrame:
    """Shrunk covariance of ``returns`` for a caller-supplied intensity."""

    lam = validate_intensity(intensity)
    with warnings.catch_warnings():
        if lam > 0.0:
            # The raw sample matrix is allowed to be singular once shrinkage repairs it.
            warnings.simplefilter("ignore", RuntimeWarning)
        sample = sample_cov(returns)
    return shrink_covariance(sample, lam)


def ledoit_wolf_intensity(returns: ArrayOrFrame) -> float:
    """Closed-form Ledoit-Wolf optimal intensity for the scaled-identity target.

    With ``S = Xc^T Xc / T`` and ``F = mean(diag(S)) * I``::

        alpha = ||S - F||_F^2
        beta  = (1 / T^2) * sum_t ||x_t x_t^T - S||_F^2
        intensity = clip(beta / alpha, 0, 1)

    Returns ``0.0`` when the sample covariance already equals the target.
    Raises :class:`NumericalError` when every asset has zero variance.
    """

    clean = _ensure_dataframe(returns, min_obs=2)
    values = clean.to_numpy(dtype=float)
    values = values - values.mean(axis=0, keepdims=True)

    n_samples, n_assets = values.shape
    emp_cov = (values.T @ values) / float(n_samples)
    mu = np.trace(emp_cov) / n_assets
    if not math.isfinite(mu) or mu <= 0.0:
        raise NumericalError(
            "Degenerate shrinkage target: all assets have zero (or non-finite) variance."
        )
    target = np.eye(n_assets) * mu

    alpha = np.linalg.norm(emp_cov - target, ord="fro") ** 2
    if alpha <= 0:
        return 0.0

    beta = 0.0
    for row in values:
        outer = np.outer(row, row)
        beta += np.linalg.norm(outer - emp_cov, ord="fro") ** 2
    beta /= n_samples**2
    return float(np.clip(beta / alpha, 0.0, 1.0))


def ledoit_wolf_shrinkage(returns: ArrayOrFrame) -> tuple[pd.DataFrame, float]:
    """Shrunk covariance with the data-driven Ledoit-Wolf intensity.

    Returns
    -------
    (covariance, intensity)
        Labelled shrunk covariance and the intensity that produced it.
    """

    intensity = ledoit_wolf_intensity(returns)
    logger.info("Ledoit-Wolf optimal shrinkage intensity: %.4f", intensity)
    return shrunk_cov(returns, intensity), intensity
