"""Quantile-based sparsification of a precision matrix.

The cutoff ``Q`` is the ``q``-quantile of ``|P|`` over *all* ``N * N``
entries, diagonal included.  Entries whose magnitude falls strictly below
``Q`` are zeroed and the rest, including entries equal to ``Q``, are kept
unchanged.  Ties are kept rather than zeroing ``|P_ij| <= Q``: with the
strict rule ``q = 0`` could drop the smallest nonzero entry and ``q = 1``
would empty the matrix.  The zero pattern is symmetric whenever ``P`` is.
Because ``Q`` is non-decreasing in ``q``, raising ``q`` never adds a
nonzero entry.

The default quantile interpolates the empirical CDF linearly between order
statistics (``numpy`` method ``interpolated_inverted_cdf``): for sorted
values ``v_1 <= ... <= v_m`` the position is ``h = m * q`` and the result
``v_k + (h - k) * (v_{k+1} - v_k)`` with ``k = floor(h)``, clamped to
``[v_1, v_m]``.  This is Hyndman-Fan type 4, not the type 7 usually
named for this routine: type 4 is the reading that gives 0.74 for the
0.9-quantile of ``{0.1, 0.2, 0.5, 0.9}``, whereas type 7 gives 0.78.
``method="linear"`` selects type 7 (numpy's default) instead.
"""

from __future__ import annotations

import logging
import math
from numbers import Real
from typing import Iterable

import numpy as np
import pandas as pd

from precision_graph.config.constants import QUANTILE_METHOD
from precision_graph.errors import DimensionError, InvalidParameterError

__all__ = [
    "SUPPORTED_METHODS",
    "interpolated_quantile",
    "magnitude_cutoff",
    "threshold_precision",
    "validate_quantile",
]

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = frozenset({"interpolated_inverted_cdf", "linear"})


def validate_quantile(q: float) -> float:
    """Return ``q`` as a float, failing unless it lies in ``[0, 1]``."""

    if isinstance(q, bool) or not isinstance(q, Real):
        raise InvalidParameterError(f"Threshold quantile must be a real number, got {q!r}.")
    value = float(q)
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise InvalidParameterError(f"Threshold quantile must lie in [0, 1], got {value}.")
    return value


def interpolated_quantile(
    values: Iterable[float] | np.ndarray,
    q: float,
    *,
    method: str = QUANTILE_METHOD,
) -> float:
    """``q``-quantile of ``values`` by linear interpolation between order statistics.

    For ``[0.1, 0.2, 0.5, 0.9]`` and ``q = 0.9`` the default method gives 0.74.
    """

    q = validate_quantile(q)
    if method not in SUPPORTED_METHODS:
        raise InvalidParameterError(
            f"Unsupported quantile method {method!r}; choose one of {sorted(SUPPORTED_METHODS)}."
        )

    array = np.asarray(list(values) if not isinstance(values, np.ndarray) else values, dtype=float)
    array = array.ravel()
    if array.size == 0:
        raise DimensionError("Cannot compute a quantile of an empty set of values.")

    return float(np.quantile(array, q, method=method))


def magnitude_cutoff(
    precision: pd.DataFrame | np.ndarray,
    q: float,
    *,
    method: str = QUANTILE_METHOD,
) -> float:
    """Cutoff ``Q``: the ``q``-quantile of ``|P|`` over every entry, diagonal included."""

    values = np.abs(_square_array(precision))
    return interpolated_quantile(values, q, method=method)


def threshold_precision(
    precision: pd.DataFrame | np.ndarray,
    q: float,
    *,
    method: str = QUANTILE_METHOD,
) -> pd.DataFrame:
    """Zero every entry of ``precision`` whose magnitude is below the ``q`` cutoff.

    Entries with ``|P_ij| >= Q`` are retained unchanged, which keeps every
    nonzero entry at ``q = 0``.

    Raises
    ------
    InvalidParameterError
        If ``q`` lies outside ``[0, 1]``.
    DimensionError
        If ``precision`` is not a non-empty square matrix.
    """

    q = validate_quantile(q)
    array = _square_array(precision)
    cutoff = magnitude_cutoff(array, q, method=method)

    magnitudes = np.abs(array)
    thresholded = np.where(magnitudes >= cutoff, array, 0.0)

    n_assets = array.shape[0]
    off_diag = np.count_nonzero(thresholded) - np.count_nonzero(np.diag(thresholded))
    logger.debug(
        "Threshold q=%.3f cutoff=%.6g kept %d off-diagonal entries (N=%d)",
        q,
        cutoff,
        off_diag,
        n_assets,
    )

    if isinstance(precision, pd.DataFrame):
        return pd.DataFrame(thresholded, index=precision.index, columns=precision.columns)
    return pd.DataFrame(thresholded)


def _square_array(matrix: pd.DataFrame | np.ndarray) -> np.ndarray:
    array = matrix.to_numpy(dtype=float) if isinstance(matrix, pd.DataFrame) else np.asarray(matrix, dtype=float)
    if array.ndim != 2 or array.shape[0] != array.shape[1] or array.shape[0] < 1:
        raise DimensionError(f"precision must be a non-empty square matrix, got shape {array.shape}.")
    return array
