"""Typed failures raised by the estimation pipeline.

Every stage fails fast with one of the classes below; nothing is retried or
silently corrected. ``DimensionError`` and ``InvalidParameterError`` also
derive from :class:`ValueError` so callers validating inputs at the boundary
can keep catching the builtin.
"""

from __future__ import annotations

from numpy.linalg import LinAlgError

__all__ = [
    "PrecisionGraphError",
    "DimensionError",
    "InvalidParameterError",
    "NumericalError",
    "SingularMatrixError",
]


class PrecisionGraphError(Exception):
    """Base class for all pipeline errors."""


class DimensionError(PrecisionGraphError, ValueError):
    """Malformed matrix shape (T < 2, N < 1, non-square or label mismatch)."""


class InvalidParameterError(PrecisionGraphError, ValueError):
    """Shrinkage intensity or threshold quantile outside ``[0, 1]``."""


class NumericalError(PrecisionGraphError, ArithmeticError):
    """Degenerate numerical input, e.g. every asset with zero variance."""


class SingularMatrixError(NumericalError, LinAlgError):
    """Covariance is not positive definite after the requested shrinkage.

    Reached with zero shrinkage on rank-deficient data, or with an intensity
    small enough to be indistinguishable from zero in floating point; retry
    the whole pipeline with a larger intensity.
    """
