"""Facilita import dos estimadores de covariância e precisão."""

from .cov import (
    ledoit_wolf_intensity,
    ledoit_wolf_shrinkage,
    sample_cov,
    shrink_covariance,
    shrinkage_target,
    shrunk_cov,
)
from .precision import partial_correlations, precision_matrix

__all__ = [
    "ledoit_wolf_intensity",
    "ledoit_wolf_shrinkage",
    "partial_correlations",
    "precision_matrix",
    "sample_cov",
    "shrink_covariance",
    "shrinkage_target",
    "shrunk_cov",
]
