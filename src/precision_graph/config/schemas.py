"""Pydantic schemas for configuration validation.

This module defines typed configuration schemas using Pydantic v2 for:
- Single network builds (inputs, shrinkage, threshold quantile, outputs)
- Parameter sweeps over (shrinkage, quantile) grids

All YAML configuration files in configs/ should validate against these schemas.
"""

from __future__ import annotations

import math
from typing import Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import DEFAULT_QUANTILE, DEFAULT_SHRINKAGE

__all__ = ["NetworkConfig", "SweepConfig"]


def _check_unit_interval(value: float, name: str) -> float:
    value = float(value)
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must lie in [0, 1], got {value}")
    return value


class NetworkConfig(BaseModel):
    """Configuration for a single precision-graph build.

    Attributes
    ----------
    returns_file : Optional[str]
        Returns matrix (rows = dates, columns = assets). Parquet, csv, pickle
        or feather.
    prices_file : Optional[str]
        Price history converted to log-returns before estimation. Exactly one
        of ``returns_file`` / ``prices_file`` must be given.
    sectors_file : Optional[str]
        Two-column csv (``symbol,sector``) used to colour vertices.
    shrinkage : float or "auto"
        Shrinkage intensity in [0, 1]; ``"auto"`` selects the Ledoit-Wolf
        optimal intensity from the data.
    quantile : float
        Threshold quantile of |precision| in [0, 1].
    window : Optional[int]
        Keep only the trailing ``window`` observations.
    output_dir : str
        Directory receiving ``edges.csv``, ``colors.json`` and ``summary.json``.
    """

    returns_file: str | None = Field(default=None, description="Returns matrix file")
    prices_file: str | None = Field(default=None, description="Price history file")
    sectors_file: str | None = Field(default=None, description="symbol,sector csv")
    shrinkage: Union[float, Literal["auto"]] = Field(
        default=DEFAULT_SHRINKAGE, description="Shrinkage intensity or 'auto'"
    )
    quantile: float = Field(
        default=DEFAULT_QUANTILE, ge=0, le=1, description="Threshold quantile"
    )
    window: int | None = Field(
        default=None, ge=2, description="Trailing observations to keep"
    )
    output_dir: str = Field(
        default="reports/network", description="Output directory for artefacts"
    )

    @field_validator("shrinkage", mode="before")
    @classmethod
    def validate_shrinkage(cls, v: object) -> object:
        """Accept 'auto' (case-insensitive) or a number in [0, 1]."""
        if isinstance(v, str) and v.strip().lower() == "auto":
            return "auto"
        if isinstance(v, bool):
            raise ValueError("shrinkage must be a number or 'auto'")
        try:
            numeric = float(v)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise ValueError(f"shrinkage must be a number or 'auto', got: {v!r}")
        return _check_unit_interval(numeric, "shrinkage")

    @model_validator(mode="after")
    def validate_single_source(self) -> "NetworkConfig":
        """Ensure exactly one of returns_file / prices_file is provided."""
        if (self.returns_file is None) == (self.prices_file is None):
            raise ValueError("Provide exactly one of returns_file or prices_file")
        return self

    @property
    def auto_shrinkage(self) -> bool:
        return self.shrinkage == "auto"


class SweepConfig(BaseModel):
    """Grid of (shrinkage, quantile) pairs evaluated against one returns file.

    Attributes
    ----------
    returns_file : str
        Returns matrix file
    intensities : List[float]
        Shrinkage intensities in [0, 1]
    quantiles : List[float]
        Threshold quantiles in [0, 1]
    max_workers : Optional[int]
        Thread pool size; ``None`` or 1 evaluates sequentially
    output_file : Optional[str]
        CSV receiving the sweep summary
    """

    returns_file: str = Field(description="Returns matrix file")
    intensities: list[float] = Field(min_length=1, description="Shrinkage grid")
    quantiles: list[float] = Field(min_length=1, description="Quantile grid")
    max_workers: int | None = Field(default=None, gt=0, description="Worker threads")
    output_file: str | None = Field(default=None, description="Summary csv path")

    @field_validator("intensities", "quantiles")
    @classmethod
    def validate_grid(cls, v: list[float], info) -> list[float]:
        """Ensure every grid value lies in [0, 1]."""
        return [_check_unit_interval(value, info.field_name) for value in v]
