"""Tests for the pydantic configuration schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from precision_graph.config.constants import DEFAULT_QUANTILE, DEFAULT_SHRINKAGE
from precision_graph.config.schemas import NetworkConfig, SweepConfig


class TestNetworkConfig:
    def test_defaults(self):
        config = NetworkConfig(returns_file="returns.csv")
        assert config.shrinkage == DEFAULT_SHRINKAGE
        assert config.quantile == DEFAULT_QUANTILE
        assert config.window is None
        assert not config.auto_shrinkage

    @pytest.mark.parametrize("value", ["auto", "AUTO", " Auto "])
    def test_auto_shrinkage(self, value):
        config = NetworkConfig(returns_file="returns.csv", shrinkage=value)
        assert config.shrinkage == "auto"
        assert config.auto_shrinkage

    def test_numeric_string_shrinkage(self):
        assert NetworkConfig(returns_file="r.csv", shrinkage="0.25").shrinkage == 0.25

    @pytest.mark.parametrize("value", [-0.1, 1.01, "lots", True, float("nan")])
    def test_invalid_shrinkage(self, value):
        with pytest.raises(ValidationError):
            NetworkConfig(returns_file="r.csv", shrinkage=value)

    @pytest.mark.parametrize("value", [-0.5, 1.5])
    def test_invalid_quantile(self, value):
        with pytest.raises(ValidationError):
            NetworkConfig(returns_file="r.csv", quantile=value)

    def test_window_lower_bound(self):
        with pytest.raises(ValidationError):
            NetworkConfig(returns_file="r.csv", window=1)

    def test_requires_exactly_one_source(self):
        with pytest.raises(ValidationError, match="exactly one"):
            NetworkConfig()
        with pytest.raises(ValidationError, match="exactly one"):
            NetworkConfig(returns_file="r.csv", prices_file="p.csv")


class TestSweepConfig:
    def test_valid_grid(self):
        config = SweepConfig(returns_file="r.csv", intensities=[0, 0.5, 1], quantiles=[0.9])
        assert config.intensities == [0.0, 0.5, 1.0]
        assert config.max_workers is None

    def test_empty_grid_rejected(self):
        with pytest.raises(ValidationError):
            SweepConfig(returns_file="r.csv", intensities=[], quantiles=[0.9])

    def test_out_of_range_values_rejected(self):
        with pytest.raises(ValidationError, match="quantiles"):
            SweepConfig(returns_file="r.csv", intensities=[0.1], quantiles=[1.2])

    def test_workers_must_be_positive(self):
        with pytest.raises(ValidationError):
            SweepConfig(returns_file="r.csv", intensities=[0.1], quantiles=[0.5], max_workers=0)
