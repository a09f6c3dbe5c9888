"""Pipeline: returns -> shrunk covariance -> precision -> threshold -> graph.

Every stage is a pure function, so :func:`recompute` can be re-run cheaply
whenever the shrinkage intensity or the threshold quantile changes.  The
sample covariance does not depend on either parameter; :class:`NetworkSweep`
computes it once, freezes it and reuses it for every ``(intensity, quantile)``
pair of a sweep.
"""

from __future__ import annotations

import json
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import cached_property
from itertools import product
from pathlib import Path
from typing import Any, Hashable, Iterable, Literal, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from precision_graph.config import NetworkConfig, Settings, SweepConfig
from precision_graph.config.constants import (
    COLUMN_PARTIAL_CORR,
    COLUMN_PRECISION,
    COLUMN_SOURCE,
    COLUMN_TARGET,
    QUANTILE_METHOD,
)
from precision_graph.data.returns import (
    compute_log_returns,
    load_prices,
    load_returns,
    load_sectors,
)
from precision_graph.errors import DimensionError, InvalidParameterError, SingularMatrixError
from precision_graph.estimators.cov import (
    ledoit_wolf_intensity,
    sample_cov,
    shrink_covariance,
    validate_intensity,
)
from precision_graph.estimators.precision import partial_correlations, precision_matrix
from precision_graph.graph.builder import Edge, NetworkGraph, build_graph
from precision_graph.graph.threshold import magnitude_cutoff, threshold_precision, validate_quantile
from precision_graph.utils.logging_config import get_logger, log_dict

__all__ = [
    "NetworkResult",
    "NetworkSweep",
    "estimate_network",
    "recompute",
    "run_network",
    "run_sweep",
]

logger = get_logger(__name__)

Intensity = Union[float, Literal["auto"]]

SUMMARY_COLUMNS = [
    "intensity",
    "quantile",
    "status",
    "cutoff",
    "n_edges",
    "n_vertices",
    "density",
]


@dataclass(frozen=True)
class NetworkResult:
    """Artefacts of one pipeline invocation."""

    graph: NetworkGraph
    intensity: float
    quantile: float
    cutoff: float
    covariance: pd.DataFrame
    precision: pd.DataFrame
    thresholded: pd.DataFrame

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self.graph.edges

    @property
    def colors(self) -> dict[Hashable, str] | None:
        return self.graph.colors

    @property
    def n_assets(self) -> int:
        return int(self.precision.shape[0])

    @property
    def density(self) -> float:
        n_pairs = self.n_assets * (self.n_assets - 1) // 2
        return len(self.edges) / n_pairs if n_pairs else 0.0

    def edge_table(self) -> pd.DataFrame:
        """Edges with their precision entry and partial correlation."""

        partial = partial_correlations(self.precision)
        rows = [
            {
                COLUMN_SOURCE: source,
                COLUMN_TARGET: target,
                COLUMN_PRECISION: float(self.precision.at[source, target]),
                COLUMN_PARTIAL_CORR: float(partial.at[source, target]),
            }
            for source, target in self.edges
        ]
        return pd.DataFrame(
            rows, columns=[COLUMN_SOURCE, COLUMN_TARGET, COLUMN_PRECISION, COLUMN_PARTIAL_CORR]
        )

    def summary(self) -> dict[str, Any]:
        return {
            "intensity": self.intensity,
            "quantile": self.quantile,
            "status": "completed",
            "cutoff": self.cutoff,
            "n_edges": len(self.edges),
            "n_vertices": len(self.graph.vertices),
            "density": self.density,
        }


def _relabel(frame: pd.DataFrame, labels: Sequence[Hashable] | None) -> pd.DataFrame:
    if labels is None:
        return frame
    labels = list(labels)
    if len(labels) != frame.shape[0]:
        raise DimensionError(f"Expected {frame.shape[0]} asset labels, got {len(labels)}.")
    if len(set(labels)) != len(labels):
        raise InvalidParameterError("Asset labels must be unique.")
    return pd.DataFrame(frame.to_numpy(), index=labels, columns=labels)


def _from_sample(
    sample: pd.DataFrame,
    intensity: float,
    quantile: float,
    sectors: Mapping[Hashable, Hashable] | None,
    method: str,
) -> NetworkResult:
    covariance = shrink_covariance(sample, intensity)
    precision = precision_matrix(covariance)
    thresholded = threshold_precision(precision, quantile, method=method)
    cutoff = magnitude_cutoff(precision, quantile, method=method)
    graph = build_graph(thresholded, sectors=sectors)
    return NetworkResult(
        graph=graph,
        intensity=intensity,
        quantile=quantile,
        cutoff=cutoff,
        covariance=covariance,
        precision=precision,
        thresholded=thresholded,
    )


def recompute(
    returns: pd.DataFrame | np.ndarray,
    intensity: float,
    quantile: float,
    *,
    labels: Sequence[Hashable] | None = None,
    sectors: Mapping[Hashable, Hashable] | None = None,
    method: str = QUANTILE_METHOD,
) -> NetworkResult:
    """Run the whole pipeline for one ``(intensity, quantile)`` pair.

    Parameters
    ----------
    returns
        T x N returns matrix; columns are assets in a fixed order.
    intensity
        Shrinkage intensity in ``[0, 1]``.
    quantile
        Threshold quantile in ``[0, 1]``.
    labels
        Vertex labels, one per column. Defaults to the frame's columns.
    sectors
        Optional ``label -> sector`` mapping used to colour vertices.

    Raises
    ------
    DimensionError, InvalidParameterError, NumericalError, SingularMatrixError
        Propagated unchanged from the failing stage.
    """

    intensity = validate_intensity(intensity)
    quantile = validate_quantile(quantile)
    sample = _relabel(sample_cov(returns), labels)
    return _from_sample(sample, intensity, quantile, sectors, method)


def estimate_network(
    returns: pd.DataFrame | np.ndarray,
    *,
    intensity: Intensity = "auto",
    quantile: float,
    labels: Sequence[Hashable] | None = None,
    sectors: Mapping[Hashable, Hashable] | None = None,
    method: str = QUANTILE_METHOD,
) -> NetworkResult:
    """Like :func:`recompute`, but ``intensity="auto"`` derives it via Ledoit-Wolf."""

    if isinstance(intensity, str):
        if intensity.strip().lower() != "auto":
            raise InvalidParameterError(f"Unknown intensity {intensity!r}; use a number or 'auto'.")
        intensity = ledoit_wolf_intensity(returns)
        logger.info("Using Ledoit-Wolf intensity %.4f", intensity)
    return recompute(
        returns, intensity, quantile, labels=labels, sectors=sectors, method=method
    )


class NetworkSweep:
    """Re-run the pipeline over many parameters sharing one sample covariance.

    The sample covariance is computed at construction and stored read-only,
    so concurrent :meth:`recompute` calls never observe a mutation.  The
    Ledoit-Wolf intensity is only computed once an ``"auto"`` point asks for it.

    Examples
    --------
    >>> sweep = NetworkSweep(returns, sectors={"AAPL": "Tech", "XOM": "Energy"})
    >>> result = sweep.recompute(0.2, 0.9)
    >>> table = sweep.grid([0.1, 0.3], [0.8, 0.9])
    """

    def __init__(
        self,
        returns: pd.DataFrame | np.ndarray,
        *,
        labels: Sequence[Hashable] | None = None,
        sectors: Mapping[Hashable, Hashable] | None = None,
        method: str = QUANTILE_METHOD,
    ) -> None:
        sample = _relabel(sample_cov(returns), labels)
        values = sample.to_numpy(dtype=float, copy=True)
        values.setflags(write=False)

        self._values = values
        self._labels = tuple(sample.columns)
        self._sectors = dict(sectors) if sectors is not None else None
        self._method = method
        self._returns = pd.DataFrame(returns).copy()
        logger.info("Sweep initialised (N=%d)", len(self._labels))

    @property
    def labels(self) -> tuple[Hashable, ...]:
        return self._labels

    @cached_property
    def auto_intensity(self) -> float:
        """Ledoit-Wolf intensity, computed on first use."""

        intensity = ledoit_wolf_intensity(self._returns)
        logger.info("Ledoit-Wolf intensity for sweep: %.4f", intensity)
        return intensity

    @property
    def sample_covariance(self) -> pd.DataFrame:
        return pd.DataFrame(self._values.copy(), index=self._labels, columns=self._labels)

    def _resolve_intensity(self, intensity: Intensity) -> float:
        if isinstance(intensity, str):
            if intensity.strip().lower() != "auto":
                raise InvalidParameterError(
                    f"Unknown intensity {intensity!r}; use a number or 'auto'."
                )
            return self.auto_intensity
        return validate_intensity(intensity)

    def recompute(self, intensity: Intensity, quantile: float) -> NetworkResult:
        """Edges and colours for one ``(intensity, quantile)`` pair."""

        lam = self._resolve_intensity(intensity)
        q = validate_quantile(quantile)
        return _from_sample(self.sample_covariance, lam, q, self._sectors, self._method)

    def _grid_point(self, intensity: float, quantile: float) -> dict[str, Any]:
        try:
            return self.recompute(intensity, quantile).summary()
        except SingularMatrixError:
            logger.warning(
                "Singular covariance at intensity=%.4f; grid point skipped", intensity
            )
            return {
                "intensity": float(intensity),
                "quantile": float(quantile),
                "status": "singular",
                "cutoff": math.nan,
                "n_edges": 0,
                "n_vertices": 0,
                "density": math.nan,
            }

    def grid(
        self,
        intensities: Iterable[Intensity],
        quantiles: Iterable[float],
        *,
        max_workers: int | None = None,
    ) -> pd.DataFrame:
        """Summary table over the Cartesian grid ``intensities x quantiles``.

        Rows follow grid order (intensity-major).  Singular grid points are
        recorded with ``status="singular"``; any other error propagates.
        """

        points = [
            (self._resolve_intensity(lam), validate_quantile(q))
            for lam, q in product(list(intensities), list(quantiles))
        ]

        if max_workers is None or max_workers <= 1:
            rows = [self._grid_point(lam, q) for lam, q in points]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                rows = list(executor.map(lambda point: self._grid_point(*point), points))

        logger.info("Sweep evaluated %d grid points", len(rows))
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def _load_config_returns(config: NetworkConfig, settings: Settings) -> pd.DataFrame:
    if config.returns_file is not None:
        return load_returns(settings.resolve(config.returns_file), window=config.window)

    prices = load_prices(settings.resolve(config.prices_file))
    returns = compute_log_returns(prices)
    if config.window is not None:
        returns = returns.tail(config.window)
    return returns


def _write_outputs(result: NetworkResult, output_dir: Path) -> dict[str, str]:
    output_dir.mkdir(parents=True, exist_ok=True)
    paths: dict[str, str] = {}

    edges_path = output_dir / "edges.csv"
    result.edge_table().to_csv(edges_path, index=False)
    paths["edges_output"] = str(edges_path)

    if result.colors is not None:
        colors_path = output_dir / "colors.json"
        colors = {str(label): color for label, color in result.colors.items()}
        colors_path.write_text(json.dumps(colors, indent=2, sort_keys=True), encoding="utf-8")
        paths["colors_output"] = str(colors_path)

    summary_path = output_dir / "summary.json"
    paths["summary_output"] = str(summary_path)
    summary_path.write_text(json.dumps(result.summary(), indent=2), encoding="utf-8")
    return paths


def run_network(config: NetworkConfig, *, settings: Settings | None = None) -> dict[str, Any]:
    """Load inputs described by ``config``, build the graph and save artefacts.

    Returns
    -------
    dict
        Summary (intensity, quantile, cutoff, edge/vertex counts, density)
        plus the paths written.

    Raises
    ------
    FileNotFoundError
        If an input file doesn't exist.
    SingularMatrixError
        If the covariance is singular at the requested intensity.
    """

    settings = settings or Settings.from_env()
    returns = _load_config_returns(config, settings)
    sectors = (
        load_sectors(settings.resolve(config.sectors_file))
        if config.sectors_file is not None
        else None
    )

    result = estimate_network(
        returns,
        intensity=config.shrinkage,
        quantile=config.quantile,
        sectors=sectors,
    )
    log_dict(logger, "Network built", result.summary())

    payload = result.summary()
    payload["n_assets"] = result.n_assets
    payload["auto_shrinkage"] = config.auto_shrinkage
    payload.update(_write_outputs(result, settings.resolve(config.output_dir)))
    return payload


def run_sweep(config: SweepConfig, *, settings: Settings | None = None) -> pd.DataFrame:
    """Evaluate the configured grid and optionally save the summary csv."""

    settings = settings or Settings.from_env()
    returns = load_returns(settings.resolve(config.returns_file))
    sweep = NetworkSweep(returns)
    table = sweep.grid(config.intensities, config.quantiles, max_workers=config.max_workers)

    if config.output_file is not None:
        output_path = settings.resolve(config.output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(output_path, index=False)
        logger.info("Saved sweep summary to %s", output_path)
    return table
