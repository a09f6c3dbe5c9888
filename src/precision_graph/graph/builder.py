"""Edge list and sector colouring from a thresholded precision matrix.

Only the strict upper triangle is scanned, so each unordered pair appears at
most once and no vertex is ever paired with itself, whatever the symmetric
nonzero pattern of the input.  Edges are emitted in ascending row, then
ascending column order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Hashable, Mapping, Sequence

import numpy as np
import pandas as pd
from matplotlib import colormaps
from matplotlib.colors import to_hex

from precision_graph.config.constants import (
    COLUMN_SOURCE,
    COLUMN_TARGET,
    PALETTE_CONTINUOUS,
    PALETTE_QUALITATIVE,
)
from precision_graph.errors import DimensionError, InvalidParameterError

__all__ = [
    "Edge",
    "NetworkGraph",
    "build_graph",
    "edge_list",
    "sector_palette",
    "used_vertices",
    "vertex_colors",
]

logger = logging.getLogger(__name__)

Edge = tuple[Hashable, Hashable]


@dataclass(frozen=True)
class NetworkGraph:
    """Undirected simple graph derived from a thresholded matrix.

    Attributes
    ----------
    edges : tuple
        ``(label_i, label_j)`` pairs with ``i < j`` in matrix order.
    colors : dict or None
        ``label -> hex colour`` for vertices appearing in ``edges``; ``None``
        when no sector assignment was supplied.
    vertices : tuple
        Labels appearing in at least one edge, in first-appearance order.
    """

    edges: tuple[Edge, ...]
    colors: dict[Hashable, str] | None = None
    vertices: tuple[Hashable, ...] = field(default=())

    @property
    def n_edges(self) -> int:
        return len(self.edges)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.edges), columns=[COLUMN_SOURCE, COLUMN_TARGET])


def _matrix_and_labels(
    matrix: pd.DataFrame | np.ndarray,
    labels: Sequence[Hashable] | None,
) -> tuple[np.ndarray, list[Hashable]]:
    if isinstance(matrix, pd.DataFrame):
        array = matrix.to_numpy(dtype=float)
        default_labels = list(matrix.columns)
    else:
        array = np.asarray(matrix, dtype=float)
        default_labels = list(range(array.shape[0])) if array.ndim == 2 else []

    if array.ndim != 2 or array.shape[0] != array.shape[1]:
        raise DimensionError(f"matrix must be square, got shape {array.shape}.")

    resolved = list(labels) if labels is not None else default_labels
    if len(resolved) != array.shape[0]:
        raise DimensionError(
            f"Expected {array.shape[0]} vertex labels, got {len(resolved)}."
        )
    if len(set(resolved)) != len(resolved):
        raise InvalidParameterError("Vertex labels must be unique.")
    return array, resolved


def edge_list(
    matrix: pd.DataFrame | np.ndarray,
    labels: Sequence[Hashable] | None = None,
) -> tuple[Edge, ...]:
    """Pairs ``(labels[i], labels[j])``, ``i < j``, whose matrix entry is nonzero."""

    array, resolved = _matrix_and_labels(matrix, labels)
    rows, cols = np.triu_indices(array.shape[0], k=1)
    mask = array[rows, cols] != 0
    return tuple((resolved[i], resolved[j]) for i, j in zip(rows[mask], cols[mask]))


def used_vertices(edges: Sequence[Edge]) -> list[Hashable]:
    """Labels appearing in any edge, in first-appearance order."""

    seen: dict[Hashable, None] = {}
    for source, target in edges:
        seen.setdefault(source, None)
        seen.setdefault(target, None)
    return list(seen)


def sector_palette(n: int) -> list[str]:
    """``n`` distinct hex colours.

    Up to ten colours come from the qualitative ``tab10`` colormap; larger
    palettes sample the cyclic ``hsv`` colormap at evenly spaced points.
    """

    if n < 0:
        raise InvalidParameterError("Palette size must be non-negative.")
    if n == 0:
        return []
    qualitative = colormaps[PALETTE_QUALITATIVE]
    if n <= len(qualitative.colors):
        return [to_hex(color) for color in qualitative.colors[:n]]

    cmap = colormaps[PALETTE_CONTINUOUS].resampled(max(n, 256))
    return [to_hex(cmap(i / n)) for i in range(n)]


def vertex_colors(
    edges: Sequence[Edge],
    sectors: Mapping[Hashable, Hashable] | None,
) -> dict[Hashable, str] | None:
    """Colour each vertex in ``edges`` by its sector.

    Returns ``None`` when ``sectors`` is ``None``.  The palette holds one
    colour per distinct sector present among the used vertices; sectors are
    ordered by their string form so colours are reproducible.
    """

    if sectors is None:
        return None

    vertices = used_vertices(edges)
    missing = [vertex for vertex in vertices if vertex not in sectors]
    if missing:
        raise InvalidParameterError(
            f"Sector assignment missing for vertices: {', '.join(map(str, missing))}"
        )

    present = sorted({sectors[vertex] for vertex in vertices}, key=str)
    palette = dict(zip(present, sector_palette(len(present))))
    return {vertex: palette[sectors[vertex]] for vertex in vertices}


def build_graph(
    matrix: pd.DataFrame | np.ndarray,
    labels: Sequence[Hashable] | None = None,
    sectors: Mapping[Hashable, Hashable] | None = None,
) -> NetworkGraph:
    """Edge list plus optional vertex colour map for a thresholded matrix."""

    edges = edge_list(matrix, labels)
    vertices = used_vertices(edges)
    colors = vertex_colors(edges, sectors)
    logger.debug("Graph built: %d edges over %d vertices", len(edges), len(vertices))
    return NetworkGraph(edges=edges, colors=colors, vertices=tuple(vertices))
