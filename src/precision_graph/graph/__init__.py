"""Thresholding and graph construction from precision matrices."""

from .builder import (
    NetworkGraph,
    build_graph,
    edge_list,
    sector_palette,
    used_vertices,
    vertex_colors,
)
from .threshold import interpolated_quantile, magnitude_cutoff, threshold_precision

__all__ = [
    "NetworkGraph",
    "build_graph",
    "edge_list",
    "interpolated_quantile",
    "magnitude_cutoff",
    "sector_palette",
    "threshold_precision",
    "used_vertices",
    "vertex_colors",
]
