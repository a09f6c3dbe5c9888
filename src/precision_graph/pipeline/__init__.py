"""Pipeline entry points.

Exposes the pure :func:`recompute` function, the Ledoit-Wolf aware
:func:`estimate_network`, the :class:`NetworkSweep` parameter explorer and
the config-driven runners used by the CLI.
"""

from .network import (
    NetworkResult,
    NetworkSweep,
    estimate_network,
    recompute,
    run_network,
    run_sweep,
)

__all__ = [
    "NetworkResult",
    "NetworkSweep",
    "estimate_network",
    "recompute",
    "run_network",
    "run_sweep",
]
