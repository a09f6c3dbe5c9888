"""Input helpers: returns, prices and sector assignments."""

from .returns import compute_log_returns, load_prices, load_returns, load_sectors

__all__ = ["compute_log_returns", "load_prices", "load_returns", "load_sectors"]
