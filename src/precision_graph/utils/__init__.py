"""Small shared helpers (logging, tabular IO)."""

from .data_loading import read_dataframe
from .logging_config import get_logger, log_dict

__all__ = ["get_logger", "log_dict", "read_dataframe"]
