"""Utility functions."""

from .helpers import Clock, timestamp_ms, finite_or_none, is_positive_price, mean
from .logging import get_logger, setup_logging

__all__ = [
    "Clock",
    "timestamp_ms",
    "is_positive_price",
    "finite_or_none",
    "mean",
    "get_logger",
    "setup_logging",
]
