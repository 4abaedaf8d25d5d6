"""Small numeric and time helpers shared across indicators."""

from __future__ import annotations

import math
import time
from typing import Any, Callable, Iterable

Clock = Callable[[], int]


def timestamp_ms() -> int:
    """Current wall-clock time in milliseconds (UTC epoch)."""
    return int(time.time() * 1000)


def finite_or_none(value: Any) -> float | None:
    """Return ``value`` as a float if it is a real, finite number, else None.

    Booleans are rejected even though ``bool`` subclasses ``int``.
    """
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        return None
    out = float(value)
    if not math.isfinite(out):
        return None
    return out


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean; 0.0 for an empty input."""
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)


def is_positive_price(value: Any) -> bool:
    """True for a real, finite price above zero."""
    price = finite_or_none(value)
    return price is not None and price > 0
