"""Input data types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class Candle:
    """A single OHLCV bar.

    Only ``high``, ``low``, ``close`` and ``volume`` are read by the analytics;
    ``timestamp`` (ms) and ``open`` are carried for callers.
    """

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @classmethod
    def from_any(cls, row: Mapping[str, Any] | Any) -> "Candle":
        """Normalize a dict row, kline object or Candle into a Candle."""
        if isinstance(row, Candle):
            return row

        def _get(key: str) -> Any:
            if isinstance(row, Mapping):
                return row.get(key)
            return getattr(row, key, None)

        high = _get("high")
        low = _get("low")
        close = _get("close")
        if high is None or low is None or close is None:
            raise ValueError(f"candle row is missing high/low/close: {row!r}")

        timestamp = None
        for key in ("timestamp", "time", "open_time", "openTime"):
            timestamp = _get(key)
            if timestamp is not None:
                break

        open_ = _get("open")
        volume = _get("volume")
        return cls(
            timestamp=int(timestamp or 0),
            open=float(open_) if open_ is not None else float(close),
            high=float(high),
            low=float(low),
            close=float(close),
            volume=float(volume or 0.0),
        )


def coerce_candles(rows: Iterable[Mapping[str, Any] | Any] | None) -> list[Candle]:
    """Normalize a sequence of candle-like rows, preserving order."""
    if not rows:
        return []
    return [Candle.from_any(r) for r in rows]

