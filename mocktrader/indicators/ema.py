"""
Exponential moving average.

Seeded with the first value and smoothed with ``k = 2 / (period + 1)``,
which is pandas' ``ewm(span=period, adjust=False)``.
"""

from __future__ import annotations

from typing import Iterable, List
import pandas as pd


def ema_series(prices: pd.Series, period: int = 10) -> pd.Series:
    """EMA of `prices`, each value rounded to 2 decimals."""
    if period < 1:
        raise ValueError(f"EMA period must be at least 1, got {period}")
    if prices.empty:
        return prices.astype(float)
    return prices.astype(float).ewm(span=period, adjust=False).mean().round(2)


def calculate_ema(prices: Iterable[float], period: int = 10) -> List[float]:
    """List version of `ema_series` for plain sequences of prices."""
    series = pd.Series(list(prices), dtype=float)
    return ema_series(series, period).tolist()
