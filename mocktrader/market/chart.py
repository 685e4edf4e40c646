"""
Chart windowing helpers.

Consumers never draw the whole candle history: they show a window of
`visible_count` candles that can be panned back from the newest candle
by `pan_offset` positions.  These helpers compute that window and clamp
its parameters, plus a bounded buffer for a simple price line.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, TypeVar


T = TypeVar("T")

MIN_VISIBLE = 20
MAX_VISIBLE = 120
PRICE_LINE_LIMIT = 30


@dataclass(frozen=True)
class ChartPoint:
    time_label: str
    price: float


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_visible_count(visible_count: int, min_visible: int = MIN_VISIBLE, max_visible: int = MAX_VISIBLE) -> int:
    return int(clamp(int(visible_count), min_visible, max_visible))


def clamp_pan_offset(pan_offset: int, history_length: int, min_visible: int = MIN_VISIBLE) -> int:
    """Pan can go back at most until `min_visible` candles remain on screen."""
    return int(clamp(int(pan_offset), 0, max(0, history_length - min_visible)))


def visible_window(
    history: Sequence[T],
    visible_count: int,
    pan_offset: int = 0,
    min_visible: int = MIN_VISIBLE,
    max_visible: int = MAX_VISIBLE,
) -> List[T]:
    """Return the slice of `history` a chart should display.

    Parameters
    ----------
    history : sequence
        Candles, oldest first.
    visible_count : int
        Requested number of candles, clamped to
        ``[min_visible, max_visible]``.
    pan_offset : int
        How many candles to step back from the newest one, clamped to
        ``[0, max(0, len(history) - min_visible)]``.

    Returns
    -------
    list
        ``history[max(0, end - visible_count):end]`` with
        ``end = max(0, len(history) - pan_offset)``.
    """
    count = clamp_visible_count(visible_count, min_visible, max_visible)
    offset = clamp_pan_offset(pan_offset, len(history), min_visible)
    end = max(0, len(history) - offset)
    start = max(0, end - count)
    return list(history[start:end])


def add_chart_point(
    points: Sequence[ChartPoint],
    price: float,
    time_label: str,
    limit: int = PRICE_LINE_LIMIT,
) -> List[ChartPoint]:
    """Append a price point and keep only the newest `limit` points."""
    updated = list(points) + [ChartPoint(time_label=time_label, price=price)]
    return updated[-limit:]
