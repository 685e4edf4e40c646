"""
Clock and time label utilities.

The simulator stamps candles and orders with wall-clock time in the
configured timezone.  All of that goes through this module so tests can
swap in a fixed clock and get repeatable labels and order ids.
"""

from __future__ import annotations

from typing import Callable, Optional, Union
import pandas as pd


Clock = Callable[[], pd.Timestamp]


def system_clock(tz_name: str = "Asia/Kolkata") -> Clock:
    """Return a clock reading the current time in `tz_name`."""

    def _now() -> pd.Timestamp:
        return pd.Timestamp.now(tz=tz_name)

    return _now


class ManualClock:
    """Clock that only moves when told to.

    Used for simulated sessions that run faster than real time, and for
    tests that need repeatable timestamps.
    """

    def __init__(self, start: Union[str, pd.Timestamp] = "2024-01-01 09:15:00", tz_name: str = "Asia/Kolkata") -> None:
        ts = pd.Timestamp(start)
        self._ts = ts.tz_localize(tz_name) if ts.tzinfo is None else ts.tz_convert(tz_name)

    def __call__(self) -> pd.Timestamp:
        return self._ts

    def advance(self, seconds: float) -> pd.Timestamp:
        self._ts = self._ts + pd.Timedelta(seconds=seconds)
        return self._ts


def to_timezone(ts: pd.Timestamp, tz_name: str) -> pd.Timestamp:
    """Convert a `pandas.Timestamp` to the specified timezone.

    If the timestamp is naive, it is assumed to be in UTC before
    conversion.  If it already has a timezone, it will be converted.
    """
    if not isinstance(ts, pd.Timestamp):
        ts = pd.Timestamp(ts)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.tz_convert(tz_name)


def time_label(ts: Optional[pd.Timestamp] = None, tz_name: Optional[str] = None) -> str:
    """Format a timestamp as an ``HH:MM:SS`` label.

    Parameters
    ----------
    ts : pandas.Timestamp, optional
        Timestamp to format.  Defaults to now.
    tz_name : str, optional
        Timezone to render the label in.  When omitted the timestamp is
        formatted as-is.
    """
    if ts is None:
        ts = pd.Timestamp.now(tz=tz_name or "UTC")
    elif tz_name is not None:
        ts = to_timezone(ts, tz_name)
    return ts.strftime("%H:%M:%S")


def epoch_millis(ts: pd.Timestamp) -> int:
    """Milliseconds since the UNIX epoch for `ts`."""
    return int(ts.value // 1_000_000)
