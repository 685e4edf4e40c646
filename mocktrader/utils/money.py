"""
Money helpers.

Every monetary value committed to the ledger is rounded to two decimal
places here, which keeps floating point drift from accumulating over a
long session of trades.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Optional


def round_money(value: float) -> float:
    """Round to 2 decimal places, normalising ``-0.0`` to ``0.0``."""
    rounded = round(float(value), 2)
    return rounded + 0.0


def is_positive_finite(value: Any) -> bool:
    """Return `True` if `value` is a real number that is finite and > 0.

    Strings, booleans and other non-numeric values are rejected even when
    `float()` could parse them.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value) and value > 0


def optional_price(value: Any) -> Optional[float]:
    """Coerce a stop-loss or target input to a float, or `None` if unset.

    Empty strings, `None` and anything that is not a finite number are
    treated as "not set".
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def format_inr(amount: float) -> str:
    """Format an amount with Indian digit grouping, e.g. ``1,23,456.78``.

    Trailing zeros in the fraction are dropped, at most two decimals are
    shown.
    """
    number = round(float(amount or 0), 2)
    sign = "-" if number < 0 else ""
    whole, _, frac = f"{abs(number):.2f}".partition(".")
    frac = frac.rstrip("0")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{frac}" if frac else f"{sign}{whole}"
