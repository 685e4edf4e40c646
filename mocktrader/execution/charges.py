"""
Transaction cost model.

An approximation of Indian equity intraday charges: brokerage capped
per order, securities transaction tax on sells, exchange and SEBI
turnover fees, stamp duty on buys, GST on brokerage and exchange fees,
and a flat depository charge on sells.  The schedule is illustrative;
it is evaluated exactly as written and never "corrected".
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config.schema import FeeConfig


BUY = "BUY"
SELL = "SELL"
SIDES = (BUY, SELL)


@dataclass(frozen=True)
class Charges:
    """Cost breakdown of a single trade.  `total` is unrounded."""
    turnover: float
    brokerage: float
    stt: float
    exchange: float
    sebi: float
    stamp: float
    gst: float
    dp: float
    total: float


DEFAULT_FEES = FeeConfig()


def compute_charges(side: str, quantity: float, price: float, fees: FeeConfig = DEFAULT_FEES) -> Charges:
    """Compute the charges for a trade.

    Parameters
    ----------
    side : str
        ``"BUY"`` or ``"SELL"``.
    quantity : float
        Number of shares traded.
    price : float
        Fill price per share.
    fees : FeeConfig
        Rates to evaluate the schedule with.

    Returns
    -------
    Charges
        Every component plus their sum.  Callers round the total when
        debiting or displaying it.
    """
    side = side.upper()
    if side not in SIDES:
        raise ValueError(f"Unknown order side: {side!r}")

    turnover = quantity * price
    brokerage = min(turnover * fees.brokerage_rate, fees.brokerage_cap)
    stt = turnover * fees.stt_rate if side == SELL else 0.0
    exchange = turnover * fees.exchange_rate
    sebi = turnover * fees.sebi_rate
    stamp = turnover * fees.stamp_rate if side == BUY else 0.0
    gst = fees.gst_rate * (brokerage + exchange)
    dp = fees.dp_charge if side == SELL else 0.0

    total = brokerage + stt + exchange + sebi + stamp + gst + dp

    return Charges(
        turnover=turnover,
        brokerage=brokerage,
        stt=stt,
        exchange=exchange,
        sebi=sebi,
        stamp=stamp,
        gst=gst,
        dp=dp,
        total=total,
    )
