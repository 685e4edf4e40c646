"""
Holding, order and ledger snapshot models.

These dataclasses are what the ledger hands out to the rest of the
program.  All of them are frozen: the ledger replaces records instead
of mutating them, so a snapshot taken before an operation never changes
afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple
import pandas as pd


@dataclass(frozen=True)
class Holding:
    """An open long position on a given symbol."""
    symbol: str
    quantity: float
    average_buy_price: float
    stop_loss: Optional[float] = None
    target: Optional[float] = None


@dataclass(frozen=True)
class Order:
    """An executed order.  Every order is filled in full."""
    id: str
    timestamp: pd.Timestamp
    time_label: str
    symbol: str
    side: str  # 'BUY' or 'SELL'
    quantity: float
    fill_price: float
    fees_total: float
    status: str = "FILLED"


@dataclass(frozen=True)
class LedgerSnapshot:
    """Point-in-time copy of the account."""
    cash: float
    holdings: Mapping[str, Holding] = field(default_factory=dict)
    orders: Tuple[Order, ...] = ()


@dataclass(frozen=True)
class HoldingValuation:
    """A holding marked to its last traded price."""
    holding: Holding
    ltp: float
    invested: float
    current: float
    pnl: float
    pnl_percent: float


@dataclass(frozen=True)
class PortfolioValuation:
    cash: float
    invested: float
    holdings_value: float
    pnl: float
    total_value: float
    positions: Tuple[HoldingValuation, ...] = ()


def value_holding(holding: Holding, ltp: float) -> HoldingValuation:
    invested = holding.quantity * holding.average_buy_price
    current = holding.quantity * ltp
    pnl = current - invested
    pnl_percent = 0.0 if invested == 0 else pnl / invested * 100
    return HoldingValuation(
        holding=holding,
        ltp=ltp,
        invested=invested,
        current=current,
        pnl=pnl,
        pnl_percent=pnl_percent,
    )


def value_portfolio(snapshot: LedgerSnapshot, live_prices: Mapping[str, float]) -> PortfolioValuation:
    """Mark every holding of `snapshot` to market.

    Holdings without a live price are valued at zero, the same way an
    instrument that stopped ticking would show up.
    """
    positions = tuple(
        value_holding(holding, float(live_prices.get(symbol, 0.0)))
        for symbol, holding in sorted(snapshot.holdings.items())
    )
    invested = sum(p.invested for p in positions)
    holdings_value = sum(p.current for p in positions)
    return PortfolioValuation(
        cash=snapshot.cash,
        invested=invested,
        holdings_value=holdings_value,
        pnl=holdings_value - invested,
        total_value=snapshot.cash + holdings_value,
        positions=positions,
    )
