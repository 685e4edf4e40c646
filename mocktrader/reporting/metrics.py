"""
Session performance metrics.

This module provides helpers to compute summary statistics from the
fills of a session and its equity curve.  They feed the session report
written at the end of a CLI run.
"""

from __future__ import annotations

from typing import List, Optional

from ..execution.charges import BUY, SELL
from ..execution.models import Order, LedgerSnapshot
from ..execution.session import EquityPoint


def compute_metrics(
    fills: List[Order],
    equity_curve: List[EquityPoint],
    snapshot: LedgerSnapshot,
    market_value: Optional[float] = None,
) -> dict:
    """Compute a set of summary statistics for a session.

    Parameters
    ----------
    fills : list of Order
        Every order filled during the session, oldest first.
    equity_curve : list of EquityPoint
        Account value (cash plus holdings at market) after each tick.
    snapshot : LedgerSnapshot
        Account state at the end of the session.
    market_value : float, optional
        Cash plus open holdings at their last prices when the session
        ended.  Used as the final equity; without it the last point of
        the equity curve (or the cash, for an empty curve) is used.

    Returns
    -------
    dict
        Dictionary of performance metrics.
    """
    num_buys = sum(1 for o in fills if o.side == BUY)
    num_sells = sum(1 for o in fills if o.side == SELL)
    total_fees = round(sum(o.fees_total for o in fills), 2)
    turnover = round(sum(o.quantity * o.fill_price for o in fills), 2)

    if not equity_curve:
        final_equity = snapshot.cash if market_value is None else market_value
        return {
            'total_return': 0.0,
            'max_drawdown': 0.0,
            'num_orders': len(fills),
            'num_buys': num_buys,
            'num_sells': num_sells,
            'total_fees': total_fees,
            'turnover': turnover,
            'final_cash': snapshot.cash,
            'final_equity': round(final_equity, 2),
            'open_positions': len(snapshot.holdings),
        }

    starting_equity = equity_curve[0].equity
    ending_equity = equity_curve[-1].equity
    final_equity = ending_equity if market_value is None else market_value
    total_return = (ending_equity - starting_equity) / starting_equity if starting_equity else 0.0

    # Compute drawdown
    max_equity = starting_equity
    max_drawdown = 0.0
    for point in equity_curve:
        if point.equity > max_equity:
            max_equity = point.equity
        drawdown = (max_equity - point.equity) / max_equity if max_equity else 0.0
        if drawdown > max_drawdown:
            max_drawdown = drawdown

    return {
        'total_return': total_return,
        'max_drawdown': max_drawdown,
        'num_orders': len(fills),
        'num_buys': num_buys,
        'num_sells': num_sells,
        'total_fees': total_fees,
        'turnover': turnover,
        'final_cash': snapshot.cash,
        'final_equity': round(final_equity, 2),
        'open_positions': len(snapshot.holdings),
    }
