"""
Report generation utilities.

This module turns a finished trading session into human-readable
artefacts: CSV files of orders, holdings, candles and the equity curve,
a JSON summary of session metrics, and PNG charts of the equity curve
and of the selected instrument's closes with their EMA.
"""

from __future__ import annotations

import os
import json
import pandas as pd
import matplotlib

# Use non-interactive backend for environments without display
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..execution.session import TradingSession
from ..indicators.ema import ema_series
from .metrics import compute_metrics


def orders_frame(session: TradingSession) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                'id': o.id,
                'timestamp': o.timestamp.isoformat(),
                'symbol': o.symbol,
                'side': o.side,
                'quantity': o.quantity,
                'price': o.fill_price,
                'fees': o.fees_total,
                'status': o.status,
            }
            for o in session.fills
        ],
        columns=['id', 'timestamp', 'symbol', 'side', 'quantity', 'price', 'fees', 'status'],
    )


def holdings_frame(session: TradingSession) -> pd.DataFrame:
    valuation = session.valuation()
    return pd.DataFrame(
        [
            {
                'symbol': p.holding.symbol,
                'quantity': p.holding.quantity,
                'avg_buy': p.holding.average_buy_price,
                'stop_loss': p.holding.stop_loss,
                'target': p.holding.target,
                'ltp': p.ltp,
                'invested': round(p.invested, 2),
                'current': round(p.current, 2),
                'pnl': round(p.pnl, 2),
                'pnl_percent': round(p.pnl_percent, 2),
            }
            for p in valuation.positions
        ],
        columns=['symbol', 'quantity', 'avg_buy', 'stop_loss', 'target', 'ltp',
                 'invested', 'current', 'pnl', 'pnl_percent'],
    )


def candles_frame(session: TradingSession, ema_period: int = 10) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                'id': c.id,
                'time': c.time_label,
                'open': c.open,
                'high': c.high,
                'low': c.low,
                'close': c.close,
                'ticks': c.tick_count,
            }
            for c in session.candles()
        ],
        columns=['id', 'time', 'open', 'high', 'low', 'close', 'ticks'],
    )
    df['ema'] = ema_series(df['close'], ema_period)
    return df


def generate_session_report(session: TradingSession, out_dir: str = "results", ema_period: int = 10) -> dict:
    """Generate report files for a trading session.

    Creates the output directory if it does not exist and writes the
    following files:

    - `orders.csv` – every order filled during the session
    - `holdings.csv` – open positions marked to market
    - `candles.csv` – candles of the selected instrument with EMA
    - `equity_curve.csv` – account value after each tick
    - `summary.json` – session metrics
    - `equity_curve.png` and `candles.png` – charts of the above

    Returns
    -------
    dict
        The metrics written to `summary.json`.
    """
    os.makedirs(out_dir, exist_ok=True)

    orders_frame(session).to_csv(os.path.join(out_dir, 'orders.csv'), index=False)
    holdings_frame(session).to_csv(os.path.join(out_dir, 'holdings.csv'), index=False)
    df_candles = candles_frame(session, ema_period)
    df_candles.to_csv(os.path.join(out_dir, 'candles.csv'), index=False)

    # Equity curve CSV
    eq_data = [
        {
            'timestamp': pt.timestamp.isoformat(),
            'equity': round(pt.equity, 2),
        }
        for pt in session.equity_curve
    ]
    df_eq = pd.DataFrame(eq_data, columns=['timestamp', 'equity'])
    df_eq.to_csv(os.path.join(out_dir, 'equity_curve.csv'), index=False)

    # Summary JSON
    metrics = compute_metrics(
        session.fills, session.equity_curve, session.ledger.snapshot(), session.valuation().total_value,
    )
    metrics['selected'] = session.selected
    metrics['ticks'] = session.tick_count
    with open(os.path.join(out_dir, 'summary.json'), 'w', encoding='utf-8') as fh:
        json.dump(metrics, fh, indent=2, ensure_ascii=False)

    # Equity curve plot
    fig, ax = plt.subplots(figsize=(10, 4))
    if not df_eq.empty:
        ax.plot([pt.timestamp for pt in session.equity_curve], df_eq['equity'], linewidth=1.5)
        ax.set_title('Equity Curve')
        ax.set_xlabel('Time')
        ax.set_ylabel('Equity (₹)')
        fig.autofmt_xdate()
    fig.tight_layout()
    fig.savefig(os.path.join(out_dir, 'equity_curve.png'))
    plt.close(fig)

    # Close and EMA plot with the high/low range of each candle
    fig, ax = plt.subplots(figsize=(10, 4))
    if not df_candles.empty:
        x = range(len(df_candles))
        ax.vlines(x, df_candles['low'], df_candles['high'], color='grey', linewidth=0.8)
        ax.plot(x, df_candles['close'], linewidth=1.2, label='Close')
        ax.plot(x, df_candles['ema'], linewidth=1.2, linestyle='--', label=f'EMA({ema_period})')
        ax.set_title(f'{session.selected} candles')
        ax.set_xlabel('Candle')
        ax.set_ylabel('Price (₹)')
        ax.legend()
    fig.tight_layout()
    fig.savefig(os.path.join(out_dir, 'candles.png'))
    plt.close(fig)

    return metrics
