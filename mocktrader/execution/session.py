"""
Trading session driver.

This module contains the `TradingSession` class which ties the pieces
together the way the periodic market timer does: on every tick it
advances the prices of the whole universe, feeds the selected
instrument's price into the candle aggregator, lets the auto-exit
monitor close positions whose stop-loss or target was crossed and
records the account equity.

User commands (buy, sell, add funds, withdraw, switch instrument) go
through the session as well.  They never raise for a rejected order;
instead they return a `TradeResult` describing either the updated
account or the reason for the rejection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging
import math
import time

import numpy as np
import pandas as pd

from ..config.schema import Config
from ..market.candles import Candle, CandleAggregator
from ..market.chart import ChartPoint, add_chart_point, clamp_pan_offset, visible_window
from ..market.price_sim import MarketSimulator, Universe, live_prices
from ..utils.timeutils import Clock, system_clock, time_label
from .auto_exit import AutoExit, AutoExitMonitor
from .errors import LedgerError
from .ledger import Ledger
from .models import LedgerSnapshot, Order, PortfolioValuation, value_portfolio


logger = logging.getLogger(__name__)


@dataclass
class EquityPoint:
    """Represents the account equity at a given timestamp."""
    timestamp: pd.Timestamp
    equity: float


@dataclass(frozen=True)
class TradeResult:
    """Outcome of a user command.

    On success `snapshot` is the account after the command and `order`
    the order it produced, if any.  On failure `reason` holds the error
    code and `snapshot` the unchanged account.
    """
    success: bool
    snapshot: LedgerSnapshot
    reason: Optional[str] = None
    message: str = ""
    order: Optional[Order] = None


class TradingSession:
    """Run the simulated market and the paper-trading account together.

    Parameters
    ----------
    config : Config
        Simulator configuration.
    rng : numpy.random.Generator, optional
        Random source for prices.  Defaults to one seeded with
        ``config.simulation.seed``.
    clock : callable, optional
        Returns the current `pandas.Timestamp`.  Defaults to the system
        clock in the configured timezone.
    sleep : callable
        Used to wait between ticks when running in real time.
    """

    def __init__(
        self,
        config: Config,
        rng: Optional[np.random.Generator] = None,
        clock: Optional[Clock] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.clock = clock or system_clock(config.simulation.timezone)
        self.sleep = sleep
        self.simulator = MarketSimulator(config.simulation, rng)
        self.universe: Universe = self.simulator.create_universe(config.instruments)
        self.aggregator = CandleAggregator(config.candles.ticks_per_candle, config.candles.max_history)
        self.ledger = Ledger(
            starting_cash=config.ledger.starting_cash,
            fees=config.fees,
            max_orders=config.ledger.max_orders,
            clock=self.clock,
        )
        self.monitor = AutoExitMonitor()
        self.selected = config.selected
        self.visible_count = config.candles.visible_count
        self.pan_offset = 0
        self.auto_follow = True
        self.price_line: List[ChartPoint] = []
        self.tick_count = 0
        self.equity_curve: List[EquityPoint] = []
        self.auto_exits: List[AutoExit] = []
        # Every fill of the session; the ledger itself only keeps the newest ones
        self.fills: List[Order] = []

    # ------------------------------------------------------------------
    # Market
    # ------------------------------------------------------------------
    def prices(self) -> Dict[str, float]:
        return live_prices(self.universe)

    def step(self) -> List[AutoExit]:
        """Advance the market by one tick.

        Returns
        -------
        list of AutoExit
            Positions closed by the auto-exit monitor during this tick.
        """
        self.universe = self.simulator.tick(self.universe)
        now = self.clock()
        label = time_label(now)

        price = self.universe[self.selected].price
        self.aggregator.ingest(self.selected, price, label)
        self.price_line = add_chart_point(self.price_line, price, label)
        if self.auto_follow:
            self.pan_offset = 0

        exits = self.monitor.check_exits(self.ledger, self.prices())
        self.auto_exits.extend(exits)
        self.fills.extend(auto_exit.order for auto_exit in exits)
        self.tick_count += 1

        self.equity_curve.append(EquityPoint(timestamp=now, equity=self.valuation().total_value))
        return exits

    def candles(self) -> List[Candle]:
        """Full candle history of the selected instrument."""
        return self.aggregator.history(self.selected)

    def visible_candles(self) -> List[Candle]:
        """Candles of the selected instrument inside the current chart window."""
        return visible_window(
            self.candles(),
            self.visible_count,
            self.pan_offset,
            self.config.candles.min_visible,
            self.config.candles.max_visible,
        )

    def pan(self, delta: int) -> int:
        """Move the chart window back (positive) or forward (negative).

        Auto-follow stays on only while the window shows the newest candle.
        """
        history_length = len(self.candles())
        self.pan_offset = clamp_pan_offset(self.pan_offset + delta, history_length, self.config.candles.min_visible)
        self.auto_follow = self.pan_offset == 0
        return self.pan_offset

    def valuation(self) -> PortfolioValuation:
        return value_portfolio(self.ledger.snapshot(), self.prices())

    # ------------------------------------------------------------------
    # User commands
    # ------------------------------------------------------------------
    def _failure(self, reason: str, message: str) -> TradeResult:
        logger.warning("Command rejected (%s): %s", reason, message)
        return TradeResult(success=False, snapshot=self.ledger.snapshot(), reason=reason, message=message)

    def _attempt(self, operation: Callable[..., Any], *args: Any) -> TradeResult:
        try:
            outcome = operation(*args)
        except LedgerError as exc:
            return self._failure(exc.reason, str(exc))
        order = outcome if isinstance(outcome, Order) else None
        if order is not None:
            self.fills.append(order)
        return TradeResult(success=True, snapshot=self.ledger.snapshot(), order=order)

    def _known(self, symbol: str) -> bool:
        return symbol in self.universe

    def select(self, symbol: str) -> TradeResult:
        """Switch the chart to `symbol`, starting its candles from scratch."""
        if not self._known(symbol):
            return self._failure("unknown_symbol", f"Unknown symbol {symbol!r}")
        self.selected = symbol
        self.aggregator.reset(symbol)
        self.price_line = []
        self.pan_offset = 0
        self.auto_follow = True
        logger.info("Selected %s", symbol)
        return TradeResult(success=True, snapshot=self.ledger.snapshot())

    def buy(
        self,
        symbol: str,
        quantity: float,
        stop_loss: Optional[float] = None,
        target: Optional[float] = None,
    ) -> TradeResult:
        """Buy at the latest simulated price of `symbol`."""
        if not self._known(symbol):
            return self._failure("unknown_symbol", f"Unknown symbol {symbol!r}")
        price = self.universe[symbol].price
        return self._attempt(self.ledger.buy, symbol, quantity, price, stop_loss, target)

    def sell(self, symbol: str, quantity: Optional[float] = None) -> TradeResult:
        """Sell at the latest simulated price; `quantity=None` sells everything."""
        if not self._known(symbol):
            return self._failure("unknown_symbol", f"Unknown symbol {symbol!r}")
        if quantity is None:
            holding = self.ledger.holding(symbol)
            quantity = holding.quantity if holding else 1
        price = self.universe[symbol].price
        return self._attempt(self.ledger.sell, symbol, quantity, price)

    def deposit(self, amount: float) -> TradeResult:
        return self._attempt(self.ledger.deposit, amount)

    def withdraw(self, amount: float) -> TradeResult:
        return self._attempt(self.ledger.withdraw, amount)

    def apply_command(self, command: Mapping[str, Any]) -> TradeResult:
        """Execute one scripted command such as ``{'action': 'buy', ...}``."""
        action = str(command.get('action', '')).lower()
        symbol = str(command.get('symbol', '')).upper()
        if action == 'buy':
            return self.buy(symbol, command.get('quantity', 1), command.get('stop_loss'), command.get('target'))
        if action == 'sell':
            quantity = command.get('quantity')
            return self.sell(symbol, None if quantity == 'all' else quantity)
        if action == 'deposit':
            return self.deposit(command.get('amount'))
        if action == 'withdraw':
            return self.withdraw(command.get('amount'))
        if action == 'select':
            return self.select(symbol)
        return self._failure("unknown_action", f"Unknown scripted action {action!r}")

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------
    def _scheduled_commands(self) -> Dict[int, List[Mapping[str, Any]]]:
        schedule: Dict[int, List[Mapping[str, Any]]] = {}
        for command in self.config.script:
            schedule.setdefault(int(command.get('tick', 0)), []).append(command)
        return schedule

    def run(self, max_ticks: Optional[int] = None, realtime: bool = False) -> None:
        """Main loop.

        Runs `max_ticks` ticks, or indefinitely when it is `None`.  In
        real time the loop sleeps ``simulation.tick_interval`` seconds
        between ticks; otherwise a clock with an ``advance`` method is
        moved forward by the same amount so labels stay realistic.
        Press Ctrl+C to stop a real-time session.
        """
        interval = self.config.simulation.tick_interval
        schedule = self._scheduled_commands()
        limit = math.inf if max_ticks is None else max_ticks
        logger.info(
            "Starting session (realtime=%s, ticks=%s, selected=%s)",
            realtime, 'unlimited' if max_ticks is None else max_ticks, self.selected,
        )
        try:
            for command in schedule.get(0, []):
                self.apply_command(command)
            while self.tick_count < limit:
                self.step()
                for command in schedule.get(self.tick_count, []):
                    self.apply_command(command)
                if realtime:
                    self.sleep(interval)
                elif hasattr(self.clock, 'advance'):
                    self.clock.advance(interval)
        except KeyboardInterrupt:
            logger.info("Shutting down session...")
        finally:
            snapshot = self.ledger.snapshot()
            logger.info(
                "Session stopped after %d ticks: cash %.2f, %d holdings, %d orders",
                self.tick_count, snapshot.cash, len(snapshot.holdings), len(snapshot.orders),
            )
