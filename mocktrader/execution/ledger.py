"""
Paper-trading ledger.

The `Ledger` owns the cash balance, the open holdings and a bounded log
of executed orders.  Every operation first validates its inputs and
computes the complete new state, and only then commits it.  A rejected
operation raises a `LedgerError` subclass and leaves cash, holdings and
orders untouched; a successful one changes them together.

Cash is rounded to two decimals at every commit.  Average buy prices are
rounded the same way when a position is topped up.
"""

from __future__ import annotations

from typing import Dict, List, Optional
import logging
import threading

from ..config.schema import FeeConfig
from ..utils.money import round_money, is_positive_finite, optional_price, format_inr
from ..utils.timeutils import Clock, system_clock, time_label, epoch_millis
from .charges import BUY, SELL, Charges, compute_charges
from .errors import (
    InvalidQuantity,
    InvalidAmount,
    InvalidPrice,
    InsufficientFunds,
    InsufficientQuantity,
    NoSuchHolding,
)
from .models import Holding, Order, LedgerSnapshot


logger = logging.getLogger(__name__)


class Ledger:
    """Cash, holdings and order log of a paper-trading account.

    Parameters
    ----------
    starting_cash : float
        Opening cash balance.
    fees : FeeConfig
        Fee schedule used for every trade.
    max_orders : int
        Size of the order log.  The newest order comes first and the
        oldest is dropped once the log is full.
    clock : callable, optional
        Returns the current `pandas.Timestamp`; used for order ids and
        time labels.
    """

    def __init__(
        self,
        starting_cash: float = 100_000.0,
        fees: Optional[FeeConfig] = None,
        max_orders: int = 60,
        clock: Optional[Clock] = None,
    ) -> None:
        self.fees = fees or FeeConfig()
        self.max_orders = max_orders
        self.clock = clock or system_clock()
        self._cash = round_money(starting_cash)
        self._holdings: Dict[str, Holding] = {}
        self._orders: List[Order] = []
        self._last_order_millis = 0
        # One lock for all mutations; re-entrant so auto-exit can sell while holding it
        self._lock = threading.RLock()

    @property
    def cash(self) -> float:
        return self._cash

    @property
    def holdings(self) -> Dict[str, Holding]:
        with self._lock:
            return dict(self._holdings)

    @property
    def orders(self) -> List[Order]:
        with self._lock:
            return list(self._orders)

    def holding(self, symbol: str) -> Optional[Holding]:
        with self._lock:
            return self._holdings.get(symbol)

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return LedgerSnapshot(
                cash=self._cash,
                holdings=dict(self._holdings),
                orders=tuple(self._orders),
            )

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def _new_order(self, side: str, symbol: str, quantity: float, price: float, charges: Charges) -> Order:
        ts = self.clock()
        # Ids are derived from the clock but must stay unique within one millisecond
        millis = max(epoch_millis(ts), self._last_order_millis + 1)
        self._last_order_millis = millis
        return Order(
            id=f"ORD-{millis}",
            timestamp=ts,
            time_label=time_label(ts),
            symbol=symbol,
            side=side,
            quantity=quantity,
            fill_price=round_money(price),
            fees_total=round_money(charges.total),
        )

    def _record(self, order: Order) -> None:
        self._orders.insert(0, order)
        del self._orders[self.max_orders:]

    def buy(
        self,
        symbol: str,
        quantity: float,
        price: float,
        stop_loss: Optional[float] = None,
        target: Optional[float] = None,
    ) -> Order:
        """Buy `quantity` shares of `symbol` at `price`.

        Stop-loss and target are only taken from this call when the
        holding does not already have them (first write wins).

        Raises
        ------
        InvalidQuantity
            If `quantity` is not a positive finite number.
        InvalidPrice
            If `price` is not a positive finite number.
        InsufficientFunds
            If cost plus charges exceeds the available cash.
        """
        if not is_positive_finite(quantity):
            raise InvalidQuantity(f"Quantity must be a positive number, got {quantity!r}")
        if not is_positive_finite(price):
            raise InvalidPrice(f"Price must be a positive number, got {price!r}")

        with self._lock:
            charges = compute_charges(BUY, quantity, price, self.fees)
            total_debit = quantity * price + charges.total
            if total_debit > self._cash:
                raise InsufficientFunds(
                    f"Not enough balance: required ₹{format_inr(total_debit)}, "
                    f"available ₹{format_inr(self._cash)}"
                )

            new_stop_loss = optional_price(stop_loss)
            new_target = optional_price(target)
            existing = self._holdings.get(symbol)
            if existing is None:
                holding = Holding(
                    symbol=symbol,
                    quantity=quantity,
                    average_buy_price=round_money(price),
                    stop_loss=new_stop_loss,
                    target=new_target,
                )
            else:
                new_qty = existing.quantity + quantity
                new_avg = (existing.quantity * existing.average_buy_price + quantity * price) / new_qty
                holding = Holding(
                    symbol=symbol,
                    quantity=new_qty,
                    average_buy_price=round_money(new_avg),
                    stop_loss=existing.stop_loss if existing.stop_loss is not None else new_stop_loss,
                    target=existing.target if existing.target is not None else new_target,
                )
            order = self._new_order(BUY, symbol, quantity, price, charges)

            self._record(order)
            self._cash = round_money(self._cash - total_debit)
            self._holdings[symbol] = holding
            logger.info(
                "BUY %s x %s @ ₹%s (charges ₹%s), cash ₹%s",
                symbol, quantity, format_inr(price), format_inr(charges.total), format_inr(self._cash),
            )
        return order

    def sell(self, symbol: str, quantity: float, price: float) -> Order:
        """Sell `quantity` shares of `symbol` at `price`.

        Selling the whole position removes the holding; a partial sell
        reduces the quantity and keeps the average buy price, stop-loss
        and target.

        Raises
        ------
        InvalidQuantity
            If `quantity` is not a positive finite number.
        InvalidPrice
            If `price` is not a positive finite number.
        NoSuchHolding
            If `symbol` is not held.
        InsufficientQuantity
            If `quantity` exceeds the held quantity.
        """
        if not is_positive_finite(quantity):
            raise InvalidQuantity(f"Quantity must be a positive number, got {quantity!r}")
        if not is_positive_finite(price):
            raise InvalidPrice(f"Price must be a positive number, got {price!r}")

        with self._lock:
            existing = self._holdings.get(symbol)
            if existing is None:
                raise NoSuchHolding(f"You don't own {symbol}")
            if quantity > existing.quantity:
                raise InsufficientQuantity(
                    f"Not enough quantity of {symbol}: requested {quantity}, held {existing.quantity}"
                )

            charges = compute_charges(SELL, quantity, price, self.fees)
            net_credit = quantity * price - charges.total
            remaining = existing.quantity - quantity
            order = self._new_order(SELL, symbol, quantity, price, charges)

            self._record(order)
            self._cash = round_money(self._cash + net_credit)
            if remaining <= 0:
                del self._holdings[symbol]
            else:
                self._holdings[symbol] = Holding(
                    symbol=symbol,
                    quantity=remaining,
                    average_buy_price=existing.average_buy_price,
                    stop_loss=existing.stop_loss,
                    target=existing.target,
                )
            logger.info(
                "SELL %s x %s @ ₹%s (charges ₹%s), cash ₹%s",
                symbol, quantity, format_inr(price), format_inr(charges.total), format_inr(self._cash),
            )
        return order

    def deposit(self, amount: float) -> float:
        """Add `amount` to the cash balance and return the new balance."""
        if not is_positive_finite(amount):
            raise InvalidAmount(f"Amount must be a positive number, got {amount!r}")
        with self._lock:
            self._cash = round_money(self._cash + amount)
            balance = self._cash
            logger.info("Added ₹%s to wallet, cash ₹%s", format_inr(amount), format_inr(balance))
        return balance

    def withdraw(self, amount: float) -> float:
        """Take `amount` out of the cash balance and return the new balance."""
        if not is_positive_finite(amount):
            raise InvalidAmount(f"Amount must be a positive number, got {amount!r}")
        with self._lock:
            if amount > self._cash:
                raise InsufficientFunds(
                    f"Not enough cash to withdraw ₹{format_inr(amount)}, available ₹{format_inr(self._cash)}"
                )
            self._cash = round_money(self._cash - amount)
            balance = self._cash
            logger.info("Withdrawn ₹%s from wallet, cash ₹%s", format_inr(amount), format_inr(balance))
        return balance
