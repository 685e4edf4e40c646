"""
Automatic stop-loss and target exits.

After every price update the monitor walks the open holdings in
ascending symbol order and closes any position whose target has been
reached or whose stop-loss has been hit, selling the full quantity at
the live price.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping
import logging

from ..utils.money import is_positive_finite
from .ledger import Ledger
from .models import Order


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoExit:
    """A sell executed by the monitor and what triggered it."""
    order: Order
    reason: str  # 'target' or 'sl'


class AutoExitMonitor:
    """Sell positions whose stop-loss or target has been crossed."""

    def check_exits(self, ledger: Ledger, live_prices: Mapping[str, float]) -> List[AutoExit]:
        """Run one exit cycle.

        Parameters
        ----------
        ledger : Ledger
            Account whose holdings are checked and sold.
        live_prices : mapping of str to float
            Last traded price per symbol.  Holdings without a price are
            skipped.

        Returns
        -------
        list of AutoExit
            The sells executed during this cycle, in execution order.
        """
        exits: List[AutoExit] = []
        with ledger.lock:
            for symbol in sorted(ledger.holdings):
                ltp = live_prices.get(symbol)
                if ltp is None:
                    continue
                if not is_positive_finite(ltp):
                    logger.warning("Skipping exit checks for %s: no usable price (%r)", symbol, ltp)
                    continue

                holding = ledger.holding(symbol)
                if holding is not None and holding.target is not None and ltp >= holding.target and holding.quantity > 0:
                    exits.append(self._exit(ledger, symbol, holding.quantity, ltp, 'target'))

                # Re-read: the target exit may already have closed the position
                holding = ledger.holding(symbol)
                if holding is not None and holding.stop_loss is not None and ltp <= holding.stop_loss and holding.quantity > 0:
                    exits.append(self._exit(ledger, symbol, holding.quantity, ltp, 'sl'))
        return exits

    def _exit(self, ledger: Ledger, symbol: str, quantity: float, ltp: float, reason: str) -> AutoExit:
        logger.info("Auto-exit %s x %s at %.2f (%s hit)", symbol, quantity, ltp, reason)
        order = ledger.sell(symbol, quantity, ltp)
        return AutoExit(order=order, reason=reason)
