import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mocktrader.execution.auto_exit import AutoExitMonitor
from mocktrader.execution.ledger import Ledger
from mocktrader.utils.timeutils import ManualClock

import unittest


class TestAutoExit(unittest.TestCase):
    def setUp(self) -> None:
        self.ledger = Ledger(starting_cash=100_000.0, clock=ManualClock())
        self.monitor = AutoExitMonitor()

    def test_target_hit_sells_everything(self) -> None:
        self.ledger.buy("TCS", 10, 100.0, target=110.0)
        exits = self.monitor.check_exits(self.ledger, {"TCS": 111.0})
        self.assertEqual(len(exits), 1)
        self.assertEqual(exits[0].reason, "target")
        self.assertEqual(exits[0].order.side, "SELL")
        self.assertEqual(exits[0].order.quantity, 10)
        self.assertEqual(exits[0].order.fill_price, 111.0)
        self.assertIsNone(self.ledger.holding("TCS"))

    def test_stop_loss_hit_sells_everything(self) -> None:
        self.ledger.buy("INFY", 4, 100.0, stop_loss=95.0)
        exits = self.monitor.check_exits(self.ledger, {"INFY": 95.0})
        self.assertEqual([e.reason for e in exits], ["sl"])
        self.assertIsNone(self.ledger.holding("INFY"))

    def test_no_trigger_no_sell(self) -> None:
        self.ledger.buy("INFY", 4, 100.0, stop_loss=95.0, target=110.0)
        self.assertEqual(self.monitor.check_exits(self.ledger, {"INFY": 100.0}), [])
        self.assertEqual(self.ledger.holding("INFY").quantity, 4)

    def test_both_triggers_sell_only_once(self) -> None:
        # Target below stop-loss: a price of 115 satisfies both conditions
        self.ledger.buy("SBIN", 10, 100.0, stop_loss=120.0, target=110.0)
        exits = self.monitor.check_exits(self.ledger, {"SBIN": 115.0})
        self.assertEqual([e.reason for e in exits], ["target"])
        self.assertEqual(len(self.ledger.orders), 2)
        self.assertIsNone(self.ledger.holding("SBIN"))

    def test_symbols_checked_in_ascending_order(self) -> None:
        self.ledger.buy("WIPRO", 1, 100.0, target=101.0)
        self.ledger.buy("ITC", 1, 100.0, target=101.0)
        self.ledger.buy("HDFCBANK", 1, 100.0, stop_loss=99.0)
        exits = self.monitor.check_exits(self.ledger, {"WIPRO": 102.0, "ITC": 102.0, "HDFCBANK": 98.0})
        self.assertEqual([e.order.symbol for e in exits], ["HDFCBANK", "ITC", "WIPRO"])
        self.assertEqual(self.ledger.holdings, {})

    def test_holdings_without_usable_price_are_skipped(self) -> None:
        self.ledger.buy("TCS", 1, 100.0, stop_loss=99.0)
        self.assertEqual(self.monitor.check_exits(self.ledger, {}), [])
        self.assertEqual(self.monitor.check_exits(self.ledger, {"TCS": 0.0}), [])
        self.assertIsNotNone(self.ledger.holding("TCS"))


if __name__ == '__main__':
    unittest.main()
