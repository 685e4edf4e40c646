import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mocktrader.execution.charges import compute_charges

import unittest


class TestCharges(unittest.TestCase):
    def test_buy_breakdown(self) -> None:
        c = compute_charges("BUY", 10, 500.0)
        self.assertAlmostEqual(c.turnover, 5000.0)
        self.assertAlmostEqual(c.brokerage, 1.5)
        self.assertEqual(c.stt, 0.0)
        self.assertAlmostEqual(c.exchange, 0.1725)
        self.assertAlmostEqual(c.sebi, 0.005)
        self.assertAlmostEqual(c.stamp, 0.15)
        self.assertAlmostEqual(c.gst, 0.30105)
        self.assertEqual(c.dp, 0.0)
        self.assertAlmostEqual(c.total, 2.12855)
        self.assertEqual(round(c.total, 2), 2.13)

    def test_sell_breakdown(self) -> None:
        c = compute_charges("SELL", 10, 500.0)
        self.assertAlmostEqual(c.stt, 1.25)
        self.assertEqual(c.stamp, 0.0)
        self.assertEqual(c.dp, 13.5)
        self.assertAlmostEqual(c.total, 16.72855)

    def test_total_is_sum_of_components(self) -> None:
        for side in ("BUY", "SELL"):
            c = compute_charges(side, 37, 1234.56)
            parts = c.brokerage + c.stt + c.exchange + c.sebi + c.stamp + c.gst + c.dp
            self.assertAlmostEqual(c.total, parts)

    def test_brokerage_is_capped(self) -> None:
        c = compute_charges("BUY", 1000, 1000.0)
        self.assertEqual(c.brokerage, 20.0)
        self.assertAlmostEqual(c.gst, 0.18 * (20.0 + 1_000_000 * 0.0000345))

    def test_total_strictly_increasing_in_turnover(self) -> None:
        turnovers = [1.0, 10.0, 1000.0, 50_000.0, 66_666.0, 66_667.0, 100_000.0, 5_000_000.0]
        for side in ("BUY", "SELL"):
            totals = [compute_charges(side, 1, t).total for t in turnovers]
            for lower, higher in zip(totals, totals[1:]):
                self.assertLess(lower, higher)

    def test_side_is_case_insensitive_and_validated(self) -> None:
        self.assertAlmostEqual(compute_charges("buy", 1, 100.0).total, compute_charges("BUY", 1, 100.0).total)
        with self.assertRaises(ValueError):
            compute_charges("HOLD", 1, 100.0)


if __name__ == '__main__':
    unittest.main()
