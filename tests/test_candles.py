import os
import sys

import numpy as np

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mocktrader.market.candles import CandleAggregator, CandlePhase

import unittest


class TestCandleAggregation(unittest.TestCase):
    def test_first_tick_opens_candle(self) -> None:
        agg = CandleAggregator()
        self.assertEqual(agg.state("RELIANCE").phase, CandlePhase.NO_CANDLE)
        history = agg.ingest("RELIANCE", 100.0, "09:15:00")
        self.assertEqual(len(history), 1)
        candle = history[0]
        self.assertEqual((candle.open, candle.high, candle.low, candle.close), (100.0, 100.0, 100.0, 100.0))
        self.assertEqual(candle.tick_count, 1)
        self.assertEqual(agg.state("RELIANCE").phase, CandlePhase.ACCUMULATING)

    def test_candle_seals_after_six_ticks(self) -> None:
        agg = CandleAggregator(ticks_per_candle=6)
        prices = [100.0, 101.0, 99.0, 102.0, 98.0, 100.5]
        for i, price in enumerate(prices[:-1]):
            history = agg.ingest("TCS", price, f"09:15:0{i}")
            self.assertEqual(len(history), 1)
        history = agg.ingest("TCS", prices[-1], "09:15:05")

        self.assertEqual(len(history), 2)
        sealed, reopened = history
        self.assertEqual((sealed.open, sealed.high, sealed.low, sealed.close), (100.0, 102.0, 98.0, 100.5))
        self.assertEqual(sealed.tick_count, 6)
        self.assertEqual(sealed.time_label, "09:15:05")
        self.assertEqual((reopened.open, reopened.high, reopened.low, reopened.close), (100.5, 100.5, 100.5, 100.5))
        self.assertEqual(reopened.tick_count, 0)
        self.assertGreater(reopened.id, sealed.id)

        history = agg.ingest("TCS", 103.0, "09:15:06")
        current = history[-1]
        self.assertEqual((current.open, current.high, current.low, current.close), (100.5, 103.0, 100.5, 103.0))
        self.assertEqual(current.tick_count, 1)

    def test_reopened_candle_needs_six_more_ticks(self) -> None:
        agg = CandleAggregator(ticks_per_candle=6)
        for i in range(12):
            history = agg.ingest("INFY", 100.0 + i, "t")
        self.assertEqual(len(history), 3)
        self.assertEqual([c.tick_count for c in history], [6, 6, 0])

    def test_ohlc_invariant_holds_after_every_tick(self) -> None:
        agg = CandleAggregator()
        rng = np.random.default_rng(4)
        price = 500.0
        for _ in range(500):
            price = round(price * (1 + rng.uniform(-0.01, 0.01)), 2)
            for c in agg.ingest("SBIN", price, "t"):
                self.assertLessEqual(c.low, min(c.open, c.close))
                self.assertLessEqual(max(c.open, c.close), c.high)

    def test_history_keeps_most_recent_300(self) -> None:
        agg = CandleAggregator(ticks_per_candle=6, max_history=300)
        for i in range(6 * 350):
            history = agg.ingest("ITC", float(i + 1), "t")
        self.assertEqual(len(history), 300)
        ids = [c.id for c in history]
        self.assertEqual(ids, list(range(52, 352)))
        self.assertEqual(history[-1].tick_count, 0)

    def test_reset_only_affects_one_instrument(self) -> None:
        agg = CandleAggregator()
        for price in (10.0, 11.0, 12.0):
            agg.ingest("A", price, "t")
            agg.ingest("B", price, "t")
        agg.reset("A")
        self.assertEqual(agg.history("A"), [])
        self.assertIsNone(agg.open_candle("A"))
        self.assertEqual(agg.open_candle("B").tick_count, 3)

        history = agg.ingest("A", 50.0, "t")
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].tick_count, 1)
        self.assertEqual(history[0].open, 50.0)


if __name__ == '__main__':
    unittest.main()
