import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mocktrader.utils.money import format_inr, is_positive_finite, optional_price, round_money

import unittest


class TestMoneyHelpers(unittest.TestCase):
    def test_indian_grouping(self) -> None:
        self.assertEqual(format_inr(123456.78), "1,23,456.78")
        self.assertEqual(format_inr(1000), "1,000")
        self.assertEqual(format_inr(999.5), "999.5")
        self.assertEqual(format_inr(-2500000), "-25,00,000")
        self.assertEqual(format_inr(None), "0")

    def test_round_money(self) -> None:
        self.assertEqual(round_money(94997.87145), 94997.87)
        self.assertEqual(str(round_money(-0.001)), "0.0")

    def test_positive_finite(self) -> None:
        self.assertTrue(is_positive_finite(1))
        self.assertTrue(is_positive_finite(2.5))
        for value in (0, -1, float("nan"), float("inf"), None, "x", "2.5", True):
            self.assertFalse(is_positive_finite(value), value)

    def test_optional_price(self) -> None:
        self.assertIsNone(optional_price(""))
        self.assertIsNone(optional_price(None))
        self.assertIsNone(optional_price("abc"))
        self.assertIsNone(optional_price(float("nan")))
        self.assertEqual(optional_price("95"), 95.0)


if __name__ == '__main__':
    unittest.main()
