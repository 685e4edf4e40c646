import os
import sys
import tempfile
import textwrap

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mocktrader.config.schema import Config, load_config

import unittest


class TestLoadConfig(unittest.TestCase):
    def _write(self, body: str) -> str:
        fd, path = tempfile.mkstemp(suffix=".yaml")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(textwrap.dedent(body))
        self.addCleanup(os.remove, path)
        return path

    def test_defaults_match_reference_behaviour(self) -> None:
        cfg = Config()
        self.assertEqual(cfg.simulation.tick_interval, 1.2)
        self.assertEqual(cfg.simulation.volatility, 0.00015)
        self.assertEqual(cfg.candles.ticks_per_candle, 6)
        self.assertEqual(cfg.candles.max_history, 300)
        self.assertEqual(cfg.ledger.starting_cash, 100_000.0)
        self.assertEqual(cfg.ledger.max_orders, 60)
        self.assertEqual(cfg.fees.dp_charge, 13.5)
        self.assertEqual(cfg.selected, cfg.instruments[0].symbol)

    def test_partial_override_keeps_other_defaults(self) -> None:
        path = self._write("""
            simulation:
              seed: 7
            ledger:
              starting_cash: 50000
        """)
        cfg = load_config(path)
        self.assertEqual(cfg.simulation.seed, 7)
        self.assertEqual(cfg.simulation.drift_limit, 0.00025)
        self.assertEqual(cfg.ledger.starting_cash, 50000)
        self.assertEqual(cfg.ledger.max_orders, 60)
        self.assertEqual(len(cfg.instruments), len(Config().instruments))

    def test_empty_file_gives_defaults(self) -> None:
        cfg = load_config(self._write(""))
        self.assertEqual(cfg, Config())

    def test_universe_override_selects_first_symbol(self) -> None:
        path = self._write("""
            instruments:
              - {symbol: abc, name: Alpha, price: 10}
              - {symbol: XYZ, price: 20.5}
        """)
        cfg = load_config(path)
        self.assertEqual([i.symbol for i in cfg.instruments], ["ABC", "XYZ"])
        self.assertEqual(cfg.instruments[1].name, "XYZ")
        self.assertEqual(cfg.selected, "ABC")

    def test_invalid_configurations_raise(self) -> None:
        bad = [
            """
            instruments:
              - {symbol: A, price: 10}
              - {symbol: A, price: 11}
            """,
            """
            instruments:
              - {symbol: A, price: 0}
            """,
            """
            selected: NOTHERE
            """,
            """
            simulation:
              tick_interval: 0
            """,
            """
            ledger:
              max_orders: 0
            """,
        ]
        for body in bad:
            with self.assertRaises(ValueError, msg=body):
                load_config(self._write(body))

    def test_malformed_entries_raise_value_error_naming_the_key(self) -> None:
        cases = [
            ("""
            instruments:
              - {symbol: A}
            """, "price"),
            ("""
            simulation:
              tick_intreval: 2
            """, "tick_intreval"),
            ("""
            candles:
              ticks_per_candle: 6
              colour: red
            """, "colour"),
        ]
        for body, key in cases:
            with self.assertRaises(ValueError, msg=body) as ctx:
                load_config(self._write(body))
            self.assertIn(key, str(ctx.exception))

    def test_script_is_loaded(self) -> None:
        path = self._write("""
            script:
              - {tick: 2, action: buy, symbol: TCS, quantity: 1}
        """)
        cfg = load_config(path)
        self.assertEqual(cfg.script, [{'tick': 2, 'action': 'buy', 'symbol': 'TCS', 'quantity': 1}])


if __name__ == '__main__':
    unittest.main()
