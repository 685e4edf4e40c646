"""
Application entry point.

This module defines a simple command-line interface for running the
mock trading simulator.  ``simulate`` runs a fixed number of ticks as
fast as possible on a simulated clock; ``live`` ticks in real time until
the tick limit is reached or Ctrl+C is pressed.  Both replay the
commands scripted in the configuration and write a session report.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

import pandas as pd

from .config.schema import Config, load_config
from .execution.session import TradingSession
from .reporting.report import generate_session_report
from .utils.timeutils import ManualClock


def _setup_logging(verbose: bool) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Parse command-line arguments and dispatch to the appropriate mode."""
    parser = argparse.ArgumentParser(description="Mock trading simulator")
    parser.add_argument('mode', choices=['simulate', 'live'], help="Operating mode")
    parser.add_argument('--config', default='config.yaml', help="Path to configuration YAML file")
    parser.add_argument('--ticks', type=int, default=None, help="Number of ticks to run (default: 500 for simulate, unlimited for live)")
    parser.add_argument('--seed', type=int, default=None, help="Seed for the price generator")
    parser.add_argument('--out', default=None, help="Report output directory")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    # Without a config file the built-in universe and defaults are used
    if os.path.exists(args.config):
        config = load_config(args.config)
    else:
        logging.info("No configuration at %s, using defaults", args.config)
        config = Config()
    if args.seed is not None:
        config.simulation.seed = args.seed
    out_dir = args.out or config.report.out_dir

    if args.mode == 'simulate':
        ticks = args.ticks if args.ticks is not None else 500
        start = pd.Timestamp.now(tz=config.simulation.timezone).floor('s')
        session = TradingSession(config, clock=ManualClock(start, config.simulation.timezone))
        logging.info("Running simulation for %d ticks...", ticks)
        session.run(max_ticks=ticks, realtime=False)
    else:
        session = TradingSession(config)
        logging.info("Starting live simulation, tick every %.1fs...", config.simulation.tick_interval)
        session.run(max_ticks=args.ticks, realtime=True)

    generate_session_report(session, out_dir=out_dir, ema_period=config.report.ema_period)
    logging.info("Session complete. Results saved to the '%s' directory.", out_dir)


if __name__ == '__main__':
    main()
