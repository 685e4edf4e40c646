"""
Synthetic price generation.

Prices follow a multiplicative random walk: each tick moves the price
by a small drift plus a uniform random shock.  The drift itself wanders
slowly inside a fixed band, which gives short runs of momentum without
letting any instrument trend away indefinitely.

`MarketSimulator.tick()` never mutates the snapshot it is given; it
returns a new mapping of `Instrument` records.  With a seeded random
source the whole price path is reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Mapping, Optional
import math

import numpy as np

from ..config.schema import InstrumentConfig, SimulationConfig


Universe = Dict[str, "Instrument"]


@dataclass(frozen=True)
class Instrument:
    """Simulated state of one instrument after a tick.

    `open` is the price the instrument had when the simulator started;
    `change` and `change_percent` are measured against it.
    """
    symbol: str
    name: str
    price: float
    drift: float = 0.0
    open: float = 0.0
    last: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0


def next_price(
    previous_price: float,
    drift: float,
    rng: np.random.Generator,
    volatility: float = 0.00015,
) -> float:
    """Return the next simulated price.

    Parameters
    ----------
    previous_price : float
        Last price of the instrument.  A non-finite value yields ``0.0``.
    drift : float
        Directional bias added to the random shock.
    rng : numpy.random.Generator
        Random source for the shock.
    volatility : float
        The shock is uniform in ``[-volatility/2, +volatility/2]``.

    Returns
    -------
    float
        ``previous_price * (1 + drift + shock)`` rounded to 2 decimals.
    """
    if not math.isfinite(previous_price):
        return 0.0
    shock = float(rng.uniform(-volatility / 2, volatility / 2))
    percent_move = drift + shock
    return round(previous_price * (1 + percent_move), 2)


def evolve_drift(
    drift: float,
    rng: np.random.Generator,
    step: float = 0.00001,
    limit: float = 0.00025,
) -> float:
    """Random-walk the drift by at most `step` and clamp it to ``±limit``."""
    base = drift if math.isfinite(drift) else 0.0
    moved = base + float(rng.uniform(-step, step))
    return max(min(moved, limit), -limit)


class MarketSimulator:
    """Advance every instrument of a universe by one tick at a time."""

    def __init__(self, config: SimulationConfig, rng: Optional[np.random.Generator] = None) -> None:
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)

    def create_universe(self, instruments: Iterable[InstrumentConfig]) -> Universe:
        """Build the initial snapshot with a random starting drift per instrument."""
        spread = self.config.initial_drift
        universe: Universe = {}
        for inst in instruments:
            universe[inst.symbol] = Instrument(
                symbol=inst.symbol,
                name=inst.name,
                price=float(inst.price),
                drift=float(self.rng.uniform(-spread, spread)),
                open=float(inst.price),
                last=float(inst.price),
            )
        return universe

    def tick_instrument(self, inst: Instrument) -> Instrument:
        open_price = inst.open if math.isfinite(inst.open) and inst.open else inst.price
        drift = evolve_drift(inst.drift, self.rng, self.config.drift_step, self.config.drift_limit)
        price = next_price(inst.price, drift, self.rng, self.config.volatility)
        change = round(price - open_price, 2)
        change_percent = round(change / open_price * 100, 2) if open_price else 0.0
        return replace(
            inst,
            open=open_price,
            last=inst.price,
            price=price,
            drift=drift,
            change=change,
            change_percent=change_percent,
        )

    def tick(self, universe: Mapping[str, Instrument]) -> Universe:
        """Return a new snapshot with every instrument advanced one tick.

        Instruments are processed in the mapping's order, so the random
        draws and therefore the prices are reproducible for a given seed.
        """
        return {symbol: self.tick_instrument(inst) for symbol, inst in universe.items()}


def live_prices(universe: Mapping[str, Instrument]) -> Dict[str, float]:
    """Map each symbol to its last traded price."""
    return {symbol: inst.price for symbol, inst in universe.items()}
