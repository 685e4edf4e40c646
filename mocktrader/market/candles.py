"""
Tick to candle aggregation.

Every instrument has its own small state machine: either no candle has
been started yet, or a candle is accumulating ticks.  Once a candle has
seen `ticks_per_candle` ticks it is sealed into the closed history and
a fresh candle is opened at the sealed close with a tick count of zero.

The history handed back to callers always ends with the open candle and
never holds more than `max_history` entries; the oldest candles are
dropped first.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional
import itertools
import logging


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candle:
    """An OHLC aggregate over a fixed number of ticks."""
    id: int
    time_label: str
    open: float
    high: float
    low: float
    close: float
    tick_count: int


class CandlePhase(Enum):
    NO_CANDLE = "no_candle"
    ACCUMULATING = "accumulating"


@dataclass
class CandleState:
    """Aggregation state of one instrument."""
    phase: CandlePhase = CandlePhase.NO_CANDLE
    open_candle: Optional[Candle] = None
    closed: List[Candle] = field(default_factory=list)

    def history(self) -> List[Candle]:
        if self.open_candle is None:
            return list(self.closed)
        return self.closed + [self.open_candle]


class CandleAggregator:
    """Fold per-instrument price ticks into OHLC candles.

    Parameters
    ----------
    ticks_per_candle : int
        Number of ticks after which the open candle is sealed.
    max_history : int
        Maximum number of candles kept per instrument, open candle
        included.
    """

    def __init__(self, ticks_per_candle: int = 6, max_history: int = 300) -> None:
        self.ticks_per_candle = ticks_per_candle
        self.max_history = max_history
        self._states: Dict[str, CandleState] = {}
        self._ids = itertools.count(1)

    def state(self, symbol: str) -> CandleState:
        return self._states.setdefault(symbol, CandleState())

    def ingest(self, symbol: str, price: float, time_label: str) -> List[Candle]:
        """Apply one tick and return the updated candle history.

        Parameters
        ----------
        symbol : str
            Instrument the tick belongs to.
        price : float
            Traded price of the tick.
        time_label : str
            Label stamped on the candle touched by this tick.

        Returns
        -------
        list of Candle
            Closed candles followed by the open candle, oldest first.
        """
        state = self.state(symbol)

        if state.phase is CandlePhase.NO_CANDLE:
            state.open_candle = Candle(
                id=next(self._ids),
                time_label=time_label,
                open=price,
                high=price,
                low=price,
                close=price,
                tick_count=1,
            )
            state.phase = CandlePhase.ACCUMULATING
        else:
            current = state.open_candle
            state.open_candle = replace(
                current,
                high=max(current.high, price),
                low=min(current.low, price),
                close=price,
                tick_count=current.tick_count + 1,
                time_label=time_label,
            )

        if state.open_candle.tick_count >= self.ticks_per_candle:
            sealed = state.open_candle
            state.closed.append(sealed)
            state.open_candle = Candle(
                id=next(self._ids),
                time_label=time_label,
                open=sealed.close,
                high=sealed.close,
                low=sealed.close,
                close=sealed.close,
                tick_count=0,
            )
            logger.debug(
                "Sealed %s candle #%d O=%.2f H=%.2f L=%.2f C=%.2f",
                symbol, sealed.id, sealed.open, sealed.high, sealed.low, sealed.close,
            )

        # The open candle counts towards the cap
        overflow = len(state.closed) + 1 - self.max_history
        if overflow > 0:
            del state.closed[:overflow]

        return state.history()

    def history(self, symbol: str) -> List[Candle]:
        """Current history for `symbol` without ingesting anything."""
        state = self._states.get(symbol)
        return state.history() if state else []

    def open_candle(self, symbol: str) -> Optional[Candle]:
        state = self._states.get(symbol)
        return state.open_candle if state else None

    def reset(self, symbol: str) -> None:
        """Forget all candles of `symbol`; other instruments are untouched."""
        self._states.pop(symbol, None)
