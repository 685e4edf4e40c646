"""
Configuration schema and loader.

This module defines dataclasses that mirror the expected structure of
the YAML configuration file (`config.yaml`).  A helper function
`load_config()` reads a YAML file from disk and returns an instance
of `Config` populated with defaults for any missing fields.

The defaults reproduce the reference simulator: a 1.2 second tick,
6-tick candles, 300 candles of history, ₹1,00,000 of starting cash and
the illustrative Indian intraday fee schedule.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
import yaml


@dataclass
class InstrumentConfig:
    """One tradable instrument of the simulated universe."""

    symbol: str
    name: str
    price: float


DEFAULT_UNIVERSE: List[Dict[str, Any]] = [
    {'symbol': "RELIANCE", 'name': "Reliance Industries", 'price': 2950.0},
    {'symbol': "TCS", 'name': "Tata Consultancy Services", 'price': 3890.0},
    {'symbol': "INFY", 'name': "Infosys", 'price': 1520.0},
    {'symbol': "HDFCBANK", 'name': "HDFC Bank", 'price': 1645.0},
    {'symbol': "ICICIBANK", 'name': "ICICI Bank", 'price': 1120.0},
    {'symbol': "SBIN", 'name': "State Bank of India", 'price': 812.0},
    {'symbol': "ITC", 'name': "ITC", 'price': 438.0},
    {'symbol': "WIPRO", 'name': "Wipro", 'price': 495.0},
]


@dataclass
class SimulationConfig:
    """Price simulation parameters.

    Attributes
    ----------
    tick_interval : float
        Seconds between two price updates when running in real time.
    volatility : float
        Width of the uniform random shock applied on every tick.  The
        shock is drawn from ``[-volatility/2, +volatility/2]``.
    drift_step : float
        Maximum change of the drift term per tick.
    drift_limit : float
        Drift is clamped to ``[-drift_limit, +drift_limit]``.
    initial_drift : float
        Initial drift of each instrument is drawn from
        ``[-initial_drift, +initial_drift]``.
    seed : int, optional
        Seed for the random source.  `None` gives a fresh sequence.
    timezone : str
        IANA timezone used for candle and order time labels.
    """

    tick_interval: float = 1.2
    volatility: float = 0.00015
    drift_step: float = 0.00001
    drift_limit: float = 0.00025
    initial_drift: float = 0.0001
    seed: Optional[int] = None
    timezone: str = "Asia/Kolkata"


@dataclass
class CandleConfig:
    """Candle aggregation and chart window parameters."""

    ticks_per_candle: int = 6
    max_history: int = 300
    visible_count: int = 60
    min_visible: int = 20
    max_visible: int = 120


@dataclass
class LedgerConfig:
    """Paper-trading account parameters."""

    starting_cash: float = 100_000.0
    max_orders: int = 60


@dataclass
class FeeConfig:
    """Rates of the illustrative intraday fee schedule.

    The formula itself lives in `mocktrader.execution.charges`; these
    are only the constants it is evaluated with.
    """

    brokerage_rate: float = 0.0003
    brokerage_cap: float = 20.0
    stt_rate: float = 0.00025
    exchange_rate: float = 0.0000345
    sebi_rate: float = 0.000001
    stamp_rate: float = 0.00003
    gst_rate: float = 0.18
    dp_charge: float = 13.5


@dataclass
class ReportConfig:
    """Report output settings."""

    out_dir: str = "results"
    ema_period: int = 10


@dataclass
class Config:
    """Root configuration for the simulator.

    Attributes
    ----------
    instruments : List[InstrumentConfig]
        The fixed instrument universe.
    selected : str
        Symbol whose candles are built when the session starts.
    simulation : SimulationConfig
        Price generator parameters.
    candles : CandleConfig
        Candle aggregator parameters.
    ledger : LedgerConfig
        Account parameters.
    fees : FeeConfig
        Fee schedule rates.
    script : list of dict
        Commands replayed by the CLI, each with a ``tick`` and an
        ``action`` (``buy``, ``sell``, ``deposit``, ``withdraw`` or
        ``select``) plus the action's arguments.
    report : ReportConfig
        Report output settings.
    """

    instruments: List[InstrumentConfig] = field(
        default_factory=lambda: [InstrumentConfig(**raw) for raw in DEFAULT_UNIVERSE]
    )
    selected: str = "RELIANCE"
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    candles: CandleConfig = field(default_factory=CandleConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    fees: FeeConfig = field(default_factory=FeeConfig)
    script: List[Dict[str, Any]] = field(default_factory=list)
    report: ReportConfig = field(default_factory=ReportConfig)


def _merge_dict(defaults: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries.

    The values in `override` take precedence over those in `defaults`.
    This helper is used when loading YAML into nested dataclasses.
    """
    result: Dict[str, Any] = defaults.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def validate_config(cfg: Config) -> Config:
    """Check a configuration for values the simulator cannot run with.

    Raises
    ------
    ValueError
        On an empty or duplicated universe, non-positive prices, caps
        or intervals, or a selected symbol outside the universe.
    """
    if not cfg.instruments:
        raise ValueError("At least one instrument must be configured")
    symbols = [inst.symbol for inst in cfg.instruments]
    duplicates = sorted({s for s in symbols if symbols.count(s) > 1})
    if duplicates:
        raise ValueError(f"Duplicate instrument symbols: {duplicates}")
    for inst in cfg.instruments:
        if not inst.price > 0:
            raise ValueError(f"Instrument {inst.symbol} must have a positive price, got {inst.price}")
    if cfg.selected not in symbols:
        raise ValueError(f"Selected symbol {cfg.selected!r} is not in the instrument universe")
    if not cfg.simulation.tick_interval > 0:
        raise ValueError("simulation.tick_interval must be positive")
    if cfg.simulation.volatility < 0 or cfg.simulation.drift_step < 0:
        raise ValueError("simulation.volatility and simulation.drift_step must not be negative")
    if cfg.candles.ticks_per_candle < 1 or cfg.candles.max_history < 1:
        raise ValueError("candles.ticks_per_candle and candles.max_history must be at least 1")
    if cfg.candles.min_visible > cfg.candles.max_visible:
        raise ValueError("candles.min_visible must not exceed candles.max_visible")
    if cfg.ledger.starting_cash < 0:
        raise ValueError("ledger.starting_cash must not be negative")
    if cfg.ledger.max_orders < 1:
        raise ValueError("ledger.max_orders must be at least 1")
    return cfg


def _instrument(item: Any) -> InstrumentConfig:
    if not isinstance(item, dict):
        raise ValueError(f"Instrument entries must be mappings, got {item!r}")
    for key in ('symbol', 'price'):
        if key not in item:
            raise ValueError(f"Instrument entry {item!r} is missing '{key}'")
    try:
        price = float(item['price'])
    except (TypeError, ValueError):
        raise ValueError(f"Instrument {item['symbol']} has a non-numeric price {item['price']!r}") from None
    return InstrumentConfig(
        symbol=str(item['symbol']).upper(),
        name=str(item.get('name', item['symbol'])),
        price=price,
    )


def _section(cls: type, name: str, merged: Dict[str, Any]) -> Any:
    """Build the dataclass for one top-level section, rejecting unknown keys."""
    values = merged.get(name)
    if not isinstance(values, dict):
        raise ValueError(f"Section '{name}' must be a mapping, got {values!r}")
    unknown = sorted(set(values) - set(cls.__dataclass_fields__))
    if unknown:
        raise ValueError(f"Unknown key(s) in '{name}': {', '.join(map(str, unknown))}")
    return cls(**values)


def load_config(path: str) -> Config:
    """Load a configuration file from the given YAML path.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Config
        A populated, validated configuration object.  Missing fields are
        filled with the defaults defined in the dataclasses.
    """
    with open(path, "r", encoding="utf-8") as fh:
        raw: Dict[str, Any] = yaml.safe_load(fh) or {}

    defaults = asdict(Config())
    merged = _merge_dict(defaults, raw)

    instruments = [_instrument(item) for item in merged.get('instruments') or []]
    symbols = [inst.symbol for inst in instruments]
    selected = str(merged.get('selected') or (symbols[0] if symbols else "")).upper()
    # A universe override without an explicit selection starts on its first symbol
    if 'instruments' in raw and 'selected' not in raw and symbols:
        selected = symbols[0]

    cfg = Config(
        instruments=instruments,
        selected=selected,
        simulation=_section(SimulationConfig, 'simulation', merged),
        candles=_section(CandleConfig, 'candles', merged),
        ledger=_section(LedgerConfig, 'ledger', merged),
        fees=_section(FeeConfig, 'fees', merged),
        script=list(merged.get('script') or []),
        report=_section(ReportConfig, 'report', merged),
    )
    return validate_config(cfg)
