"""VolTrade — application configuration.

Loads .env variables into a typed config object.
Validates numeric ranges on startup.  Nothing is required: the advisory
credential is optional and every simulation parameter has a default.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    symbol: str
    initial_capital: float
    initial_price: float
    tick_interval_ms: int
    lookback_period: int
    volatility_multiplier: float
    trailing_stop_pct: float  # fraction, e.g. 0.02 for 2 %
    max_chart_points: int
    price_drift: float
    price_volatility: float
    random_seed: Optional[int]
    gemini_api_key: Optional[str]
    gemini_model: str
    log_level: str
    api_port: int

    @property
    def raw_history_size(self) -> int:
        """Capacity of the raw price window used for indicators."""
        return self.lookback_period + 50

    @property
    def advisory_enabled(self) -> bool:
        """``True`` when a Gemini credential is configured."""
        return bool(self.gemini_api_key)


def _positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending variable when
    a value is out of range.
    """
    load_dotenv(dotenv_path=env_path)

    seed = os.environ.get("RANDOM_SEED")
    api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")

    config = Config(
        symbol=os.environ.get("SYMBOL", "SPY"),
        initial_capital=float(os.environ.get("INITIAL_CAPITAL", "100000")),
        initial_price=float(os.environ.get("INITIAL_PRICE", "450.0")),
        tick_interval_ms=int(os.environ.get("TICK_INTERVAL_MS", "800")),
        lookback_period=int(os.environ.get("LOOKBACK_PERIOD", "30")),
        volatility_multiplier=float(os.environ.get("VOLATILITY_MULTIPLIER", "2.0")),
        trailing_stop_pct=float(os.environ.get("TRAILING_STOP_PCT", "0.02")),
        max_chart_points=int(os.environ.get("MAX_CHART_POINTS", "60")),
        price_drift=float(os.environ.get("PRICE_DRIFT", "0.00005")),
        price_volatility=float(os.environ.get("PRICE_VOLATILITY", "0.002")),
        random_seed=int(seed) if seed else None,
        gemini_api_key=api_key or None,
        gemini_model=os.environ.get("GEMINI_MODEL", "gemini-2.5-flash"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        api_port=int(os.environ.get("API_PORT", "8080")),
    )
    validate_config(config)
    return config


def validate_config(config: Config) -> None:
    """Raise ``ValueError`` if any simulation parameter is out of range."""
    _positive("INITIAL_CAPITAL", config.initial_capital)
    _positive("INITIAL_PRICE", config.initial_price)
    _positive("TICK_INTERVAL_MS", config.tick_interval_ms)
    _positive("LOOKBACK_PERIOD", config.lookback_period)
    _positive("VOLATILITY_MULTIPLIER", config.volatility_multiplier)
    _positive("MAX_CHART_POINTS", config.max_chart_points)
    if not 0 < config.trailing_stop_pct < 1:
        raise ValueError(
            f"TRAILING_STOP_PCT must be between 0 and 1, got {config.trailing_stop_pct}"
        )
    if config.price_volatility < 0:
        raise ValueError(
            f"PRICE_VOLATILITY must be non-negative, got {config.price_volatility}"
        )
