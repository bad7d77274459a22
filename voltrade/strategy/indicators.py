"""Technical indicators — rolling volatility bands. Pure functions, no I/O."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class VolatilityBands:
    """Rolling mean, population σ and the breakout bands around the mean."""

    mean: float
    stddev: float
    upper: float
    lower: float


def calculate_std_dev(values: list[float]) -> float:
    """Population standard deviation (divides by ``len(values)``).

    Returns ``0.0`` for fewer than two values.
    """
    n = len(values)
    if n < 2:
        return 0.0
    mean = sum(values) / n
    variance = sum((x - mean) ** 2 for x in values) / n
    return math.sqrt(variance)


# ── Volatility bands ─────────────────────────────────────────────────────


def calculate_volatility_bands(
    prices: list[float],
    period: int = 30,
    multiplier: float = 2.0,
) -> VolatilityBands:
    """Calculate breakout bands over the last *period* prices.

    Middle = mean(window)
    Upper  = middle + *multiplier* × σ
    Lower  = middle − *multiplier* × σ

    When fewer than *period* prices exist the whole history is used, so
    the band can be drawn before entries are allowed.

    Raises ``ValueError`` if *prices* is empty.
    """
    if not prices:
        raise ValueError("Need at least 1 price for volatility bands, got 0")

    window = prices[-period:]
    mean = sum(window) / len(window)
    sigma = calculate_std_dev(window)

    return VolatilityBands(
        mean=mean,
        stddev=sigma,
        upper=mean + sigma * multiplier,
        lower=mean - sigma * multiplier,
    )
