"""Synthetic price feed — biased random walk, no I/O."""

import random
from typing import Optional

# Prices never fall to zero or below.
MIN_PRICE = 0.01


class PriceGenerator:
    """Produces the next synthetic price from the previous one.

    Formula::

        change    = prev × (drift + volatility × U),  U ~ Uniform[-1, 1]
        new_price = max(MIN_PRICE, prev + change)

    Args:
        drift: Per-tick upward bias (e.g. 0.00005).
        volatility: Per-tick noise scale (e.g. 0.002).
        rng: Optional ``random.Random`` for reproducible runs.
    """

    def __init__(
        self,
        drift: float = 0.00005,
        volatility: float = 0.002,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.drift = drift
        self.volatility = volatility
        self._rng = rng or random.Random()

    def next_price(self, prev_price: float) -> float:
        """Return the next price in the walk."""
        u = self._rng.uniform(-1.0, 1.0)
        change = prev_price * (self.drift + self.volatility * u)
        return max(MIN_PRICE, prev_price + change)

    def next_volume(self) -> int:
        """Return a synthetic traded volume for the tick."""
        return self._rng.randint(0, 9999)
