"""VolTrade — simulation engine (one tick).

Connects the price feed, the volatility band and the strategy into a single
step.  Price → band → PricePoint → strategy decision → ledger / trade log.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Optional

from voltrade.config import Config
from voltrade.context import SimulationContext
from voltrade.market.models import PricePoint
from voltrade.market.price_generator import PriceGenerator
from voltrade.strategy.base import StrategyProtocol
from voltrade.strategy.breakout import VolatilityBreakoutStrategy
from voltrade.strategy.indicators import calculate_volatility_bands

logger = logging.getLogger("voltrade")


class SimulationEngine:
    """Runs one fully serialized simulation tick per call.

    Args:
        config: Application configuration.
        strategy: A strategy implementing ``StrategyProtocol``.  Defaults to
                  ``VolatilityBreakoutStrategy``.
        generator: Price feed.  Defaults to a ``PriceGenerator`` seeded from
                   ``config.random_seed``.
    """

    def __init__(
        self,
        config: Config,
        strategy: Optional[StrategyProtocol] = None,
        generator: Optional[PriceGenerator] = None,
    ) -> None:
        self._config = config
        self._strategy = strategy or VolatilityBreakoutStrategy()
        self._generator = generator or PriceGenerator(
            drift=config.price_drift,
            volatility=config.price_volatility,
            rng=random.Random(config.random_seed),
        )
        self.ctx = SimulationContext(config)

    @property
    def strategy(self) -> StrategyProtocol:
        return self._strategy

    @property
    def last_price(self) -> float:
        """Most recent simulated price (the seed price before any tick)."""
        return self.ctx.last_price

    def reset(self) -> None:
        """Discard all session state and return to the seed price."""
        self.ctx.reset()

    # ── Single tick ──────────────────────────────────────────────────────

    def run_once(
        self,
        price: Optional[float] = None,
        utc_now: Optional[datetime] = None,
    ) -> dict:
        """Execute one simulation tick.

        Returns a dict describing the tick:

        - ``{"action": "hold", "reason": "...", "point": {...}}``
        - ``{"action": "buy" | "sell", "reason": "...", "point": {...},
          "trade": {...}}``

        Args:
            price: Price for this tick.  Defaults to the next value of the
                   random walk.  Accepting it as a parameter makes the
                   strategy testable with scripted price paths.
            utc_now: Tick time.  Defaults to ``datetime.now(UTC)``.
        """
        if utc_now is None:
            utc_now = datetime.now(timezone.utc)
        if price is None:
            price = self._generator.next_price(self.ctx.last_price)
        timestamp = int(utc_now.timestamp() * 1000)

        ctx = self.ctx
        ctx.last_price = price
        ctx.tick_count += 1

        # 1 ── Indicator update
        ctx.raw_prices.append(price)
        bands = calculate_volatility_bands(
            list(ctx.raw_prices),
            period=self._config.lookback_period,
            multiplier=self._config.volatility_multiplier,
        )
        point = PricePoint(
            timestamp=timestamp,
            price=price,
            volatility=bands.stddev,
            upper_band=bands.upper,
            lower_band=bands.lower,
            volume=self._generator.next_volume(),
        )
        ctx.chart.append(point)

        # 2 ── Strategy decision
        decision = self._strategy.evaluate(ctx, price, bands, timestamp)

        result: dict = {
            "action": decision.action,
            "reason": decision.reason,
            "point": point.to_dict(),
        }
        if decision.trade is not None:
            result["trade"] = decision.trade.to_dict()
        return result
