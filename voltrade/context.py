"""Simulation context — all mutable state of one simulation session.

Passed explicitly into every tick so nothing reads a stale copy of the
ledger or the histories.
"""

from collections import deque

from voltrade.config import Config
from voltrade.market.models import PricePoint
from voltrade.repos.trade_log import TradeLog
from voltrade.risk.ledger import PositionLedger


class SimulationContext:
    """Price histories, ledger and trade log for one session.

    Args:
        config: Application configuration (capacities, capital, stop).
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self.ledger = PositionLedger(
            initial_balance=config.initial_capital,
            stop_pct=config.trailing_stop_pct,
        )
        self.trade_log = TradeLog()
        self.raw_prices: deque[float] = deque(maxlen=config.raw_history_size)
        self.chart: deque[PricePoint] = deque(maxlen=config.max_chart_points)
        self.last_price: float = config.initial_price
        self.tick_count: int = 0

    def reset(self) -> None:
        """Back to the seed price with empty histories and a fresh ledger."""
        self.ledger.reset()
        self.trade_log.clear()
        self.raw_prices.clear()
        self.chart.clear()
        self.last_price = self.config.initial_price
        self.tick_count = 0

    @property
    def has_full_window(self) -> bool:
        """``True`` once the raw history covers the lookback period."""
        return len(self.raw_prices) >= self.config.lookback_period

    def price_points(self) -> list[PricePoint]:
        """Chart history, oldest first."""
        return list(self.chart)
