"""Strategy protocol and shared result type.

Defines the interface the simulation engine calls once per tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

from voltrade.market.models import Trade
from voltrade.strategy.indicators import VolatilityBands

if TYPE_CHECKING:
    from voltrade.context import SimulationContext

ACTION_BUY = "buy"
ACTION_SELL = "sell"
ACTION_HOLD = "hold"


@dataclass(frozen=True)
class TickDecision:
    """What the strategy did on one tick.

    ``trade`` is set for ``buy`` / ``sell`` and ``None`` for ``hold``.
    """

    action: str
    reason: str
    trade: Optional[Trade] = None


@runtime_checkable
class StrategyProtocol(Protocol):
    """Interface that a per-tick strategy must satisfy."""

    def evaluate(
        self,
        ctx: SimulationContext,
        price: float,
        bands: VolatilityBands,
        timestamp: int,
    ) -> TickDecision:
        """Decide on this tick, mutating ``ctx.ledger`` / ``ctx.trade_log``."""
        ...
