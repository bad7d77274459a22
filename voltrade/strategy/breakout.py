"""Volatility Breakout strategy — band breakout entry, trailing-stop exit.

Two states, FLAT and LONG.  Each tick runs, in order:

1. Exit management (LONG only): a new high ratchets the stop up; a price
   at or below the stop sells the whole position and ends the tick.
2. Entry (FLAT only, once the lookback window is full): a price above the
   upper band buys ``floor(balance / price)`` shares.

At most one of exit or entry fires per tick.
"""

import logging
import uuid

from voltrade.context import SimulationContext
from voltrade.market.models import (
    STATUS_CLOSED,
    STATUS_OPEN,
    TRADE_BUY,
    TRADE_SELL,
    Trade,
)
from voltrade.risk.position_sizer import calculate_quantity
from voltrade.strategy.base import ACTION_BUY, ACTION_HOLD, ACTION_SELL, TickDecision
from voltrade.strategy.indicators import VolatilityBands

logger = logging.getLogger("voltrade")


class VolatilityBreakoutStrategy:
    """Implements ``StrategyProtocol``.

    Also populates ``self.last_insight`` with the checks evaluated on the
    latest tick for the dashboard.
    """

    def __init__(self) -> None:
        self.last_insight: dict = {}

    def evaluate(
        self,
        ctx: SimulationContext,
        price: float,
        bands: VolatilityBands,
        timestamp: int,
    ) -> TickDecision:
        ledger = ctx.ledger
        insight: dict = {
            "strategy": "volatility_breakout",
            "price": round(price, 2),
            "upper_band": round(bands.upper, 2),
            "lower_band": round(bands.lower, 2),
            "checks": {},
        }
        self.last_insight = insight

        # 1 ── Exit management
        if ledger.is_long:
            insight["checks"]["new_peak"] = price > ledger.peak_price
            if price > ledger.peak_price:
                new_stop = ledger.raise_stop(price)
                logger.debug("Trailing stop raised to %.2f", new_stop)

            stop_hit = ledger.is_stop_hit(price)
            insight["checks"]["stop_hit"] = stop_hit
            if stop_hit:
                return self._exit(ctx, price, timestamp, insight)

            insight["result"] = "holding"
            return TickDecision(action=ACTION_HOLD, reason="Holding position")

        # 2 ── Entry evaluation
        insight["checks"]["window_full"] = ctx.has_full_window
        if not ctx.has_full_window:
            insight["result"] = "warming_up"
            return TickDecision(action=ACTION_HOLD, reason="Warming up lookback window")

        insight["checks"]["breakout"] = price > bands.upper
        if price <= bands.upper:
            insight["result"] = "no_breakout"
            return TickDecision(action=ACTION_HOLD, reason="No breakout")

        quantity = calculate_quantity(ledger.balance, price)
        insight["checks"]["affordable"] = quantity > 0
        if quantity == 0:
            insight["result"] = "insufficient_balance"
            return TickDecision(action=ACTION_HOLD, reason="Insufficient balance")

        return self._enter(ctx, price, quantity, bands, timestamp, insight)

    # ── Actions ──────────────────────────────────────────────────────────

    def _enter(
        self,
        ctx: SimulationContext,
        price: float,
        quantity: int,
        bands: VolatilityBands,
        timestamp: int,
        insight: dict,
    ) -> TickDecision:
        ctx.ledger.open_position(price, quantity)
        reason = f"Vol Breakout (Price {price:.2f} > Band {bands.upper:.2f})"
        trade = Trade(
            id=uuid.uuid4().hex,
            type=TRADE_BUY,
            entry_price=price,
            quantity=quantity,
            timestamp=timestamp,
            reason=reason,
            status=STATUS_OPEN,
        )
        ctx.trade_log.append(trade)
        insight["result"] = "entered"
        logger.info(
            "BUY %d @ %.2f — stop %.2f",
            quantity, price, ctx.ledger.stop_loss_level,
        )
        return TickDecision(action=ACTION_BUY, reason=reason, trade=trade)

    def _exit(
        self,
        ctx: SimulationContext,
        price: float,
        timestamp: int,
        insight: dict,
    ) -> TickDecision:
        ledger = ctx.ledger
        entry_price = ledger.entry_price
        quantity = ledger.shares
        peak = ledger.peak_price
        pnl = ledger.close_position(price)

        reason = (
            f"Trailing Stop Hit (-{ledger.stop_pct * 100:g}% "
            f"from peak ${peak:.2f})"
        )
        trade = Trade(
            id=uuid.uuid4().hex,
            type=TRADE_SELL,
            entry_price=entry_price,
            exit_price=price,
            quantity=quantity,
            timestamp=timestamp,
            pnl=pnl,
            reason=reason,
            status=STATUS_CLOSED,
        )
        ctx.trade_log.append(trade)
        insight["result"] = "exited"
        logger.info("SELL %d @ %.2f — P&L %.2f", quantity, price, pnl)
        return TickDecision(action=ACTION_SELL, reason=reason, trade=trade)
