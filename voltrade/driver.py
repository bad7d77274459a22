"""SimulationDriver — periodic tick cadence and run/pause/reset lifecycle.

The driver owns the single ``SimulationEngine`` (and through it the
simulation context) and the advisory analyst.  Ticks run on one ``asyncio``
task and are synchronous, so one tick always completes before the next
starts; advisory requests run as independent tasks.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from voltrade.advisory.analyst import MarketAnalyst
from voltrade.advisory.gemini_client import GeminiClient
from voltrade.config import Config
from voltrade.engine import SimulationEngine
from voltrade.market.models import AnalysisStatus, SystemState
from voltrade.metrics.stats import calculate_stats
from voltrade.risk.ledger import LedgerInvariantError
from voltrade.strategy.base import ACTION_BUY, ACTION_SELL

logger = logging.getLogger("voltrade.driver")

# Points required before starting the simulation also kicks off an analysis.
_MIN_POINTS_FOR_AUTO_ANALYSIS = 5


def build_analyst(config: Config) -> MarketAnalyst:
    """Create the analyst, with a Gemini client only if a key is configured."""
    client = None
    if config.advisory_enabled:
        client = GeminiClient(config.gemini_api_key, config.gemini_model)
    return MarketAnalyst(
        client,
        symbol=config.symbol,
        lookback=config.lookback_period,
        stop_pct=config.trailing_stop_pct,
    )


class SimulationDriver:
    """Lifecycle manager for one simulation session.

    Args:
        config: Global ``Config``.
        engine: Optional pre-built ``SimulationEngine``.
        analyst: Optional pre-built ``MarketAnalyst``.
    """

    def __init__(
        self,
        config: Config,
        engine: Optional[SimulationEngine] = None,
        analyst: Optional[MarketAnalyst] = None,
    ) -> None:
        self._config = config
        self._engine = engine or SimulationEngine(config)
        self._analyst = analyst or build_analyst(config)
        self._running: bool = False
        self._task: Optional[asyncio.Task] = None
        self.last_error: Optional[str] = None

    # ── Public API ───────────────────────────────────────────────────────

    @property
    def engine(self) -> SimulationEngine:
        return self._engine

    @property
    def analyst(self) -> MarketAnalyst:
        return self._analyst

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def tick_interval(self) -> float:
        """Seconds between ticks."""
        return self._config.tick_interval_ms / 1000.0

    def start(self) -> None:
        """Begin periodic ticking on the running event loop.

        No-op when already running.
        """
        if self._running:
            return
        self._running = True
        self.last_error = None
        self._task = asyncio.get_running_loop().create_task(self._run_loop())
        logger.info(
            "Simulation started (tick every %d ms).", self._config.tick_interval_ms,
        )

        ctx = self._engine.ctx
        if (
            self._analyst.status == AnalysisStatus.IDLE
            and len(ctx.chart) > _MIN_POINTS_FOR_AUTO_ANALYSIS
        ):
            self.request_analysis()

    def pause(self) -> None:
        """Stop ticking and keep all state.  Safe to call repeatedly."""
        if not self._running and self._task is None:
            return
        self._running = False
        if self._task is not None:
            self._task.cancel()
            self._task = None
        logger.info("Simulation paused after %d ticks.", self._engine.ctx.tick_count)

    def reset(self) -> None:
        """Stop, then discard all histories, the ledger and the trade log."""
        self.pause()
        self._engine.reset()
        self._analyst.reset()
        self.last_error = None
        logger.info("Simulation reset.")

    def request_analysis(self) -> Optional[asyncio.Task]:
        """Fire-and-forget an advisory on the latest market data."""
        ctx = self._engine.ctx
        return self._analyst.request(
            ctx.price_points(),
            ctx.trade_log.latest(),
            ctx.ledger.snapshot().position,
        )

    def step(
        self,
        price: Optional[float] = None,
        utc_now: Optional[datetime] = None,
    ) -> dict:
        """Run exactly one tick and trigger an advisory after any trade."""
        result = self._engine.run_once(price=price, utc_now=utc_now)
        if result["action"] in (ACTION_BUY, ACTION_SELL):
            self.request_analysis()
        return result

    async def run(self, max_ticks: int, interval: float | None = None) -> list[dict]:
        """Run a fixed number of ticks and return the per-tick results.

        Args:
            max_ticks: Number of ticks to run.
            interval: Seconds between ticks.  Defaults to the configured
                      tick interval; ``0`` runs as fast as possible.

        Raises:
            RuntimeError: If the simulation is already ticking.
        """
        if self._running or self._task is not None:
            raise RuntimeError("Simulation is already running; pause it first")
        if interval is None:
            interval = self.tick_interval
        results: list[dict] = []
        self._running = True
        try:
            for _ in range(max_ticks):
                if not self._running:
                    break
                results.append(self.step())
                await asyncio.sleep(interval)
        finally:
            self._running = False
        return results

    def status(self) -> dict:
        """SystemState plus derived account metrics for display."""
        ctx = self._engine.ctx
        state = self.snapshot()
        mark = ctx.last_price
        return {
            **state.to_dict(),
            "symbol": self._config.symbol,
            "position": state.position,
            "last_price": round(mark, 2),
            "equity": round(ctx.ledger.equity(mark), 2),
            "unrealized_pnl": round(ctx.ledger.unrealized_pnl(mark), 2),
            "win_rate": round(state.win_rate, 1),
            "tick_count": ctx.tick_count,
            "last_error": self.last_error,
            "session": calculate_stats(ctx.trade_log.closed_trades()),
        }

    def snapshot(self) -> SystemState:
        return self._engine.ctx.ledger.snapshot(is_running=self._running)

    # ── Tick loop ────────────────────────────────────────────────────────

    async def _run_loop(self) -> None:
        tick = 0
        while self._running:
            tick += 1
            try:
                result = self.step()
            except LedgerInvariantError as exc:
                logger.exception("Tick %d violated a ledger invariant — halting.", tick)
                self.last_error = str(exc)
                self._running = False
                self._task = None
                return
            logger.debug("Tick %d: %s", tick, result["action"])
            await asyncio.sleep(self.tick_interval)
