"""Market analyst — fire-and-forget advisory commentary.

Each request runs as its own ``asyncio`` task and delivers its text into a
single-slot cell.  A newer request supersedes an older one: an older call
that resolves late never overwrites a newer result.  Nothing here feeds back
into trading decisions, and failures never reach the tick loop.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from voltrade.advisory.gemini_client import GeminiClient
from voltrade.market.models import AnalysisStatus, PricePoint, Trade

logger = logging.getLogger("voltrade.advisory")

INITIAL_MESSAGE = "Initialize simulation to begin AI analysis..."
RESET_MESSAGE = "Simulation reset. Waiting for data..."
MISSING_KEY_MESSAGE = "API Key missing. Cannot generate analysis."
EMPTY_RESPONSE_MESSAGE = "Analysis unavailable."
DEGRADED_MESSAGE = (
    "AI Analysis temporarily unavailable due to network or API limits."
)

_PROMPT_PRICES = 15


def build_analysis_prompt(
    points: list[PricePoint],
    last_trade: Optional[Trade],
    position: str,
    symbol: str = "SPY",
    lookback: int = 30,
    stop_pct: float = 0.02,
) -> str:
    """Format the recent market context into a commentary prompt.

    Raises ``ValueError`` if *points* is empty.
    """
    if not points:
        raise ValueError("Need at least 1 price point for analysis, got 0")

    prices = ", ".join(f"{p.price:.2f}" for p in points[-_PROMPT_PRICES:])
    current = points[-1]
    lines = [
        f"You are an algorithmic trading assistant specializing in {symbol}.",
        "",
        "Current Market Context:",
        f"- Recent Prices: [{prices}]",
        f"- Current Price: ${current.price:.2f}",
        f"- {lookback}-Period Volatility: {current.volatility:.2f}",
        f"- Current Position: {position}",
    ]
    if last_trade is not None:
        trade_price = last_trade.exit_price or last_trade.entry_price
        lines.append(f"- Last Trade: {last_trade.type} at ${trade_price:.2f}")
    lines += [
        "",
        f"The strategy uses a {lookback}-period volatility-adjusted lookback "
        f"for breakouts and a strict {stop_pct * 100:g}% trailing stop-loss.",
        "",
        "Provide a concise, 2-sentence analysis.",
        "1. Interpret the immediate trend (breakout vs consolidation).",
        "2. Comment on risk management (is the stop loss likely to hit?).",
        "Do not give financial advice. Keep it technical and observational.",
    ]
    return "\n".join(lines)


class MarketAnalyst:
    """Owns the latest-advisory cell and the in-flight request tasks.

    Args:
        client: A ``GeminiClient`` (or duck-type), ``None`` when no
                credential is configured.
        symbol: Instrument name used in the prompt.
        lookback: Lookback period quoted in the prompt.
        stop_pct: Trailing-stop fraction quoted in the prompt.
    """

    def __init__(
        self,
        client: Optional[GeminiClient],
        symbol: str = "SPY",
        lookback: int = 30,
        stop_pct: float = 0.02,
    ) -> None:
        self._client = client
        self._symbol = symbol
        self._lookback = lookback
        self._stop_pct = stop_pct
        self._tasks: set[asyncio.Task] = set()
        self._seq: int = 0
        self._delivered_seq: int = 0
        self.text: str = INITIAL_MESSAGE
        self.status: AnalysisStatus = AnalysisStatus.IDLE
        self.requested_at: Optional[str] = None
        self.completed_at: Optional[str] = None

        if client is None:
            logger.warning("No Gemini API key configured — advisory disabled.")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def snapshot(self) -> dict:
        return {
            "text": self.text,
            "status": self.status.value,
            "enabled": self.enabled,
            "requested_at": self.requested_at,
            "completed_at": self.completed_at,
        }

    def reset(self) -> None:
        """Return the cell to IDLE; in-flight results are discarded."""
        self._delivered_seq = self._seq
        self.text = RESET_MESSAGE
        self.status = AnalysisStatus.IDLE
        self.requested_at = None
        self.completed_at = None

    # ── Requests ─────────────────────────────────────────────────────────

    def request(
        self,
        points: list[PricePoint],
        last_trade: Optional[Trade],
        position: str,
    ) -> Optional[asyncio.Task]:
        """Start an analysis without waiting for it.

        Returns the task, or ``None`` if no request was made (no credential,
        no data yet, or no running event loop to schedule it on).
        """
        if self._client is None:
            self.text = MISSING_KEY_MESSAGE
            return None
        if not points:
            logger.debug("Analysis skipped — no price data yet.")
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Analysis skipped — no running event loop.")
            return None

        prompt = build_analysis_prompt(
            points, last_trade, position,
            symbol=self._symbol,
            lookback=self._lookback,
            stop_pct=self._stop_pct,
        )
        self._seq += 1
        self.status = AnalysisStatus.ANALYZING
        self.requested_at = datetime.now(timezone.utc).isoformat()

        task = loop.create_task(self._analyze(self._seq, prompt))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for every in-flight request to settle."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _analyze(self, seq: int, prompt: str) -> None:
        try:
            text = await self._client.generate_content(prompt)
            status = AnalysisStatus.COMPLETE
            if not text:
                text = EMPTY_RESPONSE_MESSAGE
        except Exception as exc:
            logger.error("Gemini analysis failed: %s", exc)
            text = DEGRADED_MESSAGE
            status = AnalysisStatus.ERROR

        if seq <= self._delivered_seq:
            logger.debug("Discarding superseded analysis #%d", seq)
            return
        self._delivered_seq = seq
        self.text = text
        self.status = status
        self.completed_at = datetime.now(timezone.utc).isoformat()
        # A newer request is still in flight.
        if seq < self._seq:
            self.status = AnalysisStatus.ANALYZING
