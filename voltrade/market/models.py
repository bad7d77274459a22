"""Simulation data models — typed representations of ticks, trades and state."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional

TRADE_BUY = "BUY"
TRADE_SELL = "SELL"

STATUS_OPEN = "OPEN"
STATUS_CLOSED = "CLOSED"


@dataclass(frozen=True)
class PricePoint:
    """One simulated tick with its volatility band."""

    timestamp: int  # epoch milliseconds
    price: float
    volatility: float  # window standard deviation
    upper_band: float
    lower_band: float
    volume: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Trade:
    """An executed trade.

    A round trip produces two records: the BUY stays ``OPEN`` forever and
    the closing SELL is logged separately as ``CLOSED``.
    """

    id: str
    type: str  # "BUY" or "SELL"
    entry_price: float
    quantity: int
    timestamp: int
    reason: str
    status: str  # "OPEN" or "CLOSED"
    exit_price: Optional[float] = None  # SELL only
    pnl: Optional[float] = None  # SELL only

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SystemState:
    """Snapshot of the position ledger plus the driver's run flag."""

    is_running: bool
    balance: float
    shares: int
    entry_price: Optional[float]
    peak_price: Optional[float]
    stop_loss_level: Optional[float]
    total_trades: int
    winning_trades: int

    @property
    def position(self) -> str:
        """``"LONG"`` while shares are held, ``"FLAT"`` otherwise."""
        return "LONG" if self.shares > 0 else "FLAT"

    @property
    def win_rate(self) -> float:
        """Winning round trips as a percentage (0.0 with no trades)."""
        if self.total_trades == 0:
            return 0.0
        return self.winning_trades / self.total_trades * 100.0

    def to_dict(self) -> dict:
        return asdict(self)


class AnalysisStatus(str, Enum):
    """Lifecycle of the advisory text request."""

    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"
