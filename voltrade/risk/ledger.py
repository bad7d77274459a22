"""Position ledger — simulated cash and single-position bookkeeping, no I/O.

Holds the cash balance, the open position (if any) and round-trip counters.
Only the strategy mutates it.  Any call that would break the FLAT/LONG
invariants raises ``LedgerInvariantError``: those calls indicate a defect
in the caller, never a market condition.
"""

from typing import Optional

from voltrade.market.models import SystemState
from voltrade.risk.trailing_stop import TrailingStop

# Absorbs float rounding in ``floor(balance / price) * price``.
_BALANCE_EPSILON = 1e-6


class LedgerInvariantError(RuntimeError):
    """Raised when a ledger mutation would violate a position invariant."""


class PositionLedger:
    """Cash / position state for one instrument.

    Args:
        initial_balance: Starting cash (e.g. 100_000.0).
        stop_pct: Trailing-stop distance as a fraction (e.g. 0.02).
    """

    def __init__(self, initial_balance: float, stop_pct: float) -> None:
        if initial_balance <= 0:
            raise ValueError(
                f"initial_balance must be positive, got {initial_balance}"
            )
        self._initial_balance = initial_balance
        self._stop_pct = stop_pct
        self.reset()

    # ── Mutation ─────────────────────────────────────────────────────────

    def reset(self) -> None:
        """Return to the initial balance with no position and zero counters."""
        self._balance: float = self._initial_balance
        self._shares: int = 0
        self._entry_price: Optional[float] = None
        self._stop: Optional[TrailingStop] = None
        self._total_trades: int = 0
        self._winning_trades: int = 0

    def open_position(self, price: float, quantity: int) -> None:
        """Buy *quantity* shares at *price* and arm the trailing stop."""
        if quantity <= 0:
            raise LedgerInvariantError(
                f"quantity must be positive, got {quantity}"
            )
        if self._shares != 0:
            raise LedgerInvariantError(
                f"cannot open a position while holding {self._shares} shares"
            )
        cost = quantity * price
        if cost > self._balance + _BALANCE_EPSILON:
            raise LedgerInvariantError(
                f"cost {cost:.2f} exceeds balance {self._balance:.2f}"
            )

        self._balance = max(0.0, self._balance - cost)
        self._shares = quantity
        self._entry_price = price
        self._stop = TrailingStop(price, self._stop_pct)

    def close_position(self, price: float) -> float:
        """Sell the whole position at *price*.

        Returns:
            Realised P&L of the round trip.
        """
        if self._shares <= 0 or self._entry_price is None:
            raise LedgerInvariantError("cannot close: no open position")

        revenue = self._shares * price
        pnl = revenue - self._shares * self._entry_price

        self._balance += revenue
        self._shares = 0
        self._entry_price = None
        self._stop = None
        self._total_trades += 1
        if pnl > 0:
            self._winning_trades += 1
        return pnl

    def raise_stop(self, new_price: float) -> float:
        """Record a new peak and ratchet the stop up behind it.

        Returns:
            The new stop level.
        """
        if self._stop is None:
            raise LedgerInvariantError("cannot raise stop: no open position")
        if new_price <= self._stop.peak:
            raise LedgerInvariantError(
                f"new peak {new_price} must exceed current peak {self._stop.peak}"
            )
        self._stop.update(new_price)
        return self._stop.level

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def balance(self) -> float:
        """Cash not tied up in the position."""
        return self._balance

    @property
    def shares(self) -> int:
        return self._shares

    @property
    def is_long(self) -> bool:
        return self._shares > 0

    @property
    def entry_price(self) -> Optional[float]:
        return self._entry_price

    @property
    def peak_price(self) -> Optional[float]:
        """Highest price since entry, ``None`` when flat."""
        return self._stop.peak if self._stop else None

    @property
    def stop_loss_level(self) -> Optional[float]:
        """Current trailing-stop price, ``None`` when flat."""
        return self._stop.level if self._stop else None

    @property
    def stop_pct(self) -> float:
        return self._stop_pct

    def is_stop_hit(self, price: float) -> bool:
        """``True`` when long and *price* is at or below the stop."""
        return self._stop is not None and self._stop.is_hit(price)

    @property
    def total_trades(self) -> int:
        """Completed round trips."""
        return self._total_trades

    @property
    def winning_trades(self) -> int:
        return self._winning_trades

    def equity(self, mark_price: float) -> float:
        """Cash plus the position marked at *mark_price*."""
        return self._balance + self._shares * mark_price

    def unrealized_pnl(self, mark_price: float) -> float:
        """Open-position P&L at *mark_price* (0.0 when flat)."""
        if self._entry_price is None:
            return 0.0
        return (mark_price - self._entry_price) * self._shares

    def snapshot(self, is_running: bool = False) -> SystemState:
        """Freeze the current ledger into a ``SystemState``."""
        return SystemState(
            is_running=is_running,
            balance=self._balance,
            shares=self._shares,
            entry_price=self._entry_price,
            peak_price=self.peak_price,
            stop_loss_level=self.stop_loss_level,
            total_trades=self._total_trades,
            winning_trades=self._winning_trades,
        )
