"""Trade log — in-memory, append-only record of executed trades.

Holds every trade of the current session in execution order.  Nothing is
persisted; ``clear()`` is only called by a simulation reset.  The log grows
without bound for the life of a session.
"""

from typing import Optional

from voltrade.market.models import TRADE_SELL, Trade


class TradeLog:
    """Ordered trade records for one simulation session."""

    def __init__(self) -> None:
        self._trades: list[Trade] = []

    # ── Write ────────────────────────────────────────────────────────────

    def append(self, trade: Trade) -> None:
        """Record a newly executed trade."""
        self._trades.append(trade)

    def clear(self) -> None:
        """Discard all records (simulation reset only)."""
        self._trades.clear()

    # ── Read ─────────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._trades)

    def latest(self) -> Optional[Trade]:
        """Most recent trade, or ``None`` if the log is empty."""
        return self._trades[-1] if self._trades else None

    def closed_trades(self) -> list[Trade]:
        """SELL records, i.e. completed round trips."""
        return [t for t in self._trades if t.type == TRADE_SELL]

    def get_trades(
        self,
        limit: int = 20,
        type_filter: Optional[str] = None,
    ) -> dict:
        """Return recent trades newest-first with the unfiltered-by-limit total.

        Args:
            limit: Maximum number of trades to return.
            type_filter: Optional ``"BUY"`` or ``"SELL"``.

        Returns:
            ``{"trades": [dict, ...], "total": int}``
        """
        rows = self._trades
        if type_filter:
            rows = [t for t in rows if t.type == type_filter.upper()]
        newest_first = list(reversed(rows))[:limit]
        return {
            "trades": [t.to_dict() for t in newest_first],
            "total": len(rows),
        }
