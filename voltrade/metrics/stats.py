"""Session statistics — pure functions over closed round trips."""

from typing import Optional

from voltrade.market.models import Trade


def calculate_stats(trades: list[Trade]) -> dict:
    """Compute summary statistics from the session's SELL trades.

    Each trade must carry a realised ``pnl``; records without one (BUY
    legs) are ignored.

    Returns:
        Dict with ``total_trades``, ``winning_trades``, ``losing_trades``,
        ``win_rate`` (percent), ``profit_factor``, ``max_drawdown`` and
        ``net_pnl``.
    """
    pnls = [t.pnl for t in trades if t.pnl is not None]
    if not pnls:
        return {
            "total_trades": 0,
            "winning_trades": 0,
            "losing_trades": 0,
            "win_rate": 0.0,
            "profit_factor": None,
            "max_drawdown": 0.0,
            "net_pnl": 0.0,
        }

    total = len(pnls)
    winners = [p for p in pnls if p > 0]
    losers = [p for p in pnls if p <= 0]

    gross_profit = sum(winners)
    gross_loss = abs(sum(losers))
    profit_factor: Optional[float] = (
        gross_profit / gross_loss if gross_loss > 0 else None
    )

    return {
        "total_trades": total,
        "winning_trades": len(winners),
        "losing_trades": len(losers),
        "win_rate": round(len(winners) / total * 100.0, 1),
        "profit_factor": round(profit_factor, 4) if profit_factor is not None else None,
        "max_drawdown": round(_max_drawdown(pnls), 2),
        "net_pnl": round(sum(pnls), 2),
    }


# ── Helpers ──────────────────────────────────────────────────────────────


def _max_drawdown(pnls: list[float]) -> float:
    """Largest peak-to-trough decline of the cumulative P&L curve (positive)."""
    cumulative = 0.0
    peak = 0.0
    max_dd = 0.0
    for p in pnls:
        cumulative += p
        peak = max(peak, cumulative)
        max_dd = max(max_dd, peak - cumulative)
    return max_dd
