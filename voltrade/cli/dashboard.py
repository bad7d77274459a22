"""CLI dashboard — prints simulation status to the console."""

from typing import Optional


def _money(value: Optional[float]) -> str:
    return f"${value:,.2f}" if value is not None else "---"


def print_status(status: dict, analysis: Optional[dict] = None) -> str:
    """Format and print the current simulation status.

    Args:
        status: Dict returned by ``SimulationDriver.status()``.
        analysis: Optional advisory cell snapshot.

    Returns:
        The formatted string (also printed to stdout).
    """
    session = status.get("session") or {}
    pf = session.get("profit_factor")
    pf_str = f"{pf:.2f}" if pf is not None else "N/A"

    lines = [
        "──────────────── VolTrade Status ─────────────────",
        f"  Symbol:          {status.get('symbol', 'N/A')}",
        f"  Running:         {status.get('is_running', False)}",
        f"  Ticks:           {status.get('tick_count', 0)}",
        f"  Last Price:      {status.get('last_price', 0.0):.2f}",
        f"  Equity:          {_money(status.get('equity'))}",
        f"  Cash:            {_money(status.get('balance'))}",
        f"  Position:        {status.get('shares', 0)} ({status.get('position', 'FLAT')})",
        f"  Entry:           {_money(status.get('entry_price'))}",
        f"  Stop Loss:       {_money(status.get('stop_loss_level'))}",
        f"  Unrealized P&L:  {status.get('unrealized_pnl', 0.0):+.2f}",
        f"  Trades:          {status.get('total_trades', 0)}",
        f"  Win Rate:        {status.get('win_rate', 0.0):.1f}%",
        f"  Net P&L:         {session.get('net_pnl', 0.0):+.2f}",
        f"  Profit Factor:   {pf_str}",
    ]
    if analysis is not None:
        lines.append(f"  Analysis [{analysis.get('status', 'IDLE')}]:")
        lines.append(f"    {analysis.get('text', '')}")
    lines.append("──────────────────────────────────────────────────")
    output = "\n".join(lines)
    print(output)
    return output
