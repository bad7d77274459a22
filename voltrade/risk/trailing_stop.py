"""Trailing stop — percentage ratchet below the highest price since entry.

Rules:
  - On entry the stop sits ``stop_pct`` below the entry price.
  - Each new high raises the peak and moves the stop to
    ``peak × (1 − stop_pct)``.
  - The stop is never lowered.
"""


class TrailingStop:
    """Tracks peak and stop level for a single long position.

    Args:
        entry_price: Fill price of the position.
        stop_pct: Trail distance as a fraction of the peak (e.g. 0.02).
    """

    def __init__(self, entry_price: float, stop_pct: float) -> None:
        self.stop_pct = stop_pct
        self.peak = entry_price
        self.level = entry_price * (1 - stop_pct)

    def update(self, current_price: float) -> float | None:
        """Ratchet the stop if *current_price* makes a new high.

        Returns:
            New stop level if it moved, ``None`` if no change.
        """
        if current_price <= self.peak:
            return None
        self.peak = current_price
        self.level = current_price * (1 - self.stop_pct)
        return self.level

    def is_hit(self, current_price: float) -> bool:
        """``True`` when *current_price* is at or below the stop."""
        return current_price <= self.level
