"""Position sizing — pure math, no I/O.

All-or-nothing sizing: buy as many whole shares as the cash balance covers.
"""

import math


def calculate_quantity(balance: float, price: float) -> int:
    """Calculate the number of whole shares affordable at *price*.

    Formula::

        quantity = floor(balance / price)

    Args:
        balance: Available cash (e.g. 100_000.0).
        price: Fill price per share.

    Returns:
        Whole share count, ``0`` when the balance cannot cover one share.

    Raises:
        ValueError: If *price* is non-positive or *balance* is negative.
    """
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")
    if balance < 0:
        raise ValueError(f"balance must be non-negative, got {balance}")
    return math.floor(balance / price)
