"""Tests for the synthetic price feed."""

import random

import pytest

from voltrade.market.price_generator import MIN_PRICE, PriceGenerator


class _FixedRng:
    """Stands in for ``random.Random`` with a fixed uniform draw."""

    def __init__(self, u: float) -> None:
        self._u = u

    def uniform(self, a: float, b: float) -> float:
        return self._u

    def randint(self, a: int, b: int) -> int:
        return a


class TestNextPrice:
    def test_upper_extreme(self):
        gen = PriceGenerator(drift=0.00005, volatility=0.002, rng=_FixedRng(1.0))
        assert gen.next_price(450.0) == pytest.approx(450.0 * (1 + 0.00205))

    def test_lower_extreme(self):
        gen = PriceGenerator(drift=0.00005, volatility=0.002, rng=_FixedRng(-1.0))
        assert gen.next_price(450.0) == pytest.approx(450.0 * (1 - 0.00195))

    def test_zero_draw_applies_drift_only(self):
        gen = PriceGenerator(drift=0.001, volatility=0.002, rng=_FixedRng(0.0))
        assert gen.next_price(100.0) == pytest.approx(100.1)

    def test_price_floor(self):
        """A full -100 % move is clamped to the minimum price."""
        gen = PriceGenerator(drift=0.0, volatility=1.0, rng=_FixedRng(-1.0))
        assert gen.next_price(0.01) == MIN_PRICE
        assert gen.next_price(5.0) == MIN_PRICE

    def test_step_bounded_by_volatility(self):
        gen = PriceGenerator(rng=random.Random(1))
        prev = 450.0
        for _ in range(500):
            nxt = gen.next_price(prev)
            assert abs(nxt - prev) <= prev * (0.00005 + 0.002) + 1e-9
            prev = nxt

    def test_seeded_runs_are_reproducible(self):
        a = PriceGenerator(rng=random.Random(42))
        b = PriceGenerator(rng=random.Random(42))
        pa = pb = 450.0
        for _ in range(50):
            pa = a.next_price(pa)
            pb = b.next_price(pb)
            assert pa == pb


class TestVolume:
    def test_volume_range(self):
        gen = PriceGenerator(rng=random.Random(3))
        volumes = [gen.next_volume() for _ in range(200)]
        assert all(0 <= v <= 9999 for v in volumes)
