"""Tests for the risk module.

Covers whole-share position sizing, the percentage trailing stop, and the
position ledger's FLAT/LONG invariants.
"""

import pytest

from voltrade.risk.ledger import LedgerInvariantError, PositionLedger
from voltrade.risk.position_sizer import calculate_quantity
from voltrade.risk.trailing_stop import TrailingStop


# ── Position sizing ──────────────────────────────────────────────────────


class TestPositionSizing:
    def test_floor_of_balance_over_price(self):
        """$100,000 at $470 → 212 shares (212.77 floored)."""
        assert calculate_quantity(100_000.0, 470.0) == 212

    def test_exact_division(self):
        assert calculate_quantity(1_000.0, 250.0) == 4

    def test_cannot_afford_one_share(self):
        assert calculate_quantity(100.0, 470.0) == 0

    def test_rejects_zero_price(self):
        with pytest.raises(ValueError, match="price"):
            calculate_quantity(1_000.0, 0.0)

    def test_rejects_negative_balance(self):
        with pytest.raises(ValueError, match="balance"):
            calculate_quantity(-1.0, 10.0)


# ── Trailing stop ────────────────────────────────────────────────────────


class TestTrailingStop:
    def test_initial_level(self):
        stop = TrailingStop(entry_price=470.0, stop_pct=0.02)
        assert stop.peak == 470.0
        assert stop.level == pytest.approx(460.6)

    def test_new_high_raises_stop(self):
        stop = TrailingStop(470.0, 0.02)
        new_level = stop.update(480.0)
        assert new_level == pytest.approx(470.4)
        assert stop.peak == 480.0

    def test_lower_price_does_not_move_stop(self):
        stop = TrailingStop(470.0, 0.02)
        stop.update(480.0)
        assert stop.update(475.0) is None
        assert stop.level == pytest.approx(470.4)

    def test_is_hit_inclusive(self):
        stop = TrailingStop(100.0, 0.1)
        assert stop.is_hit(90.0)
        assert stop.is_hit(89.0)
        assert not stop.is_hit(90.5)


# ── Ledger ───────────────────────────────────────────────────────────────


def _assert_flat_invariant(ledger: PositionLedger) -> None:
    if ledger.shares == 0:
        assert ledger.entry_price is None
        assert ledger.peak_price is None
        assert ledger.stop_loss_level is None
    else:
        assert ledger.entry_price is not None
        assert ledger.peak_price is not None
        assert ledger.stop_loss_level is not None
        assert ledger.stop_loss_level <= ledger.peak_price


class TestPositionLedger:
    def test_initial_state(self):
        ledger = PositionLedger(100_000.0, 0.02)
        state = ledger.snapshot()
        assert state.balance == 100_000.0
        assert state.shares == 0
        assert state.total_trades == 0
        assert state.winning_trades == 0
        assert state.position == "FLAT"
        assert state.win_rate == 0.0
        _assert_flat_invariant(ledger)

    def test_open_position(self):
        ledger = PositionLedger(100_000.0, 0.02)
        ledger.open_position(470.0, 212)
        assert ledger.shares == 212
        assert ledger.balance == pytest.approx(100_000.0 - 212 * 470.0)
        assert ledger.entry_price == 470.0
        assert ledger.peak_price == 470.0
        assert ledger.stop_loss_level == pytest.approx(460.6)
        assert ledger.total_trades == 0
        _assert_flat_invariant(ledger)

    def test_losing_round_trip(self):
        ledger = PositionLedger(100_000.0, 0.02)
        ledger.open_position(470.0, 212)
        ledger.raise_stop(480.0)
        pnl = ledger.close_position(469.0)
        assert pnl == pytest.approx(-212.0)
        assert ledger.balance == pytest.approx(100_000.0 - 212.0)
        assert ledger.total_trades == 1
        assert ledger.winning_trades == 0
        _assert_flat_invariant(ledger)

    def test_winning_round_trip(self):
        ledger = PositionLedger(10_000.0, 0.02)
        ledger.open_position(100.0, 100)
        pnl = ledger.close_position(110.0)
        assert pnl == pytest.approx(1_000.0)
        assert ledger.winning_trades == 1
        assert ledger.snapshot().win_rate == 100.0

    def test_breakeven_is_not_a_win(self):
        ledger = PositionLedger(10_000.0, 0.02)
        ledger.open_position(100.0, 10)
        assert ledger.close_position(100.0) == 0.0
        assert ledger.total_trades == 1
        assert ledger.winning_trades == 0

    def test_raise_stop_is_monotonic(self):
        ledger = PositionLedger(10_000.0, 0.02)
        ledger.open_position(100.0, 10)
        levels = [ledger.stop_loss_level]
        for price in (101.0, 103.0, 107.5):
            levels.append(ledger.raise_stop(price))
        assert levels == sorted(levels)
        assert ledger.stop_loss_level == pytest.approx(107.5 * 0.98)

    def test_is_stop_hit(self):
        ledger = PositionLedger(10_000.0, 0.1)
        assert ledger.is_stop_hit(1.0) is False
        ledger.open_position(100.0, 10)
        assert ledger.is_stop_hit(89.9) is True
        assert ledger.is_stop_hit(90.5) is False

    def test_equity_and_unrealized(self):
        ledger = PositionLedger(10_000.0, 0.02)
        ledger.open_position(100.0, 50)
        assert ledger.equity(110.0) == pytest.approx(5_000.0 + 50 * 110.0)
        assert ledger.unrealized_pnl(110.0) == pytest.approx(500.0)

    def test_unrealized_zero_when_flat(self):
        ledger = PositionLedger(10_000.0, 0.02)
        assert ledger.unrealized_pnl(123.0) == 0.0
        assert ledger.equity(123.0) == 10_000.0

    def test_reset(self):
        ledger = PositionLedger(10_000.0, 0.02)
        ledger.open_position(100.0, 10)
        ledger.close_position(120.0)
        ledger.open_position(100.0, 5)
        ledger.reset()
        state = ledger.snapshot()
        assert state.balance == 10_000.0
        assert state.shares == 0
        assert state.total_trades == 0
        assert state.winning_trades == 0
        _assert_flat_invariant(ledger)

    def test_snapshot_carries_running_flag(self):
        ledger = PositionLedger(10_000.0, 0.02)
        assert ledger.snapshot(is_running=True).is_running is True


class TestLedgerInvariants:
    def test_open_while_long_raises(self):
        ledger = PositionLedger(100_000.0, 0.02)
        ledger.open_position(100.0, 10)
        with pytest.raises(LedgerInvariantError, match="while holding"):
            ledger.open_position(100.0, 10)

    def test_zero_quantity_raises(self):
        ledger = PositionLedger(100_000.0, 0.02)
        with pytest.raises(LedgerInvariantError, match="quantity"):
            ledger.open_position(100.0, 0)

    def test_overspend_raises(self):
        ledger = PositionLedger(1_000.0, 0.02)
        with pytest.raises(LedgerInvariantError, match="exceeds balance"):
            ledger.open_position(100.0, 11)

    def test_close_when_flat_raises(self):
        ledger = PositionLedger(1_000.0, 0.02)
        with pytest.raises(LedgerInvariantError, match="no open position"):
            ledger.close_position(100.0)

    def test_raise_stop_when_flat_raises(self):
        ledger = PositionLedger(1_000.0, 0.02)
        with pytest.raises(LedgerInvariantError):
            ledger.raise_stop(100.0)

    def test_raise_stop_below_peak_raises(self):
        ledger = PositionLedger(10_000.0, 0.02)
        ledger.open_position(100.0, 10)
        with pytest.raises(LedgerInvariantError, match="must exceed"):
            ledger.raise_stop(99.0)

    def test_rejects_non_positive_initial_balance(self):
        with pytest.raises(ValueError, match="initial_balance"):
            PositionLedger(0.0, 0.02)
