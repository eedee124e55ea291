# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for calendar bucket keys, rollover, and velocity pruning."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from agent_pay.enforcer import PolicyEnforcer
from agent_pay.ledger import (
    VELOCITY_WINDOW_MS,
    add_spend,
    epoch_ms,
    new_state,
    normalize_address,
    period_keys,
    prune_velocity_window,
    recent_count,
    refresh_periods,
    remaining,
)
from agent_pay.types import PaymentPolicy


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# TestPeriodKeys
# ---------------------------------------------------------------------------


class TestPeriodKeys:
    def test_wednesday_maps_to_its_monday_and_first_of_month(self) -> None:
        keys = period_keys(_utc(2026, 10, 14, 12))
        assert keys.day == "2026-10-14"
        assert keys.week_start == "2026-10-12"
        assert keys.month_start == "2026-10-01"

    def test_sunday_belongs_to_the_preceding_monday(self) -> None:
        assert period_keys(_utc(2026, 10, 18, 23, 59)).week_start == "2026-10-12"

    def test_monday_starts_its_own_week(self) -> None:
        assert period_keys(_utc(2026, 10, 19, 0, 0)).week_start == "2026-10-19"

    def test_week_may_start_in_the_previous_month(self) -> None:
        keys = period_keys(_utc(2026, 11, 1))
        assert keys.week_start == "2026-10-26"
        assert keys.month_start == "2026-11-01"


# ---------------------------------------------------------------------------
# TestRefreshPeriods
# ---------------------------------------------------------------------------


class TestRefreshPeriods:
    def _spent_state(self, now: datetime):
        state = new_state(now)
        add_spend(state, Decimal("3"), "0xabc", now)
        return state

    def test_same_day_changes_nothing(self) -> None:
        now = _utc(2026, 10, 14, 9)
        state = self._spent_state(now)
        assert refresh_periods(state, now + timedelta(hours=10)) is False
        assert state.daily_spent == Decimal("3")

    def test_new_day_resets_only_daily_counters(self) -> None:
        now = _utc(2026, 10, 14, 23, 59)
        state = self._spent_state(now)

        assert refresh_periods(state, _utc(2026, 10, 15, 0, 1)) is True
        assert state.day == "2026-10-15"
        assert state.daily_spent == Decimal("0")
        assert state.transactions_today == 0
        assert state.per_recipient_daily_spent == {}
        assert state.weekly_spent == Decimal("3")
        assert state.monthly_spent == Decimal("3")

    def test_sunday_to_monday_resets_the_week(self) -> None:
        state = self._spent_state(_utc(2026, 10, 18, 22))
        refresh_periods(state, _utc(2026, 10, 19, 1))
        assert state.week_start == "2026-10-19"
        assert state.weekly_spent == Decimal("0")
        assert state.monthly_spent == Decimal("3")

    def test_month_end_resets_month_but_keeps_week(self) -> None:
        # Saturday 31 Oct to Sunday 1 Nov: same ISO week, new month.
        state = self._spent_state(_utc(2026, 10, 31, 20))
        refresh_periods(state, _utc(2026, 11, 1, 8))
        assert state.month_start == "2026-11-01"
        assert state.monthly_spent == Decimal("0")
        assert state.weekly_spent == Decimal("3")

    def test_each_granularity_rolls_independently(self) -> None:
        state = new_state(_utc(2026, 10, 14))
        state.week_start = "2026-10-05"
        state.weekly_spent = Decimal("7")
        state.daily_spent = Decimal("2")
        refresh_periods(state, _utc(2026, 10, 14, 18))
        assert state.weekly_spent == Decimal("0")
        assert state.daily_spent == Decimal("2")

    def test_enforcer_across_midnight(self, store, clock) -> None:
        clock.now = _utc(2026, 10, 14, 23, 59)
        enforcer = PolicyEnforcer(
            PaymentPolicy(max_per_transaction="5", daily_limit="5", weekly_limit="100"),
            store=store,
            clock=clock,
        )
        enforcer.record_payment("5", "0xabc")
        assert enforcer.check_payment("0.01", "0xabc").allowed is False

        clock.advance(minutes=2)
        assert enforcer.check_payment("5", "0xabc").allowed is True
        assert enforcer.get_status().weekly.spent == Decimal("5")


# ---------------------------------------------------------------------------
# TestVelocityWindow
# ---------------------------------------------------------------------------


class TestVelocityWindow:
    def test_prune_drops_entries_at_or_beyond_one_hour(self) -> None:
        now = _utc(2026, 10, 14, 12)
        state = new_state(now)
        add_spend(state, Decimal("1"), "0xa", now - timedelta(hours=2))
        add_spend(state, Decimal("1"), "0xb", now - timedelta(hours=1))
        add_spend(state, Decimal("1"), "0xc", now - timedelta(minutes=59))

        assert prune_velocity_window(state, now) == 2
        assert [r.recipient for r in state.recent_transactions] == ["0xc"]

    def test_recent_count_does_not_mutate(self) -> None:
        now = _utc(2026, 10, 14, 12)
        state = new_state(now)
        add_spend(state, Decimal("1"), "0xa", now - timedelta(hours=3))
        add_spend(state, Decimal("1"), "0xb", now)
        assert recent_count(state, now) == 1
        assert len(state.recent_transactions) == 2

    def test_window_constant_is_one_hour(self) -> None:
        assert VELOCITY_WINDOW_MS == 60 * 60 * 1000


# ---------------------------------------------------------------------------
# TestHelpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_normalize_address_lowercases_and_strips(self) -> None:
        assert normalize_address("  0xAbC  ") == "0xabc"

    def test_remaining_clamps_at_zero(self) -> None:
        assert remaining(Decimal("1"), Decimal("3")) == Decimal("0")
        assert remaining(Decimal("3"), Decimal("1")) == Decimal("2")

    @pytest.mark.parametrize(
        "moment",
        [datetime(2026, 10, 14, 12), _utc(2026, 10, 14, 12)],
    )
    def test_epoch_ms_treats_naive_as_utc(self, moment) -> None:
        assert epoch_ms(moment) == 1_791_979_200_000
