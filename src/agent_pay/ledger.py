# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Calendar buckets and the velocity window for a SpendingState.

Buckets are keyed by ISO date in UTC: the day itself, the Monday that
starts its week, and the first of its month. Each granularity rolls over
independently. The velocity window keeps only entries newer than one hour.

The mutating helpers work in place; callers own copying and persisting.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from agent_pay.errors import InvalidRecipientError
from agent_pay.types import SpendingRecord, SpendingState

VELOCITY_WINDOW_MS = 3_600_000

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def epoch_ms(moment: datetime) -> int:
    return int(as_utc(moment).timestamp() * 1000)


def normalize_address(recipient: object) -> str:
    """Lower-case an address for comparison. Format is not validated."""
    if not isinstance(recipient, str) or not recipient.strip():
        raise InvalidRecipientError(recipient)
    return recipient.strip().lower()


class PeriodKeys(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: str
    week_start: str
    month_start: str


def period_keys(now: datetime) -> PeriodKeys:
    today: date = as_utc(now).date()
    monday = today - timedelta(days=today.weekday())
    return PeriodKeys(
        day=today.isoformat(),
        week_start=monday.isoformat(),
        month_start=today.replace(day=1).isoformat(),
    )


def new_state(now: datetime) -> SpendingState:
    """A zeroed ledger for the buckets containing ``now``."""
    keys = period_keys(now)
    return SpendingState(day=keys.day, week_start=keys.week_start, month_start=keys.month_start)


def refresh_periods(state: SpendingState, now: datetime) -> bool:
    """
    Reset every bucket whose key no longer matches ``now``.

    A new day clears the daily total, the daily transaction counter, and the
    per-recipient totals. Returns True if any bucket was reset.
    """
    keys = period_keys(now)
    changed = False

    if state.day != keys.day:
        state.day = keys.day
        state.daily_spent = Decimal("0")
        state.transactions_today = 0
        state.per_recipient_daily_spent = {}
        changed = True

    if state.week_start != keys.week_start:
        state.week_start = keys.week_start
        state.weekly_spent = Decimal("0")
        changed = True

    if state.month_start != keys.month_start:
        state.month_start = keys.month_start
        state.monthly_spent = Decimal("0")
        changed = True

    return changed


def prune_velocity_window(state: SpendingState, now: datetime) -> int:
    """Drop velocity entries older than one hour. Returns how many were dropped."""
    cutoff = epoch_ms(now) - VELOCITY_WINDOW_MS
    kept = [record for record in state.recent_transactions if record.timestamp_ms > cutoff]
    dropped = len(state.recent_transactions) - len(kept)
    state.recent_transactions = kept
    return dropped


def recent_count(state: SpendingState, now: datetime) -> int:
    """Transactions in the trailing hour, independent of whether pruning ran."""
    cutoff = epoch_ms(now) - VELOCITY_WINDOW_MS
    return sum(1 for record in state.recent_transactions if record.timestamp_ms > cutoff)


def add_spend(state: SpendingState, amount: Decimal, recipient: str, now: datetime) -> None:
    """
    Add one payment to every bucket and the velocity window.

    ``recipient`` must already be normalised. Buckets must already be
    current for ``now``.
    """
    state.daily_spent += amount
    state.weekly_spent += amount
    state.monthly_spent += amount
    state.transactions_today += 1
    state.per_recipient_daily_spent[recipient] = (
        state.per_recipient_daily_spent.get(recipient, Decimal("0")) + amount
    )
    state.recent_transactions.append(
        SpendingRecord(timestamp_ms=epoch_ms(now), amount=amount, recipient=recipient)
    )


def remaining(limit: Decimal, spent: Decimal) -> Decimal:
    return max(Decimal("0"), limit - spent)
