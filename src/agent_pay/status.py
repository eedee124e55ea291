# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

from __future__ import annotations

from datetime import datetime

from agent_pay.ledger import recent_count, remaining
from agent_pay.types import (
    DailyStatus,
    PaymentPolicy,
    SpendingState,
    SpendingStatus,
    VelocityStatus,
    WindowStatus,
)


def build_status(policy: PaymentPolicy, state: SpendingState, now: datetime) -> SpendingStatus:
    """
    Derive a SpendingStatus snapshot from a policy and a ledger.

    The snapshot is point-in-time; callers should roll the ledger over for
    ``now`` first. Windows without a configured limit are omitted.
    """
    weekly = None
    if policy.weekly_limit is not None:
        weekly = WindowStatus(
            spent=state.weekly_spent,
            limit=policy.weekly_limit,
            remaining=remaining(policy.weekly_limit, state.weekly_spent),
        )

    monthly = None
    if policy.monthly_limit is not None:
        monthly = WindowStatus(
            spent=state.monthly_spent,
            limit=policy.monthly_limit,
            remaining=remaining(policy.monthly_limit, state.monthly_spent),
        )

    velocity = None
    if policy.max_transactions_per_hour is not None:
        count = recent_count(state, now)
        velocity = VelocityStatus(
            count=count,
            limit=policy.max_transactions_per_hour,
            remaining=max(0, policy.max_transactions_per_hour - count),
        )

    return SpendingStatus(
        daily=DailyStatus(
            spent=state.daily_spent,
            limit=policy.daily_limit,
            remaining=remaining(policy.daily_limit, state.daily_spent),
            transactions=state.transactions_today,
        ),
        weekly=weekly,
        monthly=monthly,
        velocity=velocity,
        policy=policy,
    )
