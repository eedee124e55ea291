# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Policy evaluation: the ordered rule chain behind ``check_payment``.

Rules run in a fixed order and the first failure wins, so the same ledger
state always yields the same reason. Limits are compared with strict ``>``:
a payment landing exactly on a limit is allowed.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from agent_pay.ledger import recent_count
from agent_pay.types import PaymentPolicy, PolicyDecision, PolicyRule, SpendingState

_DISPLAY_QUANTUM = Decimal("0.000001")


def usd(value: Decimal) -> str:
    """Format an amount with two to six decimals: ``$0.50``, ``$10.000001``."""
    text = f"{value.quantize(_DISPLAY_QUANTUM):f}".rstrip("0")
    whole, _, fraction = text.partition(".")
    return f"${whole}.{fraction.ljust(2, '0')}"


def _deny(rule: PolicyRule, reason: str) -> PolicyDecision:
    return PolicyDecision(allowed=False, reason=reason, rule=rule)


def _window_denial(
    rule: PolicyRule,
    label: str,
    spent: Decimal,
    limit: Decimal | None,
    amount: Decimal,
) -> PolicyDecision | None:
    if limit is None or spent + amount <= limit:
        return None
    return _deny(
        rule,
        f"Payment of {usd(amount)} would exceed {label} limit. "
        f"Current: {usd(spent)}, Limit: {usd(limit)}",
    )


def evaluate_payment(
    policy: PaymentPolicy,
    state: SpendingState,
    amount: Decimal,
    recipient: str,
    now: datetime,
) -> PolicyDecision:
    """
    Decide whether ``amount`` may be paid to ``recipient``.

    ``state`` must already be rolled over for ``now``; ``recipient`` must be
    lower-cased. Neither argument is modified.
    """
    if amount > policy.max_per_transaction:
        return _deny(
            "per_transaction",
            f"Amount {usd(amount)} exceeds per-transaction limit of "
            f"{usd(policy.max_per_transaction)}",
        )

    for rule, label, spent, limit in (
        ("daily", "daily", state.daily_spent, policy.daily_limit),
        ("weekly", "weekly", state.weekly_spent, policy.weekly_limit),
        ("monthly", "monthly", state.monthly_spent, policy.monthly_limit),
    ):
        denial = _window_denial(rule, label, spent, limit, amount)
        if denial is not None:
            return denial

    if policy.max_transactions_per_hour is not None:
        count = recent_count(state, now)
        if count >= policy.max_transactions_per_hour:
            return _deny(
                "velocity",
                f"Velocity limit exceeded. {count} transactions in the last hour "
                f"(limit: {policy.max_transactions_per_hour})",
            )

    if policy.per_recipient_daily_limit is not None:
        recipient_spent = state.per_recipient_daily_spent.get(recipient, Decimal("0"))
        if recipient_spent + amount > policy.per_recipient_daily_limit:
            return _deny(
                "per_recipient",
                f"Per-recipient daily limit exceeded for {recipient}. "
                f"Current: {usd(recipient_spent)}, "
                f"Limit: {usd(policy.per_recipient_daily_limit)}",
            )

    # Blacklist before whitelist: an address on both lists is always denied.
    if any(blocked.lower() == recipient for blocked in policy.blocked_recipients):
        return _deny("blocked", f"Recipient {recipient} is blocked")

    if policy.approved_recipients and not any(
        approved.lower() == recipient for approved in policy.approved_recipients
    ):
        return _deny("not_whitelisted", f"Recipient {recipient} is not in approved whitelist")

    return PolicyDecision(allowed=True)
