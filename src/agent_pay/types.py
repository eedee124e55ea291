# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Shared type definitions for x402-agent-pay.

Policies, decisions, status snapshots, and receipts are frozen Pydantic v2
models. ``SpendingState`` is the one mutable model: it is owned by a single
PolicyEnforcer and only ever replaced wholesale after a successful save.

Persisted and exported models use camelCase keys (``dailySpent``,
``txHash``) so the JSON files stay readable by non-Python tooling.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from agent_pay.amounts import format_amount, to_decimal

# ─── Networks ─────────────────────────────────────────────────────────────────

NetworkName = Literal["base", "ethereum", "arbitrum", "optimism", "polygon", "baseSepolia"]

# ─── Policy ───────────────────────────────────────────────────────────────────


class PaymentPolicy(BaseModel):
    """
    Spending limits and recipient rules for one agent.

    Monetary fields accept Decimal, int, str, or float and are stored as
    Decimal. Optional limits left as None are not enforced.
    """

    model_config = ConfigDict(frozen=True)

    max_per_transaction: Decimal
    daily_limit: Decimal
    weekly_limit: Decimal | None = None
    monthly_limit: Decimal | None = None
    max_transactions_per_hour: int | None = Field(default=None, ge=0)
    per_recipient_daily_limit: Decimal | None = None
    approved_recipients: tuple[str, ...] = ()
    blocked_recipients: tuple[str, ...] = ()
    auto_approve_under: Decimal | None = None
    # Advisory flags for the transport; the enforcer never reads them.
    require_dry_run: bool = False
    simulate_before_pay: bool = False

    @field_validator(
        "max_per_transaction",
        "daily_limit",
        "weekly_limit",
        "monthly_limit",
        "per_recipient_daily_limit",
        "auto_approve_under",
        mode="before",
    )
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        if value is None:
            return None
        return to_decimal(value)


# ─── Ledger state ─────────────────────────────────────────────────────────────


class SpendingRecord(BaseModel):
    """One entry in the sliding one-hour velocity window."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    timestamp_ms: int
    amount: Decimal
    recipient: str


class SpendingState(BaseModel):
    """
    Durable running totals for the current day, week, and month buckets.

    ``day``, ``week_start`` and ``month_start`` are ISO dates identifying the
    bucket each total belongs to. ``per_recipient_daily_spent`` is keyed by
    lower-cased address.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    day: str
    week_start: str
    month_start: str
    daily_spent: Decimal = Field(default=Decimal("0"), ge=0)
    weekly_spent: Decimal = Field(default=Decimal("0"), ge=0)
    monthly_spent: Decimal = Field(default=Decimal("0"), ge=0)
    transactions_today: int = Field(default=0, ge=0)
    recent_transactions: list[SpendingRecord] = Field(default_factory=list)
    per_recipient_daily_spent: dict[str, Decimal] = Field(default_factory=dict)


# ─── Decisions ────────────────────────────────────────────────────────────────

PolicyRule = Literal[
    "per_transaction",
    "daily",
    "weekly",
    "monthly",
    "velocity",
    "per_recipient",
    "blocked",
    "not_whitelisted",
]


class PolicyDecision(BaseModel):
    """Outcome of ``PolicyEnforcer.check_payment``. Denial is not an error."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: str | None = None
    rule: PolicyRule | None = None


# ─── Status snapshot ──────────────────────────────────────────────────────────


class WindowStatus(BaseModel):
    """Spent / limit / remaining for one calendar bucket."""

    model_config = ConfigDict(frozen=True)

    spent: Decimal
    limit: Decimal
    remaining: Decimal


class DailyStatus(WindowStatus):
    transactions: int


class VelocityStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int
    limit: int
    remaining: int


class SpendingStatus(BaseModel):
    """Point-in-time view returned by ``PolicyEnforcer.get_status``."""

    model_config = ConfigDict(frozen=True)

    daily: DailyStatus
    weekly: WindowStatus | None = None
    monthly: WindowStatus | None = None
    velocity: VelocityStatus | None = None
    policy: PaymentPolicy


# ─── Receipts ─────────────────────────────────────────────────────────────────

ReceiptStatus = Literal["pending", "success", "blocked", "failed"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"success", "blocked", "failed"})


def _amount_string(value: Any) -> str:
    if isinstance(value, str):
        to_decimal(value)
        return value
    return format_amount(value)


def _amount_raw_string(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError("amount_raw must be an integer or integer string")
    text = str(value).strip()
    if not text.isdigit():
        raise ValueError(f"amount_raw must be a non-negative integer, got {value!r}")
    return text


class ReceiptInput(BaseModel):
    """Caller-supplied fields for a new receipt. Id, timestamp and status are assigned."""

    model_config = ConfigDict(frozen=True)

    url: str
    amount: str
    amount_raw: str
    currency: str = "USDC"
    network: NetworkName
    recipient: str
    tx_hash: str | None = None
    facilitator_response: Any = None

    @field_validator("amount", mode="before")
    @classmethod
    def _normalise_amount(cls, value: Any) -> str:
        return _amount_string(value)

    @field_validator("amount_raw", mode="before")
    @classmethod
    def _normalise_amount_raw(cls, value: Any) -> str:
        return _amount_raw_string(value)


class ReceiptUpdate(BaseModel):
    """
    Partial update merged into a pending receipt.

    Only fields explicitly passed are applied. ``status`` may only move a
    receipt to ``success`` or ``failed``.
    """

    model_config = ConfigDict(frozen=True)

    status: Literal["success", "failed"] | None = None
    tx_hash: str | None = None
    facilitator_response: Any = None


class PaymentReceipt(BaseModel):
    """An audit-log entry for a single payment attempt."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    timestamp: datetime
    url: str
    amount: str
    amount_raw: str
    currency: str = "USDC"
    network: NetworkName
    recipient: str
    status: ReceiptStatus
    tx_hash: str | None = None
    block_reason: str | None = None
    facilitator_response: Any = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


# ─── Payment flow ─────────────────────────────────────────────────────────────


class PaymentRequest(BaseModel):
    """What the guard hands to the payment transport once policy allows it."""

    model_config = ConfigDict(frozen=True)

    url: str
    amount: Decimal
    amount_raw: str
    recipient: str
    network: NetworkName
    currency: str = "USDC"


class PaymentOutcome(BaseModel):
    """What the payment transport reports back after attempting a payment."""

    model_config = ConfigDict(frozen=True)

    success: bool
    tx_hash: str | None = None
    failure_reason: str | None = None
    facilitator_response: Any = None
