# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
"""Shared fixtures for x402-agent-pay tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from agent_pay.enforcer import PolicyEnforcer
from agent_pay.receipts import ReceiptLedger
from agent_pay.storage.memory import MemoryStore
from agent_pay.types import PaymentPolicy

# Wednesday; the week started Monday 2026-10-12.
START = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock: returns ``now`` until advanced."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def make_enforcer(
    store: MemoryStore, clock: FakeClock
) -> Callable[..., PolicyEnforcer]:
    """
    Build an enforcer on the shared store and clock.

    Keyword arguments override a permissive base policy of $100 per payment
    and $1000 per day.
    """

    def _make(**policy_fields: Any) -> PolicyEnforcer:
        fields: dict[str, Any] = {"max_per_transaction": "100", "daily_limit": "1000"}
        fields.update(policy_fields)
        return PolicyEnforcer(PaymentPolicy(**fields), store=store, clock=clock)

    return _make


@pytest.fixture
def ledger(clock: FakeClock) -> ReceiptLedger:
    return ReceiptLedger(store=MemoryStore(), clock=clock)
