# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field

from agent_pay.types import NetworkName, PaymentPolicy

DEFAULT_POLICY = PaymentPolicy(
    max_per_transaction=Decimal("1.00"),
    daily_limit=Decimal("10.00"),
    max_transactions_per_hour=60,
    auto_approve_under=Decimal("0.10"),
)
"""Conservative default: $1 per payment, $10 per day, 60 payments per hour."""


class AgentPayConfig(BaseModel, frozen=True):
    """
    Top-level configuration for a PaymentGuard.

    Attributes:
        network: Default settlement network for payments and receipts.
        policy: Spending policy enforced on every payment.
        spending_path: JSON file holding the spending ledger.
        receipts_path: JSON file holding the receipt log.

    Example::

        config = AgentPayConfig(
            network="base",
            policy=PaymentPolicy(max_per_transaction="0.50", daily_limit="5.00"),
            spending_path=Path("state/spending.json"),
            receipts_path=Path("state/receipts.json"),
        )
        guard = PaymentGuard.from_config(config, transport=my_transport)
    """

    network: NetworkName = "base"
    policy: PaymentPolicy = Field(default_factory=lambda: DEFAULT_POLICY)
    spending_path: Path = Path("./spending.json")
    receipts_path: Path = Path("./receipts.json")
