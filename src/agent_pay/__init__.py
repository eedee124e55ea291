# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
x402-agent-pay — spending policy enforcement for autonomous payment agents.

Quick start::

    from agent_pay import PaymentPolicy, PolicyEnforcer, ReceiptLedger

    enforcer = PolicyEnforcer(PaymentPolicy(max_per_transaction="1.00", daily_limit="10.00"))
    ledger = ReceiptLedger()

    decision = enforcer.check_payment("0.25", "0xabc...")
    if decision.allowed:
        # pay through your transport, then:
        enforcer.record_payment("0.25", "0xabc...")
"""

from agent_pay.amounts import (
    USDC_DECIMALS,
    format_amount,
    from_minor_units,
    to_decimal,
    to_minor_units,
)
from agent_pay.config import DEFAULT_POLICY, AgentPayConfig
from agent_pay.enforcer import PolicyEnforcer
from agent_pay.errors import (
    AgentPayError,
    InvalidAmountError,
    InvalidReceiptTransitionError,
    InvalidRecipientError,
    PaymentBlockedError,
    StoreCorruptedError,
    UnsupportedNetworkError,
)
from agent_pay.export_formats import CSV_COLUMNS, export_csv, export_json
from agent_pay.guard import PaymentGuard, PaymentResult, PaymentTransport
from agent_pay.ledger import VELOCITY_WINDOW_MS, period_keys
from agent_pay.networks import NETWORKS, NetworkInfo, NetworkResolution, resolve_network
from agent_pay.receipts import ReceiptLedger
from agent_pay.storage import JsonFileStore, MemoryStore, StateStore
from agent_pay.types import (
    DailyStatus,
    NetworkName,
    PaymentOutcome,
    PaymentPolicy,
    PaymentReceipt,
    PaymentRequest,
    PolicyDecision,
    PolicyRule,
    ReceiptInput,
    ReceiptStatus,
    ReceiptUpdate,
    SpendingRecord,
    SpendingState,
    SpendingStatus,
    VelocityStatus,
    WindowStatus,
)

__all__ = [
    # Core classes
    "PolicyEnforcer",
    "ReceiptLedger",
    "PaymentGuard",
    "PaymentResult",
    "PaymentTransport",
    # Configuration
    "AgentPayConfig",
    "DEFAULT_POLICY",
    # Types
    "PaymentPolicy",
    "PolicyDecision",
    "PolicyRule",
    "SpendingRecord",
    "SpendingState",
    "SpendingStatus",
    "DailyStatus",
    "WindowStatus",
    "VelocityStatus",
    "PaymentReceipt",
    "ReceiptInput",
    "ReceiptUpdate",
    "ReceiptStatus",
    "PaymentRequest",
    "PaymentOutcome",
    "NetworkName",
    # Storage
    "StateStore",
    "MemoryStore",
    "JsonFileStore",
    # Networks
    "NETWORKS",
    "NetworkInfo",
    "NetworkResolution",
    "resolve_network",
    # Errors
    "AgentPayError",
    "InvalidAmountError",
    "InvalidRecipientError",
    "InvalidReceiptTransitionError",
    "PaymentBlockedError",
    "StoreCorruptedError",
    "UnsupportedNetworkError",
    # Utilities
    "USDC_DECIMALS",
    "VELOCITY_WINDOW_MS",
    "to_decimal",
    "to_minor_units",
    "from_minor_units",
    "format_amount",
    "period_keys",
    "export_csv",
    "export_json",
    "CSV_COLUMNS",
]
