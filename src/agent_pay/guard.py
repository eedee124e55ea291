# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
PaymentGuard — the policy-gated payment flow.

The guard owns no payment logic of its own. It asks the PolicyEnforcer,
writes receipts, and hands allowed payments to an injected transport that
does the actual HTTP round-trip and signing:

1. ``check_payment``. When denied, write a ``blocked`` receipt and return
   without calling the transport.
2. Write a ``pending`` receipt and call the transport.
3. On success, ``record_payment`` and mark the receipt ``success``.
   On failure, mark it ``failed``; nothing is added to the spend totals.
   If ``record_payment`` raises after a settled payment, the receipt is
   still marked ``success`` before the error propagates.

The enforcer lock is held across all three steps, so concurrent ``pay``
calls are serialised and cannot both pass against the same totals.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from agent_pay.amounts import AmountLike, to_decimal, to_minor_units
from agent_pay.config import AgentPayConfig
from agent_pay.enforcer import PolicyEnforcer
from agent_pay.errors import PaymentBlockedError, UnsupportedNetworkError
from agent_pay.ledger import Clock
from agent_pay.networks import resolve_network
from agent_pay.receipts import ReceiptLedger
from agent_pay.rules import usd
from agent_pay.storage.file import JsonFileStore
from agent_pay.types import (
    NetworkName,
    PaymentOutcome,
    PaymentReceipt,
    PaymentRequest,
    PolicyDecision,
    ReceiptInput,
    ReceiptUpdate,
)

logger = logging.getLogger("agent_pay.guard")


class PaymentTransport(Protocol):
    """Performs one payment. Injected so the guard never touches the network."""

    def __call__(self, request: PaymentRequest) -> PaymentOutcome:
        ...


class PaymentResult(BaseModel):
    """
    What happened to one ``PaymentGuard.pay`` call.

    Attributes:
        decision: The policy decision for the attempt.
        receipt: The final receipt (``blocked``, ``success`` or ``failed``).
        outcome: What the transport reported; None when blocked.
    """

    model_config = ConfigDict(frozen=True)

    decision: PolicyDecision
    receipt: PaymentReceipt
    outcome: PaymentOutcome | None = None

    @property
    def blocked(self) -> bool:
        return not self.decision.allowed

    @property
    def succeeded(self) -> bool:
        return self.receipt.status == "success"

    def raise_for_blocked(self) -> None:
        """Raise PaymentBlockedError if the policy denied this payment."""
        if self.blocked:
            raise PaymentBlockedError(self.decision.reason or "denied by policy", self.receipt)


class PaymentGuard:
    """
    Policy-gated payments for one agent.

    Parameters
    ----------
    enforcer:
        Spending policy and ledger.
    ledger:
        Receipt log for every attempt.
    transport:
        Callable that performs an allowed payment.
    network:
        Default network when ``pay`` is not given one.
    on_payment:
        Called with the final receipt after a successful payment.
    on_blocked:
        Called with the denial reason and the request after a blocked payment.
    """

    def __init__(
        self,
        enforcer: PolicyEnforcer,
        ledger: ReceiptLedger,
        transport: PaymentTransport,
        network: NetworkName = "base",
        on_payment: Callable[[PaymentReceipt], None] | None = None,
        on_blocked: Callable[[str, PaymentRequest], None] | None = None,
    ) -> None:
        self._enforcer = enforcer
        self._ledger = ledger
        self._transport = transport
        self._network = self._require_network(network)
        self._on_payment = on_payment
        self._on_blocked = on_blocked

    @classmethod
    def from_config(
        cls,
        config: AgentPayConfig,
        transport: PaymentTransport,
        clock: Clock | None = None,
        on_payment: Callable[[PaymentReceipt], None] | None = None,
        on_blocked: Callable[[str, PaymentRequest], None] | None = None,
    ) -> PaymentGuard:
        """Build a guard whose ledger and receipts live in the configured JSON files."""
        enforcer = PolicyEnforcer(
            config.policy, store=JsonFileStore(config.spending_path), clock=clock
        )
        ledger = ReceiptLedger(store=JsonFileStore(config.receipts_path), clock=clock)
        return cls(
            enforcer,
            ledger,
            transport,
            network=config.network,
            on_payment=on_payment,
            on_blocked=on_blocked,
        )

    @property
    def enforcer(self) -> PolicyEnforcer:
        return self._enforcer

    @property
    def ledger(self) -> ReceiptLedger:
        return self._ledger

    def pay(
        self,
        url: str,
        amount: AmountLike,
        recipient: str,
        network: NetworkName | None = None,
    ) -> PaymentResult:
        """
        Run one payment through policy, transport, and the receipt log.

        A policy denial is returned as a result with ``blocked`` set, not
        raised. Exceptions from the transport mark the receipt ``failed``
        and propagate.
        """
        value = to_decimal(amount)
        request = PaymentRequest(
            url=url,
            amount=value,
            amount_raw=str(to_minor_units(value)),
            recipient=recipient,
            network=self._require_network(network) if network is not None else self._network,
        )

        with self._enforcer.locked():
            decision = self._enforcer.check_payment(value, recipient)
            if not decision.allowed:
                return self._block(request, decision)

            pending = self._ledger.create_receipt(
                ReceiptInput(
                    url=request.url,
                    amount=request.amount,
                    amount_raw=request.amount_raw,
                    network=request.network,
                    recipient=request.recipient,
                )
            )

            try:
                outcome = self._transport(request)
            except Exception:
                logger.warning(
                    "Transport raised for %s; receipt %s marked failed",
                    url,
                    pending.id,
                    exc_info=True,
                )
                self._ledger.update_receipt(pending.id, ReceiptUpdate(status="failed"))
                raise

            if not outcome.success:
                logger.warning(
                    "Payment of %s to %s failed: %s", usd(value), recipient, outcome.failure_reason
                )
                receipt = self._finalise(
                    pending,
                    ReceiptUpdate(status="failed", facilitator_response=outcome.facilitator_response),
                )
                return PaymentResult(decision=decision, receipt=receipt, outcome=outcome)

            settled = ReceiptUpdate(
                status="success",
                tx_hash=outcome.tx_hash,
                facilitator_response=outcome.facilitator_response,
            )
            try:
                self._enforcer.record_payment(value, recipient)
            except Exception:
                # The money has moved; the receipt must say so even if the
                # spend could not be saved.
                logger.error(
                    "Payment of %s to %s settled (tx %s) but could not be recorded",
                    usd(value),
                    recipient,
                    outcome.tx_hash,
                    exc_info=True,
                )
                self._finalise(pending, settled)
                raise
            receipt = self._finalise(pending, settled)

        if self._enforcer.requires_approval(value):
            logger.info("Paid %s to %s for %s (tx %s)", usd(value), recipient, url, outcome.tx_hash)
        else:
            logger.debug("Paid %s to %s for %s (tx %s)", usd(value), recipient, url, outcome.tx_hash)

        if self._on_payment is not None:
            self._on_payment(receipt)
        return PaymentResult(decision=decision, receipt=receipt, outcome=outcome)

    # ─── Private helpers ──────────────────────────────────────────────────────

    def _block(self, request: PaymentRequest, decision: PolicyDecision) -> PaymentResult:
        reason = decision.reason or "denied by policy"
        receipt = self._ledger.record_blocked(
            request.url,
            request.amount,
            request.amount_raw,
            request.recipient,
            request.network,
            reason,
        )
        if self._on_blocked is not None:
            self._on_blocked(reason, request)
        return PaymentResult(decision=decision, receipt=receipt)

    def _finalise(self, pending: PaymentReceipt, update: ReceiptUpdate) -> PaymentReceipt:
        receipt = self._ledger.update_receipt(pending.id, update)
        # The pending receipt was written under the same lock moments ago.
        assert receipt is not None  # noqa: S101
        return receipt

    @staticmethod
    def _require_network(network: str) -> NetworkName:
        resolution = resolve_network(network)
        if resolution.network is None:
            raise UnsupportedNetworkError(resolution.detail or f"Unsupported network {network!r}")
        return resolution.network.name
