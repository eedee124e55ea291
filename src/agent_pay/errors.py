# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agent_pay.types import PaymentReceipt


class AgentPayError(Exception):
    """Base class for all x402-agent-pay errors."""

    def __init__(self, message: str, code: str = "AGENT_PAY_ERROR") -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class InvalidAmountError(AgentPayError, ValueError):
    """
    Raised when a payment amount is negative, non-finite, or not numeric.

    Negative amounts are never interpreted as refunds.

    Attributes:
        value: The rejected input, as supplied by the caller.
    """

    def __init__(self, value: object, detail: str) -> None:
        super().__init__(
            f"Invalid payment amount {value!r}: {detail}.",
            code="INVALID_AMOUNT",
        )
        self.value = value


class InvalidRecipientError(AgentPayError, ValueError):
    """Raised when a recipient address is empty or not a string."""

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Invalid recipient {value!r}: expected a non-empty address string.",
            code="INVALID_RECIPIENT",
        )
        self.value = value


class InvalidReceiptTransitionError(AgentPayError):
    """
    Raised when an update would move a receipt out of a terminal status, or
    into a status other than ``success`` / ``failed``.

    Attributes:
        receipt_id: The receipt the update targeted.
        current: The receipt's status before the update.
        requested: The status the update asked for.
    """

    def __init__(self, receipt_id: str, current: str, requested: str) -> None:
        super().__init__(
            f"Receipt '{receipt_id}' cannot move from '{current}' to '{requested}'.",
            code="INVALID_RECEIPT_TRANSITION",
        )
        self.receipt_id = receipt_id
        self.current = current
        self.requested = requested


class StoreCorruptedError(AgentPayError):
    """Raised by a StateStore when its persisted blob cannot be parsed."""

    def __init__(self, location: str, detail: str) -> None:
        super().__init__(
            f"Persisted state at {location} could not be parsed: {detail}",
            code="STORE_CORRUPTED",
        )
        self.location = location


class PaymentBlockedError(AgentPayError):
    """
    Raised on request when a payment was denied by policy.

    Policy denial is a normal outcome and is reported through
    ``PaymentResult``; this error exists for callers that prefer to unwind
    with an exception (see ``PaymentResult.raise_for_blocked``).

    Attributes:
        reason: The policy denial reason.
        receipt: The ``blocked`` receipt written for the attempt.
    """

    def __init__(self, reason: str, receipt: PaymentReceipt) -> None:
        super().__init__(f"Payment blocked: {reason}", code="PAYMENT_BLOCKED")
        self.reason = reason
        self.receipt = receipt


class UnsupportedNetworkError(AgentPayError, ValueError):
    """Raised when a payment names a network that ``resolve_network`` does not know."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail, code="UNSUPPORTED_NETWORK")
