# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
ReceiptLedger — the audit trail of every payment attempt.

Each attempt produces one receipt: ``pending`` while the payment is in
flight, then ``success`` or ``failed``; or ``blocked`` directly when the
policy denied it. Receipts are appended in creation order and never removed.
The full list is re-saved through the StateStore on every change.

Usage::

    ledger = ReceiptLedger(store=JsonFileStore("receipts.json"))
    receipt = ledger.create_receipt(
        ReceiptInput(
            url="https://api.example.com/report",
            amount="0.05",
            amount_raw="50000",
            network="base",
            recipient="0xabc...",
        )
    )
    ledger.update_receipt(receipt.id, ReceiptUpdate(status="success", tx_hash="0x..."))
    print(ledger.export_csv())
"""

from __future__ import annotations

import logging
import threading
import uuid
from decimal import Decimal

from pydantic import TypeAdapter, ValidationError

from agent_pay.amounts import AmountLike, to_decimal
from agent_pay.errors import InvalidReceiptTransitionError, StoreCorruptedError
from agent_pay.export_formats import export_csv, export_json
from agent_pay.ledger import Clock, as_utc, utc_now
from agent_pay.storage.interface import StateStore
from agent_pay.storage.memory import MemoryStore
from agent_pay.types import (
    NetworkName,
    PaymentReceipt,
    ReceiptInput,
    ReceiptStatus,
    ReceiptUpdate,
)

logger = logging.getLogger("agent_pay.receipts")

_RECEIPT_LIST = TypeAdapter(list[PaymentReceipt])


class ReceiptLedger:
    """
    Durable, queryable, exportable log of payment attempts.

    Parameters
    ----------
    store:
        Where the receipt list is persisted. Defaults to in-memory storage.
    clock:
        Source of receipt timestamps. Defaults to the current UTC time.
    """

    def __init__(self, store: StateStore | None = None, clock: Clock | None = None) -> None:
        self._store: StateStore = store if store is not None else MemoryStore()
        self._clock: Clock = clock if clock is not None else utc_now
        self._lock = threading.RLock()
        self._receipts: list[PaymentReceipt] = self._load()

    # ─── Writes ───────────────────────────────────────────────────────────────

    def create_receipt(self, fields: ReceiptInput) -> PaymentReceipt:
        """Append a new ``pending`` receipt with a fresh id and timestamp."""
        receipt = PaymentReceipt(
            id=str(uuid.uuid4()),
            timestamp=as_utc(self._clock()),
            status="pending",
            **fields.model_dump(),
        )
        self._append(receipt)
        return receipt

    def record_blocked(
        self,
        url: str,
        amount: AmountLike,
        amount_raw: int | str,
        recipient: str,
        network: NetworkName,
        reason: str,
        currency: str = "USDC",
    ) -> PaymentReceipt:
        """Append a receipt directly in ``blocked`` status with ``block_reason`` set."""
        fields = ReceiptInput(
            url=url,
            amount=amount,
            amount_raw=amount_raw,
            currency=currency,
            network=network,
            recipient=recipient,
        )
        receipt = PaymentReceipt(
            id=str(uuid.uuid4()),
            timestamp=as_utc(self._clock()),
            status="blocked",
            block_reason=reason,
            **fields.model_dump(),
        )
        self._append(receipt)
        logger.info("Blocked payment to %s for %s recorded: %s", recipient, url, reason)
        return receipt

    def update_receipt(self, receipt_id: str, update: ReceiptUpdate) -> PaymentReceipt | None:
        """
        Merge the fields set on ``update`` into the receipt with ``receipt_id``.

        Returns the updated receipt, or None when no receipt has that id.
        Raises InvalidReceiptTransitionError when the receipt is already
        terminal (``success``, ``failed`` or ``blocked``).
        """
        changes = update.model_dump(exclude_unset=True)
        # An explicit status=None means "leave the status alone".
        if "status" in changes and changes["status"] is None:
            del changes["status"]

        with self._lock:
            index = next(
                (i for i, receipt in enumerate(self._receipts) if receipt.id == receipt_id),
                None,
            )
            if index is None:
                return None

            current = self._receipts[index]
            if current.is_terminal:
                raise InvalidReceiptTransitionError(
                    receipt_id, current.status, changes.get("status") or current.status
                )

            updated = PaymentReceipt.model_validate({**current.model_dump(), **changes})
            receipts = list(self._receipts)
            receipts[index] = updated
            self._persist(receipts)
            self._receipts = receipts

        if "status" in changes:
            logger.debug("Receipt %s moved to %s", receipt_id, updated.status)
        return updated

    # ─── Queries ──────────────────────────────────────────────────────────────

    def get_all(self) -> list[PaymentReceipt]:
        """Every receipt, oldest first."""
        return list(self._receipts)

    def get_by_status(self, status: ReceiptStatus) -> list[PaymentReceipt]:
        return [receipt for receipt in self._receipts if receipt.status == status]

    def get_recent(self, limit: int = 10) -> list[PaymentReceipt]:
        """The ``limit`` most recent receipts, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self._receipts[-limit:]))

    def get_today(self) -> list[PaymentReceipt]:
        """Receipts whose timestamp falls on the current UTC date."""
        today = as_utc(self._clock()).date()
        return [receipt for receipt in self._receipts if as_utc(receipt.timestamp).date() == today]

    def get_today_total(self) -> Decimal:
        """Sum of today's successful payments."""
        return sum(
            (to_decimal(receipt.amount) for receipt in self.get_today() if receipt.status == "success"),
            Decimal("0"),
        )

    # ─── Export ───────────────────────────────────────────────────────────────

    def export_csv(self) -> str:
        """
        All receipts as CSV with the header
        ``id,timestamp,url,amount,currency,network,recipient,txHash,status,blockReason``.
        """
        return export_csv(self.get_all())

    def export_json(self) -> str:
        return export_json(self.get_all())

    # ─── Private helpers ──────────────────────────────────────────────────────

    def _append(self, receipt: PaymentReceipt) -> None:
        with self._lock:
            receipts = [*self._receipts, receipt]
            self._persist(receipts)
            self._receipts = receipts

    def _persist(self, receipts: list[PaymentReceipt]) -> None:
        self._store.save(_RECEIPT_LIST.dump_python(receipts, mode="json", by_alias=True))

    def _load(self) -> list[PaymentReceipt]:
        try:
            raw = self._store.load()
        except StoreCorruptedError as exc:
            logger.warning("Receipt log unreadable, starting empty: %s", exc)
            return []

        if raw is None:
            return []

        try:
            return _RECEIPT_LIST.validate_python(raw)
        except ValidationError as exc:
            logger.warning(
                "Receipt log failed validation, starting empty: %s",
                exc.errors(include_url=False),
            )
            return []
