# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Export helpers — serialise PaymentReceipt lists to CSV and JSON.

- CSV:  RFC 4180 CSV with a fixed header row. Values containing commas,
        quotes or newlines are quoted; absent fields are left empty.
- JSON: standard JSON array with camelCase keys and 2-space indentation.
"""

from __future__ import annotations

import csv
import io
import json

from agent_pay.types import PaymentReceipt

# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

CSV_COLUMNS: list[str] = [
    "id",
    "timestamp",
    "url",
    "amount",
    "currency",
    "network",
    "recipient",
    "txHash",
    "status",
    "blockReason",
]


def _receipt_to_csv_row(receipt: PaymentReceipt) -> list[str]:
    raw = receipt.model_dump(mode="json", by_alias=True)
    row: list[str] = []
    for column in CSV_COLUMNS:
        value = raw.get(column)
        row.append("" if value is None else str(value))
    return row


def export_csv(receipts: list[PaymentReceipt]) -> str:
    """
    Serialise receipts to CSV, one row per receipt in the given order.

    The first row contains the column headers.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for receipt in receipts:
        writer.writerow(_receipt_to_csv_row(receipt))
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# JSON export
# ---------------------------------------------------------------------------


def export_json(receipts: list[PaymentReceipt]) -> str:
    """Serialise receipts to a JSON array string with 2-space indentation."""
    return json.dumps(
        [receipt.model_dump(mode="json", by_alias=True) for receipt in receipts],
        indent=2,
        ensure_ascii=False,
    )
