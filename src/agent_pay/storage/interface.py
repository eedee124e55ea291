# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Abstract base class that every state store must implement.

A store holds exactly one JSON-serialisable blob: the spending ledger for a
PolicyEnforcer, or the receipt list for a ReceiptLedger. Components never
share a store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StateStore(ABC):
    """
    Minimal persistence contract for the policy engine.

    Implementors may back this with a file, Redis, SQLite, or any key-value
    store. ``save`` must replace the previous blob atomically: a reader must
    see either the old blob or the new one, never a partial write.
    """

    @abstractmethod
    def load(self) -> Any | None:
        """
        Return the stored blob, or None when nothing has been saved yet.

        Raises StoreCorruptedError when a blob exists but cannot be parsed.
        """
        ...

    @abstractmethod
    def save(self, data: Any) -> None:
        """Atomically overwrite the stored blob with ``data``."""
        ...
