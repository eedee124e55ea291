# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Volatile in-memory store.

Suitable for testing and short-lived processes. Data is lost when the
process exits.
"""

from __future__ import annotations

import copy
from typing import Any

from agent_pay.storage.interface import StateStore


class MemoryStore(StateStore):
    """In-memory, non-persistent StateStore implementation."""

    def __init__(self, initial: Any | None = None) -> None:
        self._data: Any | None = copy.deepcopy(initial)
        self.save_count = 0

    def load(self) -> Any | None:
        return copy.deepcopy(self._data)

    def save(self, data: Any) -> None:
        # Deep copy so callers mutating their dict cannot reach into the store.
        self._data = copy.deepcopy(data)
        self.save_count += 1
