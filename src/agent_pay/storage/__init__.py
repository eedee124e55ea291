# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

from .interface import StateStore
from .memory import MemoryStore
from .file import JsonFileStore

__all__ = ["StateStore", "MemoryStore", "JsonFileStore"]
