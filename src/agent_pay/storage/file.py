# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Single-file JSON store.

Each save writes the full blob to a temporary file in the target directory,
flushes it to disk, and renames it over the previous file with
``os.replace``. The rename is atomic on POSIX and Windows, so a crash mid-save
leaves the previous blob intact.

No cross-process locking is performed; one writer per file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from agent_pay.errors import StoreCorruptedError
from agent_pay.storage.interface import StateStore

logger = logging.getLogger("agent_pay.storage")


class JsonFileStore(StateStore):
    """
    Persistent JSON file store.

    Parameters
    ----------
    file_path:
        Path to the JSON file. Parent directories are created on first save.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self) -> Any | None:
        if not self._file_path.exists():
            return None
        try:
            with open(self._file_path, encoding="utf-8") as file_handle:
                return json.load(file_handle)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StoreCorruptedError(str(self._file_path), str(exc)) from exc

    def save(self, data: Any) -> None:
        directory = self._file_path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{self._file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_handle:
                json.dump(data, file_handle, indent=2)
                file_handle.flush()
                os.fsync(file_handle.fileno())
            os.replace(tmp_name, self._file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Saved state to %s", self._file_path)
