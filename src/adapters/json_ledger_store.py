"""JSON file ledger store adapter.

Implements the core LedgerStorePort as one file holding a JSON array of
report ids. Writes go to a temporary file in the same directory followed by
an atomic rename, so readers never observe a partial file.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Optional, Sequence

from core.errors import PersistenceError


class JsonLedgerStore:
    """Thin JSON file wrapper that satisfies the LedgerStorePort contract."""

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> Optional[list[str]]:
        """Return the stored ids, or None when no file exists yet."""

        if not os.path.exists(self._path):
            return None
        try:
            with open(self._path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Cannot read {self._path}: {exc}") from exc

        if not isinstance(data, list):
            raise PersistenceError(f"{self._path} does not hold a JSON array")
        return [str(item) for item in data]

    def save(self, report_ids: Sequence[str]) -> None:
        """Overwrite the file with ``report_ids``."""

        directory = os.path.dirname(os.path.abspath(self._path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".ledger-", suffix=".json", dir=directory)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self._path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(list(report_ids), handle)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise PersistenceError(f"Cannot write {self._path}: {exc}") from exc
