"""One JSON document file: a list of records, read and rewritten whole.

Every read-modify-write goes through ``editing()`` under the file's lock,
which is what makes a repository call atomic within one process.
"""

from __future__ import annotations

import json
import os
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator


class JsonFile:

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.RLock()
        self._ensure_file()

    def read(self) -> list[dict]:
        with self._lock:
            return json.loads(self.path.read_text(encoding="utf-8"))

    def write(self, rows: list[dict]) -> None:
        with self._lock:
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(rows, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, self.path)

    @contextmanager
    def editing(self) -> Iterator[list[dict]]:
        """Yield the records; they are written back if the block exits normally."""
        with self._lock:
            rows = self.read()
            yield rows
            self.write(rows)

    # --- Transaction support --------------------------------------------------

    def snapshot(self) -> str:
        with self._lock:
            return self.path.read_text(encoding="utf-8")

    def restore(self, content: str) -> None:
        with self._lock:
            self.path.write_text(content, encoding="utf-8")

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def _ensure_file(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding="utf-8")


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
