"""Multi-file transactions for the JSON store.

Entering a transaction takes every file's lock and snapshots its
content; if an exception escapes the block, every file is restored.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from typing import Iterator

import structlog

from boutique.domain.exceptions import TransactionUnsupportedError
from boutique.domain.repository.transaction import TransactionManager
from boutique.infrastructure.persistence.json_store import JsonFile

logger = structlog.get_logger(__name__)


class JsonTransactionManager(TransactionManager):

    def __init__(self, files: list[JsonFile], enabled: bool = True) -> None:
        self._files = files
        self._enabled = enabled

    @property
    def supports_transactions(self) -> bool:
        return self._enabled

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if not self._enabled:
            raise TransactionUnsupportedError("Transactions are disabled for this store")

        with ExitStack() as stack:
            for json_file in self._files:
                stack.enter_context(json_file.lock)
            snapshots = [(json_file, json_file.snapshot()) for json_file in self._files]
            try:
                yield
            except BaseException:
                for json_file, content in snapshots:
                    json_file.restore(content)
                logger.warning("Transaction rolled back", files=[str(f.path.name) for f in self._files])
                raise
