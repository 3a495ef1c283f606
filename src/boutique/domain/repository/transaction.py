"""Abstract multi-document transaction boundary."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager


class TransactionManager(ABC):

    @property
    @abstractmethod
    def supports_transactions(self) -> bool:
        """Whether ``transaction()`` can be used with this store."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Context manager: commit on normal exit, roll back every write
        made inside it if an exception escapes.

        Raises TransactionUnsupportedError when ``supports_transactions``
        is False.
        """
