"""Abstract repositories for the append-only variant ledger and product audit."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from boutique.domain.model.ledger import LedgerStatus, ProductAuditEntry, VariantLedgerEntry


class VariantLedgerRepository(ABC):
    """There is deliberately no update or delete."""

    @abstractmethod
    def append(self, entries: list[VariantLedgerEntry]) -> None:
        """Store new entries."""

    @abstractmethod
    def list_for_product(
        self,
        product_id: str,
        variant_key: str | None = None,
        status: LedgerStatus | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = 200,
    ) -> list[VariantLedgerEntry]:
        """Entries for one product, newest first."""


class ProductAuditRepository(ABC):

    @abstractmethod
    def append(self, entry: ProductAuditEntry) -> None:
        """Store a new audit entry."""

    @abstractmethod
    def list_for_product(self, product_id: str) -> list[ProductAuditEntry]:
        """Audit entries for one product, newest first."""
