"""Application services: ledger and audit queries for one product."""

from __future__ import annotations

from datetime import datetime

from boutique.domain.exceptions import ValidationError
from boutique.domain.model.ledger import LedgerStatus, ProductAuditEntry, VariantLedgerEntry
from boutique.domain.model.value_objects import require_id
from boutique.domain.repository.ledger_repository import (
    ProductAuditRepository,
    VariantLedgerRepository,
)

DEFAULT_LEDGER_LIMIT = 200
MAX_LEDGER_LIMIT = 1000


class VariantLedgerQueryHandler:

    def __init__(self, ledger_repo: VariantLedgerRepository) -> None:
        self._ledger_repo = ledger_repo

    def handle(
        self,
        product_id: str,
        variant_key: str | None = None,
        status: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[VariantLedgerEntry]:
        """Newest first. An unknown *status* is ignored rather than rejected."""
        product_id = require_id(product_id, "product id")
        if since and until and until < since:
            raise ValidationError("Range end must not be before its start")
        try:
            wanted = LedgerStatus(status) if status else None
        except ValueError:
            wanted = None
        limit = min(limit or DEFAULT_LEDGER_LIMIT, MAX_LEDGER_LIMIT)
        return self._ledger_repo.list_for_product(
            product_id,
            variant_key=variant_key or None,
            status=wanted,
            since=since,
            until=until,
            limit=limit,
        )


class ProductAuditQueryHandler:

    def __init__(self, audit_repo: ProductAuditRepository) -> None:
        self._audit_repo = audit_repo

    def handle(self, product_id: str) -> list[ProductAuditEntry]:
        return self._audit_repo.list_for_product(require_id(product_id, "product id"))
