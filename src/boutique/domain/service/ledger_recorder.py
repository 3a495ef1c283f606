"""Domain service: Ledger / Audit Recorder.

Turns catalog changes into append-only ledger and audit entries. Size
labels and color names are resolved at write time and copied into each
entry; readers never join back to the catalog.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from boutique.domain.model.catalog import UNKNOWN_LABEL
from boutique.domain.model.ledger import (
    AuditAction,
    LedgerEventType,
    LedgerStatus,
    ProductAuditEntry,
    VariantLedgerEntry,
)
from boutique.domain.model.product import Product, Variant
from boutique.domain.model.value_objects import new_id
from boutique.domain.repository.catalog_repository import CatalogRepository
from boutique.domain.repository.ledger_repository import (
    ProductAuditRepository,
    VariantLedgerRepository,
)


class LedgerRecorder:

    def __init__(
        self,
        ledger_repo: VariantLedgerRepository,
        audit_repo: ProductAuditRepository,
        catalog_repo: CatalogRepository,
    ) -> None:
        self._ledger_repo = ledger_repo
        self._audit_repo = audit_repo
        self._catalog_repo = catalog_repo

    # --- Variant events -------------------------------------------------------

    def variants_created(
        self, product: Product, variants: list[Variant], note: str, actor: str | None
    ) -> None:
        self._ledger_repo.append(
            [
                self._entry(
                    product,
                    variant,
                    LedgerEventType.CREATE_VARIANT,
                    prev_stock=None,
                    new_stock=variant.stock,
                    note=note,
                    actor=actor,
                )
                for variant in variants
            ]
        )

    def stock_edited(
        self,
        product: Product,
        variant: Variant,
        prev_stock: int,
        note: str,
        actor: str | None,
    ) -> None:
        """*variant* carries the new stock; ADD_STOCK when it only grew."""
        event = LedgerEventType.ADD_STOCK if variant.stock > prev_stock else LedgerEventType.EDIT_STOCK
        self._ledger_repo.append(
            [
                self._entry(
                    product,
                    variant,
                    event,
                    prev_stock=prev_stock,
                    new_stock=variant.stock,
                    note=note,
                    actor=actor,
                )
            ]
        )

    def variant_deleted(self, product: Product, variant: Variant, actor: str | None) -> None:
        # Last known stock on both sides.
        self._ledger_repo.append(
            [
                self._entry(
                    product,
                    variant,
                    LedgerEventType.DELETE_VARIANT,
                    prev_stock=variant.stock,
                    new_stock=variant.stock,
                    note="Variant removed",
                    actor=actor,
                    status=LedgerStatus.DELETED,
                )
            ]
        )

    def price_changed(self, product: Product, old_price: Decimal, actor: str | None) -> None:
        self._ledger_repo.append(
            [
                self._entry(
                    product,
                    variant,
                    LedgerEventType.UPDATE_PRICE_SNAPSHOT,
                    prev_stock=variant.stock,
                    new_stock=variant.stock,
                    note=f"Price {old_price} -> {product.price.amount}",
                    actor=actor,
                )
                for variant in product.variants
            ]
        )

    # --- Product audit --------------------------------------------------------

    def product_audited(
        self,
        product: Product,
        action: AuditAction,
        changes: dict[str, dict[str, Any]],
        actor: str | None,
    ) -> None:
        if action == AuditAction.UPDATED and not changes:
            return
        self._audit_repo.append(
            ProductAuditEntry(
                id=new_id(),
                product_id=product.id,
                action=action,
                changes=changes,
                actor=actor,
            )
        )

    # --- Internal helpers -----------------------------------------------------

    def _entry(
        self,
        product: Product,
        variant: Variant,
        event_type: LedgerEventType,
        prev_stock: int | None,
        new_stock: int | None,
        note: str,
        actor: str | None,
        status: LedgerStatus = LedgerStatus.ACTIVE,
    ) -> VariantLedgerEntry:
        size = self._catalog_repo.get_size(variant.size_id)
        color = self._catalog_repo.get_color(variant.color_id)
        return VariantLedgerEntry(
            id=new_id(),
            product_id=product.id,
            size_id=variant.size_id,
            color_id=variant.color_id,
            size_label_snapshot=size.label if size else UNKNOWN_LABEL,
            color_name_snapshot=color.name if color else UNKNOWN_LABEL,
            variant_key=variant.key,
            event_type=event_type,
            status=status,
            prev_stock=prev_stock,
            new_stock=new_stock,
            price_snapshot=product.price.amount,
            sku_snapshot=product.sku,
            note=note,
            actor=actor,
            created_at=datetime.now(timezone.utc),
        )
