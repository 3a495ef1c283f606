"""Application service: Update Product use case.

Field changes (sku, name, price, discount) go to the product audit.
Variant changes are diffed against the previous variant list and each
difference becomes a ledger entry: added, stock edited, or deleted. A
price change snapshots the new price on every remaining variant.

Existing orders are never affected; they captured their prices.
"""

from __future__ import annotations

from typing import Any

import structlog

from boutique.application.add_product import VariantSpec, parse_variants
from boutique.application.alert_hooks import check_stock_alerts
from boutique.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from boutique.domain.model.ledger import AuditAction
from boutique.domain.model.product import Discount, Product, Variant, validate_sku
from boutique.domain.model.value_objects import Money, VariantKey, require_id
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.service.alert_emitter import AlertEmitter
from boutique.domain.service.ledger_recorder import LedgerRecorder

logger = structlog.get_logger(__name__)


class UpdateProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        recorder: LedgerRecorder,
        alert_emitter: AlertEmitter,
    ) -> None:
        self._product_repo = product_repo
        self._recorder = recorder
        self._alert_emitter = alert_emitter

    def handle(
        self,
        product_id: str,
        name: str | None = None,
        price: str | None = None,
        sku: str | None = None,
        discount: Discount | None = None,
        variants: list[VariantSpec] | None = None,
        actor: str | None = None,
    ) -> Product:
        product_id = require_id(product_id, "product id")
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product {product_id} not found")

        changes: dict[str, dict[str, Any]] = {}

        if sku is not None and sku.strip() != product.sku:
            new_sku = validate_sku(sku)
            clash = self._product_repo.get_by_sku(new_sku)
            if clash is not None and clash.id != product.id:
                raise ConflictError(f"SKU '{new_sku}' already exists")
            changes["sku"] = {"old": product.sku, "new": new_sku}
            product.sku = new_sku

        if name is not None and name.strip() != product.name:
            if not name.strip():
                raise ValidationError("Product name is required")
            changes["name"] = {"old": product.name, "new": name.strip()}
            product.name = name.strip()

        old_price = product.price.amount
        if price is not None:
            new_price = Money.of(price)
            if new_price.amount != old_price:
                product.update_price(new_price)
                changes["price"] = {"old": str(old_price), "new": str(new_price.amount)}

        if discount is not None:
            # Validated against the price being set in this same update.
            discount.validate_against(product.price)
            if discount != product.discount:
                changes["discount"] = {
                    "old": _describe(product.discount),
                    "new": _describe(discount),
                }
                product.discount = discount

        added: list[Variant] = []
        edited: list[tuple[Variant, int]] = []
        removed: list[Variant] = []
        if variants is not None:
            previous = {v.key: v for v in product.variants}
            parsed = parse_variants(variants)
            product.replace_variants(parsed)
            for variant in parsed:
                before = previous.get(variant.key)
                if before is None:
                    added.append(variant)
                elif before.stock != variant.stock:
                    edited.append((variant, before.stock))
            current = {v.key for v in parsed}
            removed = [v for key, v in previous.items() if key not in current]

        self._product_repo.save(product)

        if added:
            self._recorder.variants_created(product, added, "Variant added in update", actor)
        for variant, prev_stock in edited:
            self._recorder.stock_edited(product, variant, prev_stock, "Stock edited", actor)
        for variant in removed:
            self._recorder.variant_deleted(product, variant, actor)
        if "price" in changes:
            self._recorder.price_changed(product, old_price, actor)
        self._recorder.product_audited(product, AuditAction.UPDATED, changes, actor)

        logger.info(
            "Product updated",
            product_id=product.id,
            fields=sorted(changes),
            variants_added=len(added),
            variants_edited=len(edited),
            variants_removed=len(removed),
        )
        check_stock_alerts(
            self._alert_emitter,
            [VariantKey(product.id, v.size_id, v.color_id) for v in [*added, *(v for v, _ in edited)]],
        )
        return product


def _describe(discount: Discount) -> dict[str, Any]:
    return {
        "enabled": discount.enabled,
        "type": discount.type.value,
        "value": str(discount.value),
        "start_at": discount.start_at.isoformat() if discount.start_at else None,
        "end_at": discount.end_at.isoformat() if discount.end_at else None,
    }
