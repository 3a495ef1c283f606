"""Application service: Update Order use case (admin).

Two paths:

* metadata only (status, tracking, shipping company, comment, shipping
  info): a plain field update of the order document;
* item list present: the new lines are diffed against the old ones per
  variant and stock moves by the difference, all inside one transaction
  together with the metadata and the new total.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import structlog

from boutique.application.alert_hooks import alert_status_changed, check_stock_alerts
from boutique.application.dashboard import DashboardCache
from boutique.application.dto import AdminOrderDTO, OrderChanges
from boutique.application.order_status import apply_status
from boutique.application.place_order import line_sku, parse_lines
from boutique.application.serializers import to_admin_dto
from boutique.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    OrderStateConflictError,
    TransactionUnsupportedError,
    ValidationError,
)
from boutique.domain.model.order import Order, OrderItem, OrderStatus, ShippingInfo
from boutique.domain.model.value_objects import Quantity, VariantKey, require_id
from boutique.domain.repository.catalog_repository import CatalogRepository
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.repository.transaction import TransactionManager
from boutique.domain.service.alert_emitter import AlertEmitter, Clock, utc_now
from boutique.domain.service.stock_reconciler import merge_lines

logger = structlog.get_logger(__name__)


class UpdateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        catalog_repo: CatalogRepository,
        transactions: TransactionManager,
        alert_emitter: AlertEmitter,
        dashboard_cache: DashboardCache,
        clock: Clock = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._catalog_repo = catalog_repo
        self._transactions = transactions
        self._alert_emitter = alert_emitter
        self._dashboard_cache = dashboard_cache
        self._clock = clock

    def handle(self, order_id: str, changes: OrderChanges, by: str | None = None) -> AdminOrderDTO:
        order_id = require_id(order_id, "order id")
        if changes.items is None and not changes.has_metadata:
            raise ValidationError("No changes to apply")
        if changes.status is not None:
            OrderStatus.parse(changes.status)

        touched: list[VariantKey] = []
        if changes.items is None:
            order, previous = self._update_metadata(order_id, changes, by)
        else:
            new_lines = {
                line.key: line.quantity.value for line in merge_lines(parse_lines(changes.items))
            }
            if not self._transactions.supports_transactions:
                raise TransactionUnsupportedError(
                    "Editing order items requires a store with transaction support"
                )
            with self._transactions.transaction():
                order, previous, touched = self._update_items(order_id, new_lines, changes, by)

        logger.info(
            "Order updated",
            order_id=order.id,
            items_changed=changes.items is not None,
            variants_moved=len(touched),
            total=str(order.total),
        )
        self._dashboard_cache.invalidate()
        check_stock_alerts(self._alert_emitter, touched)
        if previous is not None:
            alert_status_changed(self._alert_emitter, order, previous)
        return to_admin_dto(order)

    # --- Paths ----------------------------------------------------------------

    def _update_metadata(
        self, order_id: str, changes: OrderChanges, by: str | None
    ) -> tuple[Order, OrderStatus | None]:
        order = self._load(order_id)
        previous = self._apply_metadata(order, changes, by, self._clock())
        self._order_repo.save(order)
        return order, previous

    def _update_items(
        self,
        order_id: str,
        new_lines: dict[VariantKey, int],
        changes: OrderChanges,
        by: str | None,
    ) -> tuple[Order, OrderStatus | None, list[VariantKey]]:
        order = self._load(order_id)
        if order.status == OrderStatus.CANCELLED:
            # Cancelling already gave every line's stock back.
            raise OrderStateConflictError(f"Items of cancelled order {order.id} cannot be edited")
        now = self._clock()
        old_items = {item.key: item for item in order.items}

        # Lines dropped from the new list are restocked in full.
        moved: list[VariantKey] = []
        stock_before: dict[VariantKey, int] = {}
        for key in [*new_lines, *(k for k in old_items if k not in new_lines)]:
            old_qty = old_items[key].quantity.value if key in old_items else 0
            diff = new_lines.get(key, 0) - old_qty
            if diff == 0:
                continue
            stock_before[key] = self._move_stock(order_id, key, diff)
            moved.append(key)

        items: list[OrderItem] = []
        for key, qty in new_lines.items():
            existing = old_items.get(key)
            if existing is not None:
                items.append(replace(existing, quantity=Quantity(qty)))
            else:
                items.append(self._new_item(key, qty, stock_before[key], now))
        order.replace_items(items)

        previous = self._apply_metadata(order, changes, by, now)
        self._order_repo.save(order)
        return order, previous, moved

    # --- Internal helpers -----------------------------------------------------

    def _load(self, order_id: str) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        return order

    def _move_stock(self, order_id: str, key: VariantKey, diff: int) -> int:
        """Take *diff* units (give back when negative); returns the stock read before."""
        product = self._product_repo.get_by_id(key.product_id)
        variant = product.find_variant(key.size_id, key.color_id) if product else None
        if product is None or variant is None:
            if diff > 0:
                raise EntityNotFoundError(f"Variant not available for product '{key.product_id}'")
            logger.warning(
                "Restock skipped, variant no longer exists",
                order_id=order_id,
                variant=str(key),
                quantity=-diff,
            )
            return 0
        if diff > 0 and variant.stock < diff:
            raise InsufficientStockError(product.id, product.name, diff, variant.stock)
        self._product_repo.increment_variant_stock(key, -diff)
        return variant.stock

    def _new_item(self, key: VariantKey, qty: int, stock_before: int, now: datetime) -> OrderItem:
        product = self._product_repo.get_by_id(key.product_id)
        if product is None:
            raise EntityNotFoundError(f"Product {key.product_id} not found")
        return OrderItem(
            product_id=key.product_id,
            size_id=key.size_id,
            color_id=key.color_id,
            quantity=Quantity(qty),
            unit_price=product.effective_price(now),
            sku=line_sku(self._catalog_repo, product.name, key),
            stock_before_purchase=stock_before,
            stock_at_purchase=self._product_repo.get_variant_stock(key),
        )

    def _apply_metadata(
        self, order: Order, changes: OrderChanges, by: str | None, now: datetime
    ) -> OrderStatus | None:
        # Shipping fields are validated before the status moves sales counters.
        shipping = None
        if changes.shipping_info is not None:
            shipping = (order.shipping_info or ShippingInfo()).merged(changes.shipping_info)

        previous = None
        if changes.status is not None:
            previous, _ = apply_status(order, changes.status, self._product_repo, by, now)
        if changes.tracking_number is not None:
            order.tracking_number = changes.tracking_number
        if changes.shipping_company is not None:
            order.shipping_company = changes.shipping_company
        if changes.admin_comment is not None:
            order.admin_comment = changes.admin_comment
        if shipping is not None:
            order.shipping_info = shipping
        order.updated_at = now
        return previous
