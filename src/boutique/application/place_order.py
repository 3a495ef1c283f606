"""Application service: Place Order use case.

Orchestrates idempotency, input validation, stock reconciliation and
order persistence. Stock is taken before the order document exists; if
anything after the first decrement fails, every decrement of the attempt
is given back before the error propagates.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from boutique.application.alert_hooks import alert_order_created, check_stock_alerts
from boutique.application.dashboard import DashboardCache
from boutique.application.dto import OrderLineSpec, PlaceOrderResult
from boutique.application.serializers import to_user_dto
from boutique.domain.exceptions import ValidationError
from boutique.domain.model.order import Order, OrderItem, ShippingInfo
from boutique.domain.model.product import build_variant_sku
from boutique.domain.model.value_objects import Quantity, VariantKey, require_id
from boutique.domain.repository.catalog_repository import CatalogRepository
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.service.alert_emitter import AlertEmitter, Clock, utc_now
from boutique.domain.service.stock_reconciler import (
    ReconciledLine,
    StockLine,
    StockReconciler,
)

logger = structlog.get_logger(__name__)


class PlaceOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog_repo: CatalogRepository,
        reconciler: StockReconciler,
        alert_emitter: AlertEmitter,
        dashboard_cache: DashboardCache,
        clock: Clock = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._catalog_repo = catalog_repo
        self._reconciler = reconciler
        self._alert_emitter = alert_emitter
        self._dashboard_cache = dashboard_cache
        self._clock = clock

    def handle(
        self,
        user_id: str,
        lines: list[OrderLineSpec],
        shipping_info: dict[str, str | None] | None = None,
        idempotency_key: str | None = None,
    ) -> PlaceOrderResult:
        """Place an order for *user_id*.

        Steps:
        1. Return the earlier order if (user, idempotency key) was seen.
        2. Validate every line before touching stock.
        3. Decrement stock per variant (all or nothing).
        4. Build the order with price and stock snapshots and persist it.
        5. Evaluate stock alerts and announce the order; failures there
           are logged only.
        """
        user_id = require_id(user_id, "user id")
        key = (idempotency_key or "").strip() or None

        if key is not None:
            existing = self._order_repo.get_by_idempotency_key(user_id, key)
            if existing is not None:
                logger.info("Idempotent replay", order_id=existing.id, user_id=user_id)
                return PlaceOrderResult(existing.id, False, to_user_dto(existing))  # type: ignore[arg-type]

        stock_lines = parse_lines(lines)
        shipping = ShippingInfo().merged(shipping_info) if shipping_info is not None else None

        reconciliation = self._reconciler.decrement(stock_lines)
        try:
            now = self._clock()
            items = [self._build_item(line, now) for line in reconciliation.lines]
            order = Order.place(user_id, items, shipping, key, now)
            self._order_repo.save(order)
        except Exception:
            logger.warning(
                "Order not persisted, restoring stock",
                user_id=user_id,
                lines=len(reconciliation.lines),
            )
            self._reconciler.compensate(reconciliation)
            raise

        logger.info(
            "Order placed",
            order_id=order.id,
            user_id=user_id,
            total=str(order.total),
            lines=len(order.items),
        )

        check_stock_alerts(self._alert_emitter, (item.key for item in order.items))
        alert_order_created(self._alert_emitter, order)
        self._dashboard_cache.invalidate()

        return PlaceOrderResult(order.id, True, to_user_dto(order))  # type: ignore[arg-type]

    # --- Internal helpers -----------------------------------------------------

    def _build_item(self, line: ReconciledLine, now: datetime) -> OrderItem:
        product = line.product
        return OrderItem(
            product_id=line.key.product_id,
            size_id=line.key.size_id,
            color_id=line.key.color_id,
            quantity=line.quantity,
            unit_price=product.effective_price(now),
            sku=line_sku(self._catalog_repo, product.name, line.key),
            stock_before_purchase=line.stock_before,
            stock_at_purchase=line.stock_after,
        )


def line_sku(catalog_repo: CatalogRepository, product_name: str, key: VariantKey) -> str:
    # Unknown sizes and colors fall back to the tail of their id.
    size = catalog_repo.get_size(key.size_id)
    color = catalog_repo.get_color(key.color_id)
    return build_variant_sku(
        product_name,
        size.label if size else key.size_id[-3:],
        color.name if color else key.color_id[-3:],
    )


def parse_lines(lines: list[OrderLineSpec]) -> list[StockLine]:
    """Validate raw lines; ids must be well-formed, quantities numeric."""
    if not lines:
        raise ValidationError("Order must contain at least one item")
    return [
        StockLine(
            VariantKey(
                require_id(line.product_id, "product id"),
                require_id(line.size_id, "size id"),
                require_id(line.color_id, "color id"),
            ),
            Quantity.coerce(line.quantity),
        )
        for line in lines
    ]
