"""Application service: Cancel Order use case.

Only PENDING orders can be cancelled. Restocking every line and flipping
the status happen in one transaction when the store supports them;
otherwise the same steps run without one.
"""

from __future__ import annotations

import structlog

from boutique.application.alert_hooks import alert_status_changed
from boutique.application.dashboard import DashboardCache
from boutique.application.dto import AdminOrderDTO
from boutique.application.serializers import to_admin_dto
from boutique.domain.exceptions import EntityNotFoundError
from boutique.domain.model.order import Order, OrderStatus
from boutique.domain.model.value_objects import require_id
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.repository.transaction import TransactionManager
from boutique.domain.service.alert_emitter import AlertEmitter, Clock, utc_now

logger = structlog.get_logger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        transactions: TransactionManager,
        alert_emitter: AlertEmitter,
        dashboard_cache: DashboardCache,
        clock: Clock = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._transactions = transactions
        self._alert_emitter = alert_emitter
        self._dashboard_cache = dashboard_cache
        self._clock = clock

    def handle(self, order_id: str, by: str | None = None) -> AdminOrderDTO:
        order_id = require_id(order_id, "order id")

        if self._transactions.supports_transactions:
            with self._transactions.transaction():
                order, previous = self._cancel(order_id, by)
        else:
            logger.warning("Transactions unsupported, cancelling without one", order_id=order_id)
            order, previous = self._cancel(order_id, by)

        logger.info("Order cancelled", order_id=order.id, restocked_lines=len(order.items))
        alert_status_changed(self._alert_emitter, order, previous)
        self._dashboard_cache.invalidate()
        return to_admin_dto(order)

    def _cancel(self, order_id: str, by: str | None) -> tuple[Order, OrderStatus]:
        # Re-read inside the transaction so the status check sees committed state.
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        order.ensure_cancellable()

        for item in order.items:
            if not self._product_repo.increment_variant_stock(item.key, item.quantity.value):
                logger.warning(
                    "Restock skipped, variant no longer exists",
                    order_id=order_id,
                    variant=str(item.key),
                    quantity=item.quantity.value,
                )

        previous = order.cancel(by, self._clock())
        self._order_repo.save(order)
        return order, previous
