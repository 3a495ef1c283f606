"""Application service: Update Order Status use case (admin)."""

from __future__ import annotations

import structlog

from boutique.application.alert_hooks import alert_status_changed
from boutique.application.dashboard import DashboardCache
from boutique.application.dto import StatusUpdateResult
from boutique.application.order_status import apply_status
from boutique.application.serializers import to_admin_dto
from boutique.domain.exceptions import EntityNotFoundError
from boutique.domain.model.order import OrderStatus
from boutique.domain.model.value_objects import require_id
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.service.alert_emitter import AlertEmitter, Clock, utc_now

logger = structlog.get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        alert_emitter: AlertEmitter,
        dashboard_cache: DashboardCache,
        clock: Clock = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._alert_emitter = alert_emitter
        self._dashboard_cache = dashboard_cache
        self._clock = clock

    def handle(self, order_id: str, status: str, by: str | None = None) -> StatusUpdateResult:
        """Set any of the known statuses, whatever the current one is."""
        OrderStatus.parse(status)
        order_id = require_id(order_id, "order id")
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        previous, counted = apply_status(order, status, self._product_repo, by, self._clock())
        self._order_repo.save(order)

        logger.info(
            "Order status updated",
            order_id=order.id,
            previous=previous.value,
            status=order.status.value,
            counted_for_bestsellers=counted,
        )
        alert_status_changed(self._alert_emitter, order, previous)
        self._dashboard_cache.invalidate()

        return StatusUpdateResult(to_admin_dto(order), previous.value, counted)
