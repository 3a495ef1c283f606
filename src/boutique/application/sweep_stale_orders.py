"""Application service: stale order sweep.

Meant to run hourly (cron, or ``boutique alert sweep-stale --watch``).
An order is stale when it has sat in a watched status longer than that
status's SLA. Each (order, status) pair is re-announced at most once per
renotify window.
"""

from __future__ import annotations

from datetime import timedelta

import structlog

from boutique.domain.model.order import OrderStatus
from boutique.domain.repository.alert_repository import AlertRepository
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.service.alert_emitter import AlertEmitter, Clock, utc_now

logger = structlog.get_logger(__name__)

DEFAULT_SLA_HOURS = {
    OrderStatus.PENDING: 72,
    OrderStatus.INVOICED: 72,
    OrderStatus.SHIPPED: 72,
}
DEFAULT_RENOTIFY_HOURS = 24


class SweepStaleOrdersHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        alert_repo: AlertRepository,
        alert_emitter: AlertEmitter,
        sla_hours: dict[OrderStatus, int] | None = None,
        renotify_hours: int = DEFAULT_RENOTIFY_HOURS,
        clock: Clock = utc_now,
    ) -> None:
        self._order_repo = order_repo
        self._alert_repo = alert_repo
        self._alert_emitter = alert_emitter
        self._sla_hours = sla_hours or dict(DEFAULT_SLA_HOURS)
        self._renotify = timedelta(hours=renotify_hours)
        self._clock = clock

    def handle(self) -> int:
        """Emit stale alerts; returns how many were created."""
        now = self._clock()
        created = 0
        for order in self._order_repo.list_by_status(list(self._sla_hours)):
            if order.current_status_at is None:
                continue
            sla = timedelta(hours=self._sla_hours[order.status])
            if now - order.current_status_at < sla:
                continue

            last = self._alert_repo.latest_for_order_status(order.id, order.status.value)  # type: ignore[arg-type]
            if last is not None and now - last.created_at < self._renotify:
                continue

            self._alert_emitter.emit_order_stale(order, now)
            created += 1

        logger.info("Stale order sweep finished", alerts_created=created)
        return created
