"""Post-commit alert triggers shared by the order and catalog handlers.

Alerting is a side effect: a failure here is logged and never undoes or
fails the operation that triggered it.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from boutique.domain.model.order import Order, OrderStatus
from boutique.domain.model.value_objects import VariantKey
from boutique.domain.service.alert_emitter import AlertEmitter

logger = structlog.get_logger(__name__)


def check_stock_alerts(emitter: AlertEmitter, keys: Iterable[VariantKey]) -> None:
    """Evaluate out-of-stock then low-stock once per distinct variant."""
    for key in dict.fromkeys(keys):
        try:
            emitter.check_variant(key)
        except Exception:
            logger.warning("Stock alert evaluation failed", variant=str(key), exc_info=True)


def alert_order_created(emitter: AlertEmitter, order: Order) -> None:
    try:
        emitter.emit_order_created(order)
    except Exception:
        logger.warning("Order created alert failed", order_id=order.id, exc_info=True)


def alert_status_changed(emitter: AlertEmitter, order: Order, previous: OrderStatus) -> None:
    try:
        emitter.emit_order_status_changed(order, previous)
    except Exception:
        logger.warning(
            "Order status alert failed",
            order_id=order.id,
            previous=previous.value,
            status=order.status.value,
            exc_info=True,
        )
