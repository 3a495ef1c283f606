"""Status transition shared by the status endpoint and the order update."""

from __future__ import annotations

from datetime import datetime

import structlog

from boutique.domain.model.order import Order, OrderStatus
from boutique.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


def apply_status(
    order: Order,
    raw_status: object,
    product_repo: ProductRepository,
    by: str | None = None,
    now: datetime | None = None,
) -> tuple[OrderStatus, bool]:
    """Move *order* to *raw_status*; returns (previous status, counted now).

    Becoming ``invoiced`` for the first time adds each line's quantity to
    its product's sales counter. The order flag makes it happen once per
    order no matter how often the status flips afterwards.
    """
    status = OrderStatus.parse(raw_status)
    previous = order.transition_to(status, by, now)

    counted = False
    if status == OrderStatus.INVOICED and order.mark_counted_for_bestsellers():
        for item in order.items:
            if not product_repo.increment_sales_count(item.product_id, item.quantity.value):
                logger.warning(
                    "Sales count not updated, product missing",
                    order_id=order.id,
                    product_id=item.product_id,
                )
        counted = True
    return previous, counted
