"""Domain service: derives admin alerts from post-mutation state.

Invoked after stock moves and order changes; it is not a watcher. Each
check re-reads the current state and consults the latest alert of the
same kind so repeated calls do not spam admins.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from boutique.domain.model.alert import AdminAlert, AlertType
from boutique.domain.model.catalog import UNKNOWN_LABEL
from boutique.domain.model.order import Order, OrderStatus
from boutique.domain.model.value_objects import VariantKey
from boutique.domain.repository.alert_repository import AlertRepository
from boutique.domain.repository.catalog_repository import CatalogRepository
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.service.alert_broadcaster import AlertBroadcaster

DEFAULT_LOW_STOCK_THRESHOLD = 3
LOW_STOCK_WINDOW = timedelta(hours=24)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


class AlertEmitter:

    def __init__(
        self,
        alert_repo: AlertRepository,
        product_repo: ProductRepository,
        catalog_repo: CatalogRepository,
        broadcaster: AlertBroadcaster,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        clock: Clock = utc_now,
    ) -> None:
        self._alert_repo = alert_repo
        self._product_repo = product_repo
        self._catalog_repo = catalog_repo
        self._broadcaster = broadcaster
        self._low_stock_threshold = low_stock_threshold
        self._clock = clock

    # --- Stock ----------------------------------------------------------------

    def check_variant(self, key: VariantKey) -> list[AdminAlert]:
        """Out-of-stock check, then low-stock check, for one variant."""
        created = [
            self.emit_out_of_stock_if_needed(key),
            self.emit_low_stock_if_needed(key),
        ]
        return [alert for alert in created if alert is not None]

    def emit_out_of_stock_if_needed(self, key: VariantKey) -> AdminAlert | None:
        """At most one out-of-stock alert per variant per calendar day."""
        product = self._product_repo.get_by_id(key.product_id)
        variant = product.find_variant(key.size_id, key.color_id) if product else None
        if product is None or variant is None or variant.stock > 0:
            return None

        now = self._clock()
        if self._has_variant_alert_since(key, AlertType.OUT_OF_STOCK_VARIANT, start_of_day(now)):
            return None

        return self._create(
            AdminAlert(
                id=None,
                type=AlertType.OUT_OF_STOCK_VARIANT,
                message=f'Variant {self._labels(key)} of "{product.name}" is out of stock.',
                product_id=key.product_id,
                size_id=key.size_id,
                color_id=key.color_id,
                created_at=now,
            )
        )

    def emit_low_stock_if_needed(self, key: VariantKey) -> AdminAlert | None:
        """At most one low-stock alert per variant per 24 hours."""
        product = self._product_repo.get_by_id(key.product_id)
        variant = product.find_variant(key.size_id, key.color_id) if product else None
        if product is None or variant is None:
            return None
        if variant.stock <= 0 or variant.stock > self._low_stock_threshold:
            return None

        now = self._clock()
        if self._has_variant_alert_since(key, AlertType.LOW_STOCK_VARIANT, now - LOW_STOCK_WINDOW):
            return None

        return self._create(
            AdminAlert(
                id=None,
                type=AlertType.LOW_STOCK_VARIANT,
                message=(
                    f'Low stock on variant {self._labels(key)} of "{product.name}" '
                    f"(stock: {variant.stock})."
                ),
                product_id=key.product_id,
                size_id=key.size_id,
                color_id=key.color_id,
                created_at=now,
            )
        )

    # --- Orders ---------------------------------------------------------------

    def emit_order_created(self, order: Order) -> AdminAlert:
        return self._create(
            AdminAlert(
                id=None,
                type=AlertType.ORDER_CREATED,
                message=f"New order #{short_ref(order.id)} for {order.total}.",
                order_id=order.id,
                order_status=order.status.value,
                created_at=self._clock(),
            )
        )

    def emit_order_status_changed(self, order: Order, previous: OrderStatus) -> AdminAlert:
        return self._create(
            AdminAlert(
                id=None,
                type=AlertType.ORDER_STATUS_CHANGED,
                message=(
                    f"Order #{short_ref(order.id)} moved from "
                    f'"{previous.value}" to "{order.status.value}".'
                ),
                order_id=order.id,
                order_status=order.status.value,
                created_at=self._clock(),
            )
        )

    def emit_order_stale(self, order: Order, now: datetime) -> AdminAlert:
        since = order.current_status_at.isoformat(timespec="minutes") if order.current_status_at else "?"
        return self._create(
            AdminAlert(
                id=None,
                type=AlertType.ORDER_STALE_STATUS,
                message=(
                    f'Order #{short_ref(order.id)} stuck in status "{order.status.value}" '
                    f"since {since}."
                ),
                order_id=order.id,
                order_status=order.status.value,
                created_at=now,
            )
        )

    # --- Internal helpers -----------------------------------------------------

    def _create(self, alert: AdminAlert) -> AdminAlert:
        self._alert_repo.add(alert)
        self._broadcaster.publish(alert)
        return alert

    def _has_variant_alert_since(
        self, key: VariantKey, alert_type: AlertType, since: datetime
    ) -> bool:
        # Compared here rather than in the store query.
        last = self._alert_repo.latest_for_variant(key, alert_type)
        return last is not None and last.created_at >= since

    def _labels(self, key: VariantKey) -> str:
        size = self._catalog_repo.get_size(key.size_id)
        color = self._catalog_repo.get_color(key.color_id)
        return f"{size.label if size else UNKNOWN_LABEL}/{color.name if color else UNKNOWN_LABEL}"


def short_ref(order_id: str | None) -> str:
    return str(order_id or "")[-8:].upper()
