"""Application service: sales history over recorded order lines (admin).

Every order line is one sale row, carrying the unit price locked at
placement and the stock snapshots taken around the decrement.
"""

from __future__ import annotations

from datetime import datetime

from boutique.application.dto import SalesRowDTO
from boutique.domain.exceptions import ValidationError
from boutique.domain.model.catalog import UNKNOWN_LABEL
from boutique.domain.model.order import Order, OrderItem, OrderStatus
from boutique.domain.model.value_objects import require_id
from boutique.domain.repository.catalog_repository import CatalogRepository
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository

DEFAULT_SALES_LIMIT = 1000
MAX_SALES_LIMIT = 5000
DELETED_PRODUCT_NAME = "Deleted product"


class SalesHistoryHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        catalog_repo: CatalogRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._catalog_repo = catalog_repo

    def handle(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        status: str | None = None,
        product_id: str | None = None,
        size_id: str | None = None,
        color_id: str | None = None,
        user_id: str | None = None,
        limit: int | None = None,
    ) -> list[SalesRowDTO]:
        """Sale rows, newest order first; every filter is optional.

        The date range applies to when the order was placed.
        """
        if since and until and until < since:
            raise ValidationError("Range end must not be before its start")
        wanted_status = OrderStatus.parse(status) if status else None
        product_id = require_id(product_id, "product id") if product_id else None
        size_id = require_id(size_id, "size id") if size_id else None
        color_id = require_id(color_id, "color id") if color_id else None
        user_id = require_id(user_id, "user id") if user_id else None
        limit = min(max(limit or DEFAULT_SALES_LIMIT, 1), MAX_SALES_LIMIT)

        rows: list[SalesRowDTO] = []
        names: dict[str, str] = {}
        for order in self._order_repo.list_all(user_id):
            if wanted_status is not None and order.status != wanted_status:
                continue
            if since is not None and order.created_at < since:
                continue
            if until is not None and order.created_at > until:
                continue
            for item in order.items:
                if product_id and item.product_id != product_id:
                    continue
                if size_id and item.size_id != size_id:
                    continue
                if color_id and item.color_id != color_id:
                    continue
                rows.append(self._to_row(order, item, names))
                if len(rows) == limit:
                    return rows
        return rows

    def _to_row(self, order: Order, item: OrderItem, names: dict[str, str]) -> SalesRowDTO:
        if item.product_id not in names:
            product = self._product_repo.get_by_id(item.product_id)
            names[item.product_id] = product.name if product else DELETED_PRODUCT_NAME
        size = self._catalog_repo.get_size(item.size_id)
        color = self._catalog_repo.get_color(item.color_id)
        return SalesRowDTO(
            order_id=order.id,  # type: ignore[arg-type]
            date=order.created_at.isoformat(),
            status=order.status.value,
            user_id=order.user_id,
            product_id=item.product_id,
            product_name=names[item.product_id],
            size_id=item.size_id,
            size_label=size.label if size else UNKNOWN_LABEL,
            color_id=item.color_id,
            color_name=color.name if color else UNKNOWN_LABEL,
            unit_price=str(item.unit_price),
            quantity=item.quantity.value,
            total=str(item.line_total),
            stock_before_purchase=item.stock_before_purchase,
            stock_at_purchase=item.stock_at_purchase,
        )
