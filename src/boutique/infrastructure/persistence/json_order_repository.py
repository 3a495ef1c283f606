"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from dataclasses import asdict
from decimal import Decimal

from boutique.domain.exceptions import ConflictError
from boutique.domain.model.order import (
    Order,
    OrderItem,
    OrderStatus,
    ShippingInfo,
    StatusChange,
)
from boutique.domain.model.value_objects import Money, Quantity, new_id
from boutique.domain.repository.order_repository import OrderRepository
from boutique.infrastructure.persistence.json_store import JsonFile, iso, parse_dt


class JsonOrderRepository(OrderRepository):

    def __init__(self, store: JsonFile) -> None:
        self._store = store

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._store.read():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        for raw in self._store.read():
            if raw["user_id"] == user_id and raw.get("idempotency_key") == key:
                return self._to_domain(raw)
        return None

    def list_by_status(self, statuses: list[OrderStatus]) -> list[Order]:
        wanted = {s.value for s in statuses}
        orders = [self._to_domain(raw) for raw in self._store.read() if raw["status"] in wanted]
        return sorted(orders, key=lambda o: o.current_status_at or o.created_at)

    def list_all(self, user_id: str | None = None) -> list[Order]:
        orders = [
            self._to_domain(raw)
            for raw in self._store.read()
            if user_id is None or raw["user_id"] == user_id
        ]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def save(self, order: Order) -> None:
        with self._store.editing() as rows:
            if order.idempotency_key is not None:
                for raw in rows:
                    if (
                        raw["id"] != order.id
                        and raw["user_id"] == order.user_id
                        and raw.get("idempotency_key") == order.idempotency_key
                    ):
                        raise ConflictError("Duplicate idempotency key for this user")

            if order.id is None:
                order.id = new_id()

            # Upsert: replace if exists, otherwise append
            for i, raw in enumerate(rows):
                if raw["id"] == order.id:
                    rows[i] = self._to_raw(order)
                    break
            else:
                rows.append(self._to_raw(order))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status.value,
            "idempotency_key": order.idempotency_key,
            "items": [
                {
                    "product_id": item.product_id,
                    "size_id": item.size_id,
                    "color_id": item.color_id,
                    "sku": item.sku,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                    "stock_before_purchase": item.stock_before_purchase,
                    "stock_at_purchase": item.stock_at_purchase,
                }
                for item in order.items
            ],
            "total": str(order.total.amount),
            "was_counted_for_bestsellers": order.was_counted_for_bestsellers,
            "tracking_number": order.tracking_number,
            "shipping_company": order.shipping_company,
            "admin_comment": order.admin_comment,
            "shipping_info": asdict(order.shipping_info) if order.shipping_info else None,
            "status_history": [
                {
                    "from": change.from_status.value if change.from_status else None,
                    "to": change.to_status.value,
                    "at": iso(change.at),
                    "by": change.by,
                }
                for change in order.status_history
            ],
            "status_timestamps": {
                status.value: iso(at) for status, at in order.status_timestamps.items()
            },
            "current_status_at": iso(order.current_status_at),
            "created_at": iso(order.created_at),
            "updated_at": iso(order.updated_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                product_id=i["product_id"],
                size_id=i["size_id"],
                color_id=i["color_id"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", "USD")),
                sku=i.get("sku", ""),
                stock_before_purchase=i.get("stock_before_purchase"),
                stock_at_purchase=i.get("stock_at_purchase"),
            )
            for i in raw["items"]
        ]
        shipping = raw.get("shipping_info")
        return Order(
            id=raw["id"],
            user_id=raw["user_id"],
            items=items,
            total=Money(Decimal(raw["total"])),
            status=OrderStatus(raw["status"]),
            idempotency_key=raw.get("idempotency_key"),
            was_counted_for_bestsellers=raw.get("was_counted_for_bestsellers", False),
            tracking_number=raw.get("tracking_number", ""),
            shipping_company=raw.get("shipping_company", ""),
            admin_comment=raw.get("admin_comment", ""),
            shipping_info=ShippingInfo(**shipping) if shipping else None,
            status_history=[
                StatusChange(
                    from_status=OrderStatus(h["from"]) if h["from"] else None,
                    to_status=OrderStatus(h["to"]),
                    at=parse_dt(h["at"]),
                    by=h.get("by"),
                )
                for h in raw.get("status_history", [])
            ],
            status_timestamps={
                OrderStatus(status): parse_dt(at)
                for status, at in raw.get("status_timestamps", {}).items()
            },
            current_status_at=parse_dt(raw.get("current_status_at")),
            created_at=parse_dt(raw["created_at"]),
            updated_at=parse_dt(raw["updated_at"]),
        )
