"""Application services: order queries (customer and admin views)."""

from __future__ import annotations

from boutique.application.dto import AdminOrderDTO, UserOrderDTO
from boutique.application.serializers import to_admin_dto, to_user_dto
from boutique.domain.exceptions import EntityNotFoundError
from boutique.domain.model.order import Order, OrderStatus
from boutique.domain.model.value_objects import require_id
from boutique.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: str) -> AdminOrderDTO:
        order_id = require_id(order_id, "order id")
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        return to_admin_dto(order)


class ShowMyOrderHandler:
    """A customer only ever sees their own orders; others look absent."""

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, user_id: str, order_id: str) -> UserOrderDTO:
        user_id = require_id(user_id, "user id")
        order_id = require_id(order_id, "order id")
        order = self._order_repo.get_by_id(order_id)
        if order is None or order.user_id != user_id:
            raise EntityNotFoundError(f"Order {order_id} not found")
        return to_user_dto(order)


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, status: str | None = None) -> list[AdminOrderDTO]:
        """All orders, newest first, optionally of a single status."""
        return [to_admin_dto(order) for order in self._orders(None, status)]

    def handle_for_user(self, user_id: str, status: str | None = None) -> list[UserOrderDTO]:
        """One customer's orders, as that customer sees them."""
        user_id = require_id(user_id, "user id")
        return [to_user_dto(order) for order in self._orders(user_id, status)]

    def _orders(self, user_id: str | None, status: str | None) -> list[Order]:
        orders = self._order_repo.list_all(user_id)
        if status is None:
            return orders
        wanted = OrderStatus.parse(status)
        return [o for o in orders if o.status == wanted]
