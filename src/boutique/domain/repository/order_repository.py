"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from boutique.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        """Return the order a user already placed with *key*, if any."""

    @abstractmethod
    def list_by_status(self, statuses: list[OrderStatus]) -> list[Order]:
        """Orders in any of *statuses*, oldest status change first."""

    @abstractmethod
    def list_all(self, user_id: str | None = None) -> list[Order]:
        """Every order (optionally of one user), newest first."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order, assigning an ID to new ones."""
