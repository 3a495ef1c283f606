"""JSON-file-backed implementation of CartRepository."""

from __future__ import annotations

from boutique.domain.model.cart import Cart, CartItem
from boutique.domain.repository.cart_repository import CartRepository
from boutique.infrastructure.persistence.json_store import JsonFile, iso, parse_dt


class JsonCartRepository(CartRepository):

    def __init__(self, store: JsonFile) -> None:
        self._store = store

    def get_for_user(self, user_id: str) -> Cart | None:
        for raw in self._store.read():
            if raw["user_id"] == user_id:
                return Cart(
                    user_id=raw["user_id"],
                    items=[CartItem(**item) for item in raw["items"]],
                    version=raw["version"],
                    updated_at=parse_dt(raw["updated_at"]),
                )
        return None

    def save(self, cart: Cart) -> None:
        record = {
            "user_id": cart.user_id,
            "items": [
                {
                    "product_id": item.product_id,
                    "size_id": item.size_id,
                    "color_id": item.color_id,
                    "quantity": item.quantity,
                }
                for item in cart.items
            ],
            "version": cart.version,
            "updated_at": iso(cart.updated_at),
        }
        with self._store.editing() as rows:
            for i, raw in enumerate(rows):
                if raw["user_id"] == cart.user_id:
                    rows[i] = record
                    break
            else:
                rows.append(record)
