"""Cart aggregate with a version counter for optimistic concurrency.

Clients echo the version they last saw; a mismatch means someone else
changed the cart in between and the write is refused instead of merged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from boutique.domain.exceptions import VersionConflictError
from boutique.domain.model.value_objects import VariantKey

MAX_CART_QUANTITY = 99


def clamp_quantity(raw: int) -> int:
    return max(1, min(int(raw), MAX_CART_QUANTITY))


@dataclass
class CartItem:
    product_id: str
    size_id: str
    color_id: str
    quantity: int

    @property
    def key(self) -> VariantKey:
        return VariantKey(self.product_id, self.size_id, self.color_id)


@dataclass
class Cart:
    user_id: str
    items: list[CartItem] = field(default_factory=list)
    version: int = 1
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def check_version(self, expected: int | None) -> None:
        """No-op when the caller did not send a version."""
        if expected is not None and expected != self.version:
            raise VersionConflictError(expected=expected, current=self.version)

    def upsert_item(self, key: VariantKey, quantity: int, limit: int) -> None:
        """Add *quantity* to the line for *key*, capped at *limit*."""
        item = self.find(key)
        if item is None:
            self.items.append(
                CartItem(key.product_id, key.size_id, key.color_id, min(quantity, limit))
            )
        else:
            item.quantity = min(clamp_quantity(item.quantity + quantity), limit)
        self._bump()

    def update_quantity(self, key: VariantKey, quantity: int) -> bool:
        item = self.find(key)
        if item is None:
            return False
        item.quantity = quantity
        self._bump()
        return True

    def remove_item(self, key: VariantKey) -> bool:
        item = self.find(key)
        if item is None:
            return False
        self.items.remove(item)
        self._bump()
        return True

    def find(self, key: VariantKey) -> CartItem | None:
        for item in self.items:
            if item.key == key:
                return item
        return None

    def _bump(self) -> None:
        self.version += 1
        self.updated_at = datetime.now(timezone.utc)
