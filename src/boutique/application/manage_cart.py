"""Application services: cart use cases with optimistic concurrency.

Updates and removals may carry the version the client last saw; a stale
version is refused with ``VersionConflictError`` and nothing changes.
"""

from __future__ import annotations

from dataclasses import dataclass

from boutique.application.dto import CartDTO
from boutique.application.serializers import to_cart_dto
from boutique.domain.exceptions import EntityNotFoundError, InsufficientStockError
from boutique.domain.model.cart import MAX_CART_QUANTITY, Cart, clamp_quantity
from boutique.domain.model.value_objects import Quantity, VariantKey, require_id
from boutique.domain.repository.cart_repository import CartRepository
from boutique.domain.repository.product_repository import ProductRepository


@dataclass(frozen=True)
class CartLineSpec:
    product_id: str
    size_id: str
    color_id: str
    quantity: object = 1


class _CartHandler:

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo

    def _cart_for(self, user_id: str) -> Cart:
        user_id = require_id(user_id, "user id")
        cart = self._cart_repo.get_for_user(user_id)
        if cart is None:
            cart = Cart(user_id=user_id)
            self._cart_repo.save(cart)
        return cart

    def _allowed(self, line: CartLineSpec) -> tuple[VariantKey, int, int]:
        """Validate the variant; returns (key, quantity, cap) with both capped at 99 and at stock."""
        key = VariantKey(
            require_id(line.product_id, "product id"),
            require_id(line.size_id, "size id"),
            require_id(line.color_id, "color id"),
        )
        qty = clamp_quantity(Quantity.coerce(line.quantity).value)
        product = self._product_repo.get_by_id(key.product_id)
        if product is None:
            raise EntityNotFoundError(f"Product {key.product_id} not found")
        variant = product.find_variant(key.size_id, key.color_id)
        if variant is None:
            raise EntityNotFoundError("Variant not found for this product")
        if variant.stock <= 0:
            raise InsufficientStockError(product.id, product.name, qty, variant.stock)
        cap = min(MAX_CART_QUANTITY, variant.stock)
        return key, min(qty, cap), cap


class ShowCartHandler(_CartHandler):

    def handle(self, user_id: str) -> CartDTO:
        return to_cart_dto(self._cart_for(user_id))


class AddCartItemHandler(_CartHandler):

    def handle(self, user_id: str, line: CartLineSpec) -> CartDTO:
        key, qty, cap = self._allowed(line)
        cart = self._cart_for(user_id)
        cart.upsert_item(key, qty, cap)
        self._cart_repo.save(cart)
        return to_cart_dto(cart)


class MergeCartHandler(_CartHandler):
    """Fold a guest cart into the user's cart; every line is validated first."""

    def handle(self, user_id: str, lines: list[CartLineSpec]) -> CartDTO:
        allowed = [self._allowed(line) for line in lines]
        cart = self._cart_for(user_id)
        for key, qty, cap in allowed:
            cart.upsert_item(key, qty, cap)
        self._cart_repo.save(cart)
        return to_cart_dto(cart)


class UpdateCartItemHandler(_CartHandler):

    def handle(self, user_id: str, line: CartLineSpec, expected_version: int | None = None) -> CartDTO:
        key, qty, _ = self._allowed(line)
        cart = self._cart_for(user_id)
        cart.check_version(expected_version)
        if not cart.update_quantity(key, qty):
            raise EntityNotFoundError("Item not in cart")
        self._cart_repo.save(cart)
        return to_cart_dto(cart)


class RemoveCartItemHandler(_CartHandler):

    def handle(
        self,
        user_id: str,
        product_id: str,
        size_id: str,
        color_id: str,
        expected_version: int | None = None,
    ) -> CartDTO:
        key = VariantKey(
            require_id(product_id, "product id"),
            require_id(size_id, "size id"),
            require_id(color_id, "color id"),
        )
        cart = self._cart_for(user_id)
        cart.check_version(expected_version)
        if not cart.remove_item(key):
            raise EntityNotFoundError("Item not in cart")
        self._cart_repo.save(cart)
        return to_cart_dto(cart)
