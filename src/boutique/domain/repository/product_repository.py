"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer and in the tests.

Besides whole-document reads and writes the store exposes atomic
field-level operations on a single variant, which is what the stock
reconciler relies on for cross-request safety.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from boutique.domain.model.product import Product
from boutique.domain.model.value_objects import VariantKey


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_many(self, product_ids: list[str]) -> list[Product]:
        """Return the products that exist among *product_ids* (any order)."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Product | None:
        """Return a product by SKU, compared case-insensitively."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    # --- Atomic single-document operations ------------------------------------

    @abstractmethod
    def get_variant_stock(self, key: VariantKey) -> int | None:
        """Current stock of one variant, or None if product or variant is absent."""

    @abstractmethod
    def increment_variant_stock(self, key: VariantKey, delta: int) -> bool:
        """Atomically add *delta* (may be negative) to a variant's stock.

        Unconditional: no lower bound is checked. Returns False when no
        variant matched.
        """

    @abstractmethod
    def set_variant_stock(self, key: VariantKey, stock: int) -> bool:
        """Atomically overwrite one variant's stock. Returns False when no variant matched."""

    @abstractmethod
    def increment_sales_count(self, product_id: str, quantity: int) -> bool:
        """Atomically add *quantity* to a product's sales counter."""
