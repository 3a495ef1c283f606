"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, variants are added and removed, stock is edited by admins
and consumed by orders.
"""

from __future__ import annotations

import re
import time
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from boutique.domain.exceptions import ValidationError
from boutique.domain.model.value_objects import Money

SKU_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9_-]{5,63}$", re.IGNORECASE)
MAX_PERCENT_DISCOUNT = Decimal("90")


class DiscountType(Enum):
    PERCENT = "PERCENT"
    FIXED = "FIXED"


@dataclass(frozen=True)
class Discount:
    """A price reduction, optionally bounded by a time window."""

    enabled: bool = False
    type: DiscountType = DiscountType.PERCENT
    value: Decimal = Decimal("0")
    start_at: datetime | None = None
    end_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        if not self.enabled:
            return False
        if self.start_at is not None and now < self.start_at:
            return False
        if self.end_at is not None and now > self.end_at:
            return False
        return True

    def apply(self, price: Money, now: datetime) -> Money:
        """Return the discounted price, floored at zero and rounded to cents."""
        if not self.is_active(now):
            return price
        if self.type == DiscountType.PERCENT:
            amount = price.amount - price.amount * self.value / Decimal("100")
        else:
            amount = price.amount - self.value
        return Money(max(amount, Decimal("0")), price.currency).rounded()

    def validate_against(self, price: Money) -> None:
        """Reject discounts an admin should not be able to configure."""
        if not self.enabled:
            return
        if self.type == DiscountType.PERCENT:
            if not Decimal("0") < self.value <= MAX_PERCENT_DISCOUNT:
                raise ValidationError("Percent discount must be between 1 and 90")
        elif not Decimal("0") < self.value < price.amount:
            raise ValidationError("Fixed discount must be above 0 and below the price")
        if self.start_at and self.end_at and self.end_at <= self.start_at:
            raise ValidationError("Discount end must be after its start")


@dataclass
class Variant:
    """A purchasable size x color combination carrying its own stock."""

    size_id: str
    color_id: str
    stock: int

    @property
    def key(self) -> str:
        return f"{self.size_id}::{self.color_id}"


@dataclass
class Product:
    """A product in the catalog.

    This is an aggregate root: variants are embedded and only reachable
    through it. Stock counters on the variants are moved by the stock
    reconciler through atomic repository operations, never by loading,
    mutating and saving the whole product during order placement.
    """

    id: str
    sku: str
    name: str
    price: Money
    variants: list[Variant] = field(default_factory=list)
    discount: Discount = field(default_factory=Discount)
    sales_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        product_id: str,
        name: str,
        price: Money,
        variants: list[Variant],
        sku: str | None = None,
        discount: Discount | None = None,
    ) -> Product:
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        product = Product(
            id=product_id,
            sku=validate_sku(sku) if sku else generate_sku(name),
            name=name.strip(),
            price=price,
            discount=discount or Discount(),
        )
        product.discount.validate_against(price)
        product.replace_variants(variants)
        return product

    # --- Queries --------------------------------------------------------------

    def find_variant(self, size_id: str, color_id: str) -> Variant | None:
        for variant in self.variants:
            if variant.size_id == size_id and variant.color_id == color_id:
                return variant
        return None

    def effective_price(self, now: datetime | None = None) -> Money:
        return self.discount.apply(self.price, now or datetime.now(timezone.utc))

    # --- Mutations ------------------------------------------------------------

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def replace_variants(self, variants: list[Variant]) -> None:
        seen: set[str] = set()
        for variant in variants:
            if variant.stock < 0:
                raise ValidationError("Variant stock cannot be negative")
            if variant.key in seen:
                raise ValidationError("Duplicate variant (size + color)")
            seen.add(variant.key)
        self.variants = list(variants)


def validate_sku(raw: str) -> str:
    sku = raw.strip()
    if not SKU_PATTERN.match(sku):
        raise ValidationError(f"Invalid SKU: {raw!r}")
    return sku


def _ascii_upper(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch)).upper()


def generate_sku(name: str) -> str:
    """Readable SKU from the product name plus a short time-based suffix."""
    base = re.sub(r"[^A-Z0-9]+", "-", _ascii_upper(name)).strip("-")[:20] or "PROD"
    suffix = _base36(int(time.time() * 1000))[-4:]
    return f"{base}-{suffix}"


def build_variant_sku(product_name: str, size_label: str, color_name: str) -> str:
    """Line SKU such as ``SHIR-M-BLU`` for order items."""
    prefix = re.sub(r"[^A-Z]", "", _ascii_upper(product_name))[:4].ljust(4, "X")
    color_code = re.sub(r"[^A-Z]", "", _ascii_upper(color_name))[:3] or "COL"
    return f"{prefix}-{size_label}-{color_code}"


def _base36(number: int) -> str:
    digits = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    out = ""
    while number:
        number, rem = divmod(number, 36)
        out = digits[rem] + out
    return out or "0"
