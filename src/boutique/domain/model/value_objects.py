"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import math
import re
import secrets
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from boutique.domain.exceptions import ValidationError

_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
_CENT = Decimal("0.01")


def new_id() -> str:
    """Generate a fresh 24-hex document identifier."""
    return secrets.token_hex(12)


def is_valid_id(value: object) -> bool:
    return isinstance(value, str) and bool(_ID_PATTERN.match(value))


def require_id(value: object, label: str) -> str:
    """Return *value* stripped, or raise if it is not a well-formed identifier."""
    text = str(value or "").strip()
    if not is_valid_id(text):
        raise ValidationError(f"Invalid {label}: {value!r}")
    return text.lower()


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def rounded(self) -> Money:
        """Round half-up to two decimals."""
        return Money(self.amount.quantize(_CENT, rounding=ROUND_HALF_UP), self.currency)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0.00"))


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    @staticmethod
    def coerce(raw: object) -> Quantity:
        """Floor a numeric request value and lift it to at least 1."""
        try:
            number = float(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid quantity: {raw!r}") from exc
        if math.isnan(number) or math.isinf(number):
            raise ValidationError(f"Invalid quantity: {raw!r}")
        return Quantity(max(1, math.floor(number)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class VariantKey:
    """Identifies one variant of one product: (product, size, color)."""

    product_id: str
    size_id: str
    color_id: str

    @property
    def variant_key(self) -> str:
        """The product-local key, as stored in the ledger."""
        return f"{self.size_id}::{self.color_id}"

    def __str__(self) -> str:
        return f"{self.product_id}::{self.size_id}::{self.color_id}"
