"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OrderLineSpec:
    """Input: one requested variant. Values are raw and validated by handlers."""

    product_id: str
    size_id: str
    color_id: str
    quantity: object = 1


@dataclass(frozen=True)
class OrderChanges:
    """Input: admin edits to an order. ``None`` means "leave unchanged"."""

    status: str | None = None
    tracking_number: str | None = None
    shipping_company: str | None = None
    admin_comment: str | None = None
    shipping_info: dict[str, str | None] | None = None
    items: list[OrderLineSpec] | None = None

    @property
    def has_metadata(self) -> bool:
        return any(
            value is not None
            for value in (
                self.status,
                self.tracking_number,
                self.shipping_company,
                self.admin_comment,
                self.shipping_info,
            )
        )


@dataclass(frozen=True)
class OrderItemDTO:
    """Output: a line item as shown to the customer."""

    product_id: str
    sku: str
    size_id: str
    color_id: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class AdminOrderItemDTO(OrderItemDTO):
    """Output: a line item with the stock snapshots only admins see."""

    stock_before_purchase: int | None = None
    stock_at_purchase: int | None = None


@dataclass(frozen=True)
class UserOrderDTO:
    id: str
    status: str
    status_date: str
    items: list[OrderItemDTO]
    total: str
    tracking_number: str
    shipping_company: str
    admin_comment: str
    shipping_info: dict[str, str] | None
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class AdminOrderDTO:
    id: str
    user_id: str
    status: str
    items: list[AdminOrderItemDTO]
    total: str
    idempotency_key: str | None
    was_counted_for_bestsellers: bool
    current_status_at: str | None
    status_history: list[dict[str, str | None]]
    tracking_number: str
    shipping_company: str
    admin_comment: str
    shipping_info: dict[str, str] | None
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class PlaceOrderResult:
    order_id: str
    created: bool  # False when an earlier order with the same key was returned
    order: UserOrderDTO


@dataclass(frozen=True)
class StatusUpdateResult:
    order: AdminOrderDTO
    previous_status: str
    incremented_bestsellers: bool


@dataclass(frozen=True)
class VariantSummaryDTO:
    size_id: str
    size_label: str
    color_id: str
    color_name: str
    stock: int


@dataclass(frozen=True)
class ProductSummaryDTO:
    id: str
    sku: str
    name: str
    price: str
    effective_price: str
    variants: list[VariantSummaryDTO] = field(default_factory=list)


@dataclass(frozen=True)
class CartItemDTO:
    product_id: str
    size_id: str
    color_id: str
    quantity: int


@dataclass(frozen=True)
class CartDTO:
    user_id: str
    items: list[CartItemDTO]
    version: int
    updated_at: str


@dataclass(frozen=True)
class SalesRowDTO:
    """Output: one sold order line, with the labels of its variant."""

    order_id: str
    date: str
    status: str
    user_id: str
    product_id: str
    product_name: str
    size_id: str
    size_label: str
    color_id: str
    color_name: str
    unit_price: str
    quantity: int
    total: str
    stock_before_purchase: int | None
    stock_at_purchase: int | None
