"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items, its status
history and the flags guarding one-time side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from boutique.domain.exceptions import OrderStateConflictError, ValidationError
from boutique.domain.model.value_objects import Money, Quantity, VariantKey


class OrderStatus(Enum):
    PENDING = "pending"
    INVOICED = "invoiced"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, raw: object) -> OrderStatus:
        """Accept one of the five known status strings, reject anything else."""
        try:
            return cls(str(raw))
        except ValueError:
            raise ValidationError(f"Invalid order status: {raw!r}") from None


@dataclass
class ShippingInfo:
    full_name: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    notes: str = ""

    def merged(self, changes: dict[str, str | None]) -> ShippingInfo:
        """Return a copy with only the provided fields replaced."""
        values = {
            name: getattr(self, name) for name in ("full_name", "phone", "address", "city", "notes")
        }
        for name, value in changes.items():
            if name not in values:
                raise ValidationError(f"Unknown shipping field: {name}")
            values[name] = str(value or "")
        return ShippingInfo(**values)


@dataclass
class OrderItem:
    """One purchased variant.

    ``unit_price`` and the two stock snapshots are captured when the line
    first enters the order and are kept when an admin edits quantities.
    """

    product_id: str
    size_id: str
    color_id: str
    quantity: Quantity
    unit_price: Money  # locked when the line was added
    sku: str = ""
    stock_before_purchase: int | None = None
    stock_at_purchase: int | None = None

    @property
    def key(self) -> VariantKey:
        return VariantKey(self.product_id, self.size_id, self.color_id)

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class StatusChange:
    from_status: OrderStatus | None
    to_status: OrderStatus
    at: datetime
    by: str | None = None


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.place()`` factory for new orders.  The ``__init__`` is
    intentionally simple so the repository can reconstitute persisted
    orders without re-validating.
    """

    id: str | None
    user_id: str
    items: list[OrderItem]
    total: Money = field(default_factory=Money.zero)
    status: OrderStatus = OrderStatus.PENDING
    idempotency_key: str | None = None
    was_counted_for_bestsellers: bool = False
    tracking_number: str = ""
    shipping_company: str = ""
    admin_comment: str = ""
    shipping_info: ShippingInfo | None = None
    status_history: list[StatusChange] = field(default_factory=list)
    status_timestamps: dict[OrderStatus, datetime] = field(default_factory=dict)
    current_status_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        user_id: str,
        items: list[OrderItem],
        shipping_info: ShippingInfo | None = None,
        idempotency_key: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Create a new pending order with its total computed from the lines."""
        if not user_id:
            raise ValidationError("User is required")
        if not items:
            raise ValidationError("Order must contain at least one item")

        now = now or datetime.now(timezone.utc)
        order = Order(
            id=None,
            user_id=user_id,
            items=list(items),
            idempotency_key=idempotency_key,
            shipping_info=shipping_info,
            created_at=now,
            updated_at=now,
        )
        order.recompute_total()
        order._record_transition(None, OrderStatus.PENDING, user_id, now)
        return order

    # --- State transitions ----------------------------------------------------

    def transition_to(
        self,
        status: OrderStatus,
        by: str | None = None,
        now: datetime | None = None,
    ) -> OrderStatus:
        """Move to *status* and return the previous one.

        Any known status is accepted from any current status; only the
        status value itself is validated (see ``OrderStatus.parse``).
        """
        previous = self.status
        self._record_transition(previous, status, by, now or datetime.now(timezone.utc))
        return previous

    def cancel(self, by: str | None = None, now: datetime | None = None) -> OrderStatus:
        """Transition PENDING -> CANCELLED.

        Restocking the lines must happen in the same transaction, before
        the order is saved (coordinated by the application handler).
        """
        self.ensure_cancellable()
        return self.transition_to(OrderStatus.CANCELLED, by, now)

    def ensure_cancellable(self) -> None:
        if self.status != OrderStatus.PENDING:
            raise OrderStateConflictError(
                f"Only pending orders can be cancelled "
                f"(order {self.id} is {self.status.value})"
            )

    def mark_counted_for_bestsellers(self) -> bool:
        """Flip the bestseller flag; returns False if it was already set."""
        if self.was_counted_for_bestsellers:
            return False
        self.was_counted_for_bestsellers = True
        return True

    # --- Items ----------------------------------------------------------------

    def replace_items(self, items: list[OrderItem]) -> None:
        if not items:
            raise ValidationError("Order must contain at least one item")
        self.items = list(items)
        self.recompute_total()

    def recompute_total(self) -> None:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        self.total = result.rounded()

    # --- Internal helpers -----------------------------------------------------

    def _record_transition(
        self,
        previous: OrderStatus | None,
        status: OrderStatus,
        by: str | None,
        now: datetime,
    ) -> None:
        self.status = status
        self.status_history.append(StatusChange(previous, status, now, by))
        self.status_timestamps[status] = now
        self.current_status_at = now
        self.updated_at = now
