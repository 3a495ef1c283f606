"""Order -> DTO mapping for the two audiences.

Customers never see the stock snapshots recorded on each line.
"""

from __future__ import annotations

from dataclasses import asdict

from boutique.application.dto import (
    AdminOrderDTO,
    AdminOrderItemDTO,
    CartDTO,
    CartItemDTO,
    OrderItemDTO,
    UserOrderDTO,
)
from boutique.domain.model.cart import Cart
from boutique.domain.model.order import Order


def to_user_dto(order: Order) -> UserOrderDTO:
    status_date = order.current_status_at or order.updated_at or order.created_at
    return UserOrderDTO(
        id=order.id,  # type: ignore[arg-type]
        status=order.status.value,
        status_date=status_date.isoformat(),
        items=[
            OrderItemDTO(
                product_id=item.product_id,
                sku=item.sku,
                size_id=item.size_id,
                color_id=item.color_id,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        total=str(order.total),
        tracking_number=order.tracking_number,
        shipping_company=order.shipping_company,
        admin_comment=order.admin_comment,
        shipping_info=asdict(order.shipping_info) if order.shipping_info else None,
        created_at=order.created_at.isoformat(),
        updated_at=order.updated_at.isoformat(),
    )


def to_admin_dto(order: Order) -> AdminOrderDTO:
    return AdminOrderDTO(
        id=order.id,  # type: ignore[arg-type]
        user_id=order.user_id,
        status=order.status.value,
        items=[
            AdminOrderItemDTO(
                product_id=item.product_id,
                sku=item.sku,
                size_id=item.size_id,
                color_id=item.color_id,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
                stock_before_purchase=item.stock_before_purchase,
                stock_at_purchase=item.stock_at_purchase,
            )
            for item in order.items
        ],
        total=str(order.total),
        idempotency_key=order.idempotency_key,
        was_counted_for_bestsellers=order.was_counted_for_bestsellers,
        current_status_at=order.current_status_at.isoformat() if order.current_status_at else None,
        status_history=[
            {
                "from": change.from_status.value if change.from_status else None,
                "to": change.to_status.value,
                "at": change.at.isoformat(),
                "by": change.by,
            }
            for change in order.status_history
        ],
        tracking_number=order.tracking_number,
        shipping_company=order.shipping_company,
        admin_comment=order.admin_comment,
        shipping_info=asdict(order.shipping_info) if order.shipping_info else None,
        created_at=order.created_at.isoformat(),
        updated_at=order.updated_at.isoformat(),
    )


def to_cart_dto(cart: Cart) -> CartDTO:
    return CartDTO(
        user_id=cart.user_id,
        items=[
            CartItemDTO(item.product_id, item.size_id, item.color_id, item.quantity)
            for item in cart.items
        ],
        version=cart.version,
        updated_at=cart.updated_at.isoformat(),
    )
