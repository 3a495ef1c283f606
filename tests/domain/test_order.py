"""Unit tests for the Order aggregate and its business rules."""

from datetime import timedelta

import pytest

from boutique.domain.exceptions import OrderStateConflictError, ValidationError
from boutique.domain.model.order import Order, OrderItem, OrderStatus, ShippingInfo
from boutique.domain.model.value_objects import Money, Quantity
from tests.fakes import BLUE, NOW, RED, SHIRT, SIZE_M, USER


def _make_item(color: str = BLUE, qty: int = 1, price: str = "15.00") -> OrderItem:
    return OrderItem(
        product_id=SHIRT,
        size_id=SIZE_M,
        color_id=color,
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


class TestOrderPlace:

    def test_happy_path(self):
        order = Order.place(USER, [_make_item(qty=2, price="10.00")], now=NOW)
        assert order.user_id == USER
        assert order.status == OrderStatus.PENDING
        assert order.total == Money.of("20.00")
        assert order.id is None  # assigned by repository

    def test_total_is_sum_of_line_items(self):
        order = Order.place(USER, [_make_item(BLUE, 3, "15.00"), _make_item(RED, 1, "4.99")])
        assert order.total == Money.of("49.99")

    def test_initial_status_recorded(self):
        order = Order.place(USER, [_make_item()], now=NOW)
        assert len(order.status_history) == 1
        change = order.status_history[0]
        assert change.from_status is None
        assert change.to_status == OrderStatus.PENDING
        assert change.by == USER
        assert order.current_status_at == NOW
        assert order.status_timestamps[OrderStatus.PENDING] == NOW

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.place(USER, [])

    def test_user_required(self):
        with pytest.raises(ValidationError, match="User is required"):
            Order.place("", [_make_item()])


class TestOrderStatus:

    def test_parse_known(self):
        assert OrderStatus.parse("shipped") == OrderStatus.SHIPPED

    @pytest.mark.parametrize("raw", ["SHIPPED", "lost", None])
    def test_parse_unknown(self, raw):
        with pytest.raises(ValidationError, match="Invalid order status"):
            OrderStatus.parse(raw)

    def test_any_transition_is_allowed(self):
        order = Order.place(USER, [_make_item()], now=NOW)
        order.transition_to(OrderStatus.DELIVERED, now=NOW)
        previous = order.transition_to(OrderStatus.PENDING, "admin", NOW + timedelta(hours=1))
        assert previous == OrderStatus.DELIVERED
        assert order.status == OrderStatus.PENDING
        assert order.current_status_at == NOW + timedelta(hours=1)
        assert [c.to_status for c in order.status_history] == [
            OrderStatus.PENDING,
            OrderStatus.DELIVERED,
            OrderStatus.PENDING,
        ]

    def test_cancel_pending(self):
        order = Order.place(USER, [_make_item()])
        assert order.cancel("admin") == OrderStatus.PENDING
        assert order.status == OrderStatus.CANCELLED

    @pytest.mark.parametrize("status", [OrderStatus.INVOICED, OrderStatus.CANCELLED])
    def test_cancel_non_pending_rejected(self, status):
        order = Order.place(USER, [_make_item()])
        order.transition_to(status)
        with pytest.raises(OrderStateConflictError, match="Only pending orders"):
            order.cancel()

    def test_bestseller_flag_flips_once(self):
        order = Order.place(USER, [_make_item()])
        assert order.mark_counted_for_bestsellers() is True
        assert order.mark_counted_for_bestsellers() is False
        assert order.was_counted_for_bestsellers


class TestOrderItems:

    def test_replace_items_recomputes_total(self):
        order = Order.place(USER, [_make_item(qty=1, price="10.00")])
        order.replace_items([_make_item(qty=4, price="10.00")])
        assert order.total == Money.of("40.00")

    def test_replace_with_nothing_rejected(self):
        order = Order.place(USER, [_make_item()])
        with pytest.raises(ValidationError):
            order.replace_items([])


class TestShippingInfo:

    def test_merged_replaces_only_given_fields(self):
        info = ShippingInfo(full_name="Ann", city="Lima")
        merged = info.merged({"city": "Cusco", "notes": None})
        assert merged == ShippingInfo(full_name="Ann", city="Cusco", notes="")
        assert info.city == "Lima"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError, match="Unknown shipping field"):
            ShippingInfo().merged({"zip": "1000"})
