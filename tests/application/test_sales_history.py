"""Tests for the sales history read over recorded order lines."""

import pytest

from boutique.application.sales_history import MAX_SALES_LIMIT, SalesHistoryHandler
from boutique.domain.exceptions import ValidationError
from boutique.domain.model.order import Order, OrderItem, OrderStatus
from boutique.domain.model.value_objects import Money, Quantity
from tests.fakes import (
    BLUE,
    JEANS,
    OTHER_USER,
    RED,
    SHIRT,
    SIZE_L,
    SIZE_M,
    USER,
    FakeCatalogRepository,
    FakeOrderRepository,
    FakeProductRepository,
    hours_ago,
    make_product,
)


def _line(product_id, size_id, color_id, qty, price, before):
    return OrderItem(
        product_id, size_id, color_id, Quantity(qty), Money.of(price), "SKU", before, before - qty
    )


def _setup():
    older = Order.place(
        USER,
        [_line(SHIRT, SIZE_M, BLUE, 2, "20.00", 10), _line(JEANS, SIZE_L, RED, 1, "45.50", 3)],
        now=hours_ago(10),
    )
    newer = Order.place(OTHER_USER, [_line(SHIRT, SIZE_M, RED, 3, "18.00", 5)], now=hours_ago(2))
    newer.transition_to(OrderStatus.INVOICED, now=hours_ago(1))
    order_repo = FakeOrderRepository([older, newer])
    # Jeans were deleted from the catalog after the sale.
    product_repo = FakeProductRepository([make_product(SHIRT, "Shirt")])
    handler = SalesHistoryHandler(order_repo, product_repo, FakeCatalogRepository())
    return handler, older, newer


class TestSalesHistory:

    def test_one_row_per_line_newest_first(self):
        handler, older, newer = _setup()
        rows = handler.handle()
        assert [(r.order_id, r.product_id) for r in rows] == [
            (newer.id, SHIRT),
            (older.id, SHIRT),
            (older.id, JEANS),
        ]

    def test_row_carries_price_and_snapshots(self):
        handler, _, newer = _setup()
        [row] = handler.handle(user_id=OTHER_USER)
        assert row.product_name == "Shirt"
        assert (row.size_label, row.color_name) == ("M", "Red")
        assert (row.unit_price, row.quantity, row.total) == ("$18.00", 3, "$54.00")
        assert (row.stock_before_purchase, row.stock_at_purchase) == (5, 2)
        assert row.status == "invoiced"
        assert row.date == newer.created_at.isoformat()

    def test_deleted_product_is_named(self):
        handler, _, _ = _setup()
        [row] = handler.handle(product_id=JEANS)
        assert row.product_name == "Deleted product"

    def test_line_filters(self):
        handler, _, _ = _setup()
        assert len(handler.handle(product_id=SHIRT)) == 2
        assert len(handler.handle(product_id=SHIRT, color_id=RED)) == 1
        assert len(handler.handle(size_id=SIZE_L)) == 1

    def test_order_filters(self):
        handler, older, newer = _setup()
        assert {r.order_id for r in handler.handle(status="pending")} == {older.id}
        assert {r.order_id for r in handler.handle(since=hours_ago(5))} == {newer.id}
        assert {r.order_id for r in handler.handle(until=hours_ago(5))} == {older.id}

    def test_limit(self):
        handler, _, _ = _setup()
        assert len(handler.handle(limit=2)) == 2
        assert len(handler.handle(limit=MAX_SALES_LIMIT * 10)) == 3

    def test_invalid_filters(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError):
            handler.handle(status="lost")
        with pytest.raises(ValidationError):
            handler.handle(product_id="shirt")
        with pytest.raises(ValidationError, match="must not be before"):
            handler.handle(since=hours_ago(1), until=hours_ago(2))
