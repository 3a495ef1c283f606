"""Integration tests for the UpdateOrder use case (metadata and item edits).

Uses in-memory fake repositories, no file I/O.
"""

import pytest

from boutique.application.dashboard import DashboardCache
from boutique.application.dto import OrderChanges, OrderLineSpec
from boutique.application.update_order import UpdateOrderHandler
from boutique.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    OrderStateConflictError,
    TransactionUnsupportedError,
    ValidationError,
)
from boutique.domain.model.alert import AlertType
from boutique.domain.model.order import Order, OrderItem, OrderStatus, ShippingInfo
from boutique.domain.model.value_objects import Money, Quantity, VariantKey
from boutique.domain.service.alert_broadcaster import AlertBroadcaster
from boutique.domain.service.alert_emitter import AlertEmitter
from tests.fakes import (
    BLUE,
    JEANS,
    RED,
    SHIRT,
    SIZE_L,
    SIZE_M,
    USER,
    FakeAlertRepository,
    FakeCatalogRepository,
    FakeOrderRepository,
    FakeProductRepository,
    FakeTransactionManager,
    fixed_clock,
    hours_ago,
    make_product,
)

SHIRT_M_BLUE = VariantKey(SHIRT, SIZE_M, BLUE)
SHIRT_M_RED = VariantKey(SHIRT, SIZE_M, RED)
JEANS_L_BLUE = VariantKey(JEANS, SIZE_L, BLUE)


def _setup(supported: bool = True):
    product_repo = FakeProductRepository([
        make_product(SHIRT, "Shirt", "20.00", {(SIZE_M, BLUE): 10, (SIZE_M, RED): 5}),
        make_product(JEANS, "Jeans", "45.50", {(SIZE_L, BLUE): 3}),
    ])
    order_repo = FakeOrderRepository()
    alert_repo = FakeAlertRepository()
    transactions = FakeTransactionManager(product_repo, order_repo, supported)
    catalog = FakeCatalogRepository()
    emitter = AlertEmitter(alert_repo, product_repo, catalog, AlertBroadcaster(), 3, fixed_clock())
    handler = UpdateOrderHandler(
        order_repo, product_repo, catalog, transactions, emitter, DashboardCache(), fixed_clock()
    )

    order = Order.place(
        USER,
        [
            OrderItem(SHIRT, SIZE_M, BLUE, Quantity(2), Money.of("20.00"), "SHIR-M-BLU", 12, 10),
            OrderItem(JEANS, SIZE_L, BLUE, Quantity(1), Money.of("45.50"), "JEAN-L-BLU", 4, 3),
        ],
        shipping_info=ShippingInfo(full_name="Ann", city="Lima"),
        now=hours_ago(3),
    )
    order_repo.save(order)
    return handler, order.id, order_repo, product_repo, transactions, alert_repo


def _items(*specs: tuple[str, str, str, int]) -> list[OrderLineSpec]:
    return [OrderLineSpec(*spec) for spec in specs]


class TestMetadataPath:

    def test_updates_fields_without_a_transaction(self):
        handler, order_id, order_repo, _, transactions, _ = _setup()
        dto = handler.handle(
            order_id,
            OrderChanges(tracking_number="TRK-1", shipping_company="DHL", admin_comment="fragile"),
        )
        assert (dto.tracking_number, dto.shipping_company, dto.admin_comment) == (
            "TRK-1",
            "DHL",
            "fragile",
        )
        assert order_repo.get_by_id(order_id).tracking_number == "TRK-1"
        assert transactions.committed == 0

    def test_shipping_info_is_merged(self):
        handler, order_id, _, _, _, _ = _setup()
        dto = handler.handle(order_id, OrderChanges(shipping_info={"city": "Cusco"}))
        assert dto.shipping_info["full_name"] == "Ann"
        assert dto.shipping_info["city"] == "Cusco"

    def test_status_change_counts_sales(self):
        handler, order_id, _, product_repo, _, alert_repo = _setup()
        dto = handler.handle(order_id, OrderChanges(status="invoiced"), by="admin")
        assert dto.status == "invoiced"
        assert dto.was_counted_for_bestsellers
        assert product_repo.get_by_id(SHIRT).sales_count == 2
        assert len(alert_repo.of_type(AlertType.ORDER_STATUS_CHANGED)) == 1

    def test_no_status_alert_without_status_change(self):
        handler, order_id, _, _, _, alert_repo = _setup()
        handler.handle(order_id, OrderChanges(admin_comment="call first"))
        assert alert_repo.of_type(AlertType.ORDER_STATUS_CHANGED) == []

    def test_nothing_to_change(self):
        handler, order_id, _, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="No changes"):
            handler.handle(order_id, OrderChanges())

    def test_invalid_status(self):
        handler, order_id, _, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="Invalid order status"):
            handler.handle(order_id, OrderChanges(status="lost"))

    def test_bad_shipping_field_leaves_status_alone(self):
        handler, order_id, order_repo, product_repo, _, _ = _setup()
        with pytest.raises(ValidationError, match="Unknown shipping field"):
            handler.handle(order_id, OrderChanges(status="invoiced", shipping_info={"zip": "1"}))
        assert order_repo.get_by_id(order_id).status.value == "pending"
        assert product_repo.get_by_id(SHIRT).sales_count == 0

    def test_missing_order(self):
        handler, _, _, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.handle("e" * 24, OrderChanges(admin_comment="x"))


class TestItemsPath:

    def test_stock_follows_the_diff(self):
        handler, order_id, _, product_repo, transactions, _ = _setup()
        dto = handler.handle(
            order_id, OrderChanges(items=_items((SHIRT, SIZE_M, BLUE, 5), (SHIRT, SIZE_M, RED, 1)))
        )

        assert product_repo.stock_of(SHIRT_M_BLUE) == 7  # took 3 more
        assert product_repo.stock_of(SHIRT_M_RED) == 4  # new line
        assert product_repo.stock_of(JEANS_L_BLUE) == 4  # dropped line restocked
        assert dto.total == "$120.00"
        assert transactions.committed == 1

    def test_lowering_a_quantity_returns_stock(self):
        handler, order_id, _, product_repo, _, _ = _setup()
        handler.handle(
            order_id, OrderChanges(items=_items((SHIRT, SIZE_M, BLUE, 1), (JEANS, SIZE_L, BLUE, 1)))
        )
        assert product_repo.stock_of(SHIRT_M_BLUE) == 11
        assert product_repo.stock_of(JEANS_L_BLUE) == 3

    def test_kept_lines_keep_their_price_and_snapshots(self):
        handler, order_id, _, product_repo, _, _ = _setup()
        shirt = product_repo.get_by_id(SHIRT)
        shirt.update_price(Money.of("30.00"))
        product_repo.save(shirt)

        dto = handler.handle(
            order_id, OrderChanges(items=_items((SHIRT, SIZE_M, BLUE, 3), (SHIRT, SIZE_M, RED, 1)))
        )

        kept, added = dto.items
        assert (kept.unit_price, kept.quantity) == ("$20.00", 3)
        assert (kept.stock_before_purchase, kept.stock_at_purchase) == (12, 10)
        assert added.unit_price == "$30.00"
        assert added.sku == "SHIR-M-RED"
        assert (added.stock_before_purchase, added.stock_at_purchase) == (5, 4)
        assert dto.total == "$90.00"

    def test_items_and_metadata_together(self):
        handler, order_id, _, _, _, _ = _setup()
        dto = handler.handle(
            order_id,
            OrderChanges(tracking_number="TRK-2", items=_items((SHIRT, SIZE_M, BLUE, 2))),
        )
        assert dto.tracking_number == "TRK-2"
        assert len(dto.items) == 1

    def test_insufficient_stock_rolls_everything_back(self):
        handler, order_id, order_repo, product_repo, transactions, _ = _setup()
        with pytest.raises(InsufficientStockError):
            handler.handle(
                order_id,
                OrderChanges(items=_items((SHIRT, SIZE_M, RED, 1), (SHIRT, SIZE_M, BLUE, 20))),
            )

        assert transactions.rolled_back == 1
        assert product_repo.stock_of(SHIRT_M_RED) == 5
        assert product_repo.stock_of(SHIRT_M_BLUE) == 10
        assert len(order_repo.get_by_id(order_id).items) == 2

    def test_unknown_new_variant(self):
        handler, order_id, _, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.handle(order_id, OrderChanges(items=_items((SHIRT, SIZE_L, RED, 1))))

    def test_empty_item_list_rejected(self):
        handler, order_id, _, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="at least one item"):
            handler.handle(order_id, OrderChanges(items=[]))

    def test_requires_transactions(self):
        handler, order_id, _, product_repo, _, _ = _setup(supported=False)
        with pytest.raises(TransactionUnsupportedError):
            handler.handle(order_id, OrderChanges(items=_items((SHIRT, SIZE_M, BLUE, 4))))
        assert product_repo.stock_of(SHIRT_M_BLUE) == 10

    def test_metadata_still_works_without_transactions(self):
        handler, order_id, _, _, _, _ = _setup(supported=False)
        dto = handler.handle(order_id, OrderChanges(admin_comment="ok"))
        assert dto.admin_comment == "ok"

    def test_moved_variants_are_checked_for_alerts(self):
        handler, order_id, _, _, _, alert_repo = _setup()
        handler.handle(order_id, OrderChanges(items=_items((SHIRT, SIZE_M, BLUE, 9))))
        [alert] = alert_repo.of_type(AlertType.LOW_STOCK_VARIANT)
        assert alert.product_id == SHIRT

    def test_cancelled_order_items_are_frozen(self):
        handler, order_id, order_repo, product_repo, transactions, _ = _setup()
        order = order_repo.get_by_id(order_id)
        order.transition_to(OrderStatus.CANCELLED, "admin")
        order_repo.save(order)

        with pytest.raises(OrderStateConflictError):
            handler.handle(order_id, OrderChanges(items=_items((SHIRT, SIZE_M, BLUE, 1))))

        assert product_repo.stock_of(SHIRT_M_BLUE) == 10
        assert product_repo.stock_of(JEANS_L_BLUE) == 3
        assert len(order_repo.get_by_id(order_id).items) == 2
        assert transactions.rolled_back == 1
