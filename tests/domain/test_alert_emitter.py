"""Tests for the AlertEmitter domain service and the broadcaster."""

from datetime import timedelta

from boutique.domain.model.alert import AlertType
from boutique.domain.model.order import Order, OrderItem, OrderStatus
from boutique.domain.model.value_objects import Money, Quantity, VariantKey
from boutique.domain.service.alert_broadcaster import AlertBroadcaster
from boutique.domain.service.alert_emitter import AlertEmitter, short_ref
from tests.fakes import (
    BLUE,
    NOW,
    RED,
    SHIRT,
    SIZE_M,
    USER,
    FakeAlertRepository,
    FakeCatalogRepository,
    FakeProductRepository,
    make_product,
)

BLUE_KEY = VariantKey(SHIRT, SIZE_M, BLUE)
RED_KEY = VariantKey(SHIRT, SIZE_M, RED)


class Clock:

    def __init__(self) -> None:
        self.now = NOW

    def __call__(self):
        return self.now


def _setup(blue: int = 10, red: int = 0):
    products = FakeProductRepository([make_product(stock={(SIZE_M, BLUE): blue, (SIZE_M, RED): red})])
    alerts = FakeAlertRepository()
    broadcaster = AlertBroadcaster()
    clock = Clock()
    emitter = AlertEmitter(alerts, products, FakeCatalogRepository(), broadcaster, 3, clock)
    return emitter, alerts, products, broadcaster, clock


def _order() -> Order:
    item = OrderItem(SHIRT, SIZE_M, BLUE, Quantity(2), Money.of("20.00"))
    order = Order.place(USER, [item], now=NOW)
    order.id = "0123456789abcdef01234567"
    return order


class TestOutOfStock:

    def test_emits_for_empty_variant(self):
        emitter, alerts, _, _, _ = _setup(red=0)
        created = emitter.check_variant(RED_KEY)

        assert [a.type for a in created] == [AlertType.OUT_OF_STOCK_VARIANT]
        assert created[0].message == 'Variant M/Red of "Shirt" is out of stock.'
        assert created[0].id is not None
        assert len(alerts.of_type(AlertType.LOW_STOCK_VARIANT)) == 0

    def test_once_per_calendar_day(self):
        emitter, alerts, _, _, clock = _setup(red=0)
        emitter.check_variant(RED_KEY)
        clock.now = NOW + timedelta(hours=11)
        assert emitter.check_variant(RED_KEY) == []
        clock.now = NOW + timedelta(hours=12)  # midnight
        assert len(emitter.check_variant(RED_KEY)) == 1
        assert len(alerts.of_type(AlertType.OUT_OF_STOCK_VARIANT)) == 2

    def test_negative_stock_counts_as_out(self):
        emitter, _, _, _, _ = _setup(red=-1)
        assert emitter.emit_out_of_stock_if_needed(RED_KEY) is not None

    def test_missing_variant_is_ignored(self):
        emitter, _, _, _, _ = _setup()
        assert emitter.check_variant(VariantKey("f" * 24, SIZE_M, BLUE)) == []


class TestLowStock:

    def test_emits_at_threshold(self):
        emitter, _, _, _, _ = _setup(blue=3)
        created = emitter.check_variant(BLUE_KEY)
        assert [a.type for a in created] == [AlertType.LOW_STOCK_VARIANT]
        assert "(stock: 3)" in created[0].message

    def test_not_above_threshold(self):
        emitter, _, _, _, _ = _setup(blue=4)
        assert emitter.check_variant(BLUE_KEY) == []

    def test_at_most_once_per_24_hours(self):
        emitter, _, _, _, clock = _setup(blue=2)
        emitter.check_variant(BLUE_KEY)
        clock.now = NOW + timedelta(hours=23)
        assert emitter.emit_low_stock_if_needed(BLUE_KEY) is None
        clock.now = NOW + timedelta(hours=25)
        assert emitter.emit_low_stock_if_needed(BLUE_KEY) is not None

    def test_unknown_labels(self):
        products = FakeProductRepository([make_product(stock={(SIZE_M, BLUE): 1})])
        emitter = AlertEmitter(
            FakeAlertRepository(), products, FakeCatalogRepository([], []), AlertBroadcaster(), 3
        )
        alert = emitter.emit_low_stock_if_needed(BLUE_KEY)
        assert "Unknown/Unknown" in alert.message


class TestOrderAlerts:

    def test_order_created(self):
        emitter, _, _, _, _ = _setup()
        alert = emitter.emit_order_created(_order())
        assert alert.type == AlertType.ORDER_CREATED
        assert alert.message == "New order #01234567 for $40.00."
        assert alert.order_status == "pending"

    def test_status_changed(self):
        emitter, _, _, _, _ = _setup()
        order = _order()
        order.transition_to(OrderStatus.SHIPPED)
        alert = emitter.emit_order_status_changed(order, OrderStatus.PENDING)
        assert alert.message == 'Order #01234567 moved from "pending" to "shipped".'

    def test_stale(self):
        emitter, _, _, _, _ = _setup()
        alert = emitter.emit_order_stale(_order(), NOW + timedelta(days=4))
        assert alert.type == AlertType.ORDER_STALE_STATUS
        assert alert.created_at == NOW + timedelta(days=4)
        assert "stuck in status \"pending\"" in alert.message

    def test_short_ref(self):
        assert short_ref("0123456789abcdef0123abcd") == "0123ABCD"
        assert short_ref(None) == ""


class TestBroadcaster:

    def test_listeners_receive_new_alerts(self):
        emitter, _, _, broadcaster, _ = _setup(red=0)
        received = []
        broadcaster.subscribe(received.append)
        emitter.check_variant(RED_KEY)
        assert [a.type for a in received] == [AlertType.OUT_OF_STOCK_VARIANT]

    def test_failing_listener_does_not_block_others(self):
        broadcaster = AlertBroadcaster()
        received = []

        def broken(alert):
            raise RuntimeError("socket closed")

        broadcaster.subscribe(broken)
        broadcaster.subscribe(received.append)
        emitter, _, _, _, _ = _setup()
        alert = emitter.emit_order_created(_order())
        broadcaster.publish(alert)
        assert received == [alert]
