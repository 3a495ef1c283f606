"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import structlog

from boutique.application.add_product import AddProductHandler
from boutique.application.alerts import (
    ListAlertsHandler,
    MarkAlertSeenHandler,
    MarkAllAlertsSeenHandler,
)
from boutique.application.bulk_products import BulkProductSummaryHandler
from boutique.application.cancel_order import CancelOrderHandler
from boutique.application.dashboard import DashboardCache, DashboardSummaryHandler
from boutique.application.manage_cart import (
    AddCartItemHandler,
    MergeCartHandler,
    RemoveCartItemHandler,
    ShowCartHandler,
    UpdateCartItemHandler,
)
from boutique.application.place_order import PlaceOrderHandler
from boutique.application.product_history import (
    ProductAuditQueryHandler,
    VariantLedgerQueryHandler,
)
from boutique.application.sales_history import SalesHistoryHandler
from boutique.application.set_variant_stock import SetVariantStockHandler
from boutique.application.show_order import (
    ListOrdersHandler,
    ShowMyOrderHandler,
    ShowOrderHandler,
)
from boutique.application.sweep_stale_orders import SweepStaleOrdersHandler
from boutique.application.update_order import UpdateOrderHandler
from boutique.application.update_order_status import UpdateOrderStatusHandler
from boutique.application.update_product import UpdateProductHandler
from boutique.domain.model.alert import AdminAlert
from boutique.domain.service.alert_broadcaster import AlertBroadcaster
from boutique.domain.service.alert_emitter import AlertEmitter
from boutique.domain.service.ledger_recorder import LedgerRecorder
from boutique.domain.service.stock_reconciler import StockReconciler
from boutique.infrastructure.persistence.json_alert_repository import JsonAlertRepository
from boutique.infrastructure.persistence.json_cart_repository import JsonCartRepository
from boutique.infrastructure.persistence.json_catalog_repository import (
    JsonCatalogRepository,
)
from boutique.infrastructure.persistence.json_ledger_repository import (
    JsonProductAuditRepository,
    JsonVariantLedgerRepository,
)
from boutique.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from boutique.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from boutique.infrastructure.persistence.json_store import JsonFile
from boutique.infrastructure.persistence.json_transaction import JsonTransactionManager
from boutique.infrastructure.settings import Settings

logger = structlog.get_logger(__name__)


def log_admin_alert(alert: AdminAlert) -> None:
    """Default listener: every new admin alert becomes a log event."""
    logger.info(
        "Admin alert",
        alert_id=alert.id,
        alert_type=alert.type.value,
        alert_message=alert.message,
        order_id=alert.order_id,
        product_id=alert.product_id,
    )


class Container:
    """Repositories and services for one process, built from settings."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        data_dir = settings.data_dir

        products_file = JsonFile(data_dir / "products.json")
        orders_file = JsonFile(data_dir / "orders.json")

        self.products = JsonProductRepository(products_file)
        self.orders = JsonOrderRepository(orders_file)
        self.alerts = JsonAlertRepository(JsonFile(data_dir / "alerts.json"))
        self.ledger = JsonVariantLedgerRepository(JsonFile(data_dir / "variant_ledger.json"))
        self.audit = JsonProductAuditRepository(JsonFile(data_dir / "product_audit.json"))
        self.carts = JsonCartRepository(JsonFile(data_dir / "carts.json"))
        self.catalog = JsonCatalogRepository(
            JsonFile(data_dir / "sizes.json"), JsonFile(data_dir / "colors.json")
        )
        self.transactions = JsonTransactionManager([products_file, orders_file])

        self.broadcaster = AlertBroadcaster()
        self.broadcaster.subscribe(log_admin_alert)
        self.dashboard_cache = DashboardCache()
        self.alert_emitter = AlertEmitter(
            self.alerts,
            self.products,
            self.catalog,
            self.broadcaster,
            low_stock_threshold=settings.low_stock_threshold,
        )
        self.reconciler = StockReconciler(self.products)
        self.recorder = LedgerRecorder(self.ledger, self.audit, self.catalog)

    # --- Orders ---------------------------------------------------------------

    def place_order(self) -> PlaceOrderHandler:
        return PlaceOrderHandler(
            self.orders, self.catalog, self.reconciler, self.alert_emitter, self.dashboard_cache
        )

    def update_order_status(self) -> UpdateOrderStatusHandler:
        return UpdateOrderStatusHandler(
            self.orders, self.products, self.alert_emitter, self.dashboard_cache
        )

    def update_order(self) -> UpdateOrderHandler:
        return UpdateOrderHandler(
            self.orders,
            self.products,
            self.catalog,
            self.transactions,
            self.alert_emitter,
            self.dashboard_cache,
        )

    def cancel_order(self) -> CancelOrderHandler:
        return CancelOrderHandler(
            self.orders, self.products, self.transactions, self.alert_emitter, self.dashboard_cache
        )

    def show_order(self) -> ShowOrderHandler:
        return ShowOrderHandler(self.orders)

    def show_my_order(self) -> ShowMyOrderHandler:
        return ShowMyOrderHandler(self.orders)

    def list_orders(self) -> ListOrdersHandler:
        return ListOrdersHandler(self.orders)

    def dashboard(self) -> DashboardSummaryHandler:
        return DashboardSummaryHandler(self.orders, self.dashboard_cache)

    # --- Catalog --------------------------------------------------------------

    def add_product(self) -> AddProductHandler:
        return AddProductHandler(self.products, self.recorder)

    def update_product(self) -> UpdateProductHandler:
        return UpdateProductHandler(self.products, self.recorder, self.alert_emitter)

    def set_variant_stock(self) -> SetVariantStockHandler:
        return SetVariantStockHandler(self.products, self.recorder, self.alert_emitter)

    def bulk_products(self) -> BulkProductSummaryHandler:
        return BulkProductSummaryHandler(self.products, self.catalog)

    def variant_ledger(self) -> VariantLedgerQueryHandler:
        return VariantLedgerQueryHandler(self.ledger)

    def product_audit(self) -> ProductAuditQueryHandler:
        return ProductAuditQueryHandler(self.audit)

    def sales_history(self) -> SalesHistoryHandler:
        return SalesHistoryHandler(self.orders, self.products, self.catalog)

    # --- Alerts ---------------------------------------------------------------

    def list_alerts(self) -> ListAlertsHandler:
        return ListAlertsHandler(self.alerts)

    def mark_alert_seen(self) -> MarkAlertSeenHandler:
        return MarkAlertSeenHandler(self.alerts)

    def mark_all_alerts_seen(self) -> MarkAllAlertsSeenHandler:
        return MarkAllAlertsSeenHandler(self.alerts)

    def sweep_stale_orders(self) -> SweepStaleOrdersHandler:
        return SweepStaleOrdersHandler(
            self.orders,
            self.alerts,
            self.alert_emitter,
            sla_hours=self.settings.sla_hours,
            renotify_hours=self.settings.renotify_hours,
        )

    # --- Cart -----------------------------------------------------------------

    def show_cart(self) -> ShowCartHandler:
        return ShowCartHandler(self.carts, self.products)

    def add_cart_item(self) -> AddCartItemHandler:
        return AddCartItemHandler(self.carts, self.products)

    def merge_cart(self) -> MergeCartHandler:
        return MergeCartHandler(self.carts, self.products)

    def update_cart_item(self) -> UpdateCartItemHandler:
        return UpdateCartItemHandler(self.carts, self.products)

    def remove_cart_item(self) -> RemoveCartItemHandler:
        return RemoveCartItemHandler(self.carts, self.products)


def build_container(settings: Settings | None = None) -> Container:
    return Container(settings or Settings.from_env())
