"""Admin dashboard summary with a process-scoped cache.

Every order mutation path calls ``DashboardCache.invalidate()``; the
summary is recomputed lazily on the next read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from boutique.domain.model.order import OrderStatus
from boutique.domain.model.value_objects import Money
from boutique.domain.repository.order_repository import OrderRepository


@dataclass(frozen=True)
class DashboardSummary:
    order_count: int
    orders_by_status: dict[str, int]
    revenue: str  # non-cancelled orders only
    computed_at: str


class DashboardCache:

    def __init__(self) -> None:
        self._summary: DashboardSummary | None = None

    def get(self) -> DashboardSummary | None:
        return self._summary

    def store(self, summary: DashboardSummary) -> None:
        self._summary = summary

    def invalidate(self) -> None:
        self._summary = None


class DashboardSummaryHandler:

    def __init__(self, order_repo: OrderRepository, cache: DashboardCache) -> None:
        self._order_repo = order_repo
        self._cache = cache

    def handle(self) -> DashboardSummary:
        cached = self._cache.get()
        if cached is not None:
            return cached

        orders = self._order_repo.list_all()
        by_status = {status.value: 0 for status in OrderStatus}
        revenue = Money.zero()
        for order in orders:
            by_status[order.status.value] += 1
            if order.status != OrderStatus.CANCELLED:
                revenue = revenue + order.total

        summary = DashboardSummary(
            order_count=len(orders),
            orders_by_status=by_status,
            revenue=str(revenue.rounded()),
            computed_at=datetime.now(timezone.utc).isoformat(),
        )
        self._cache.store(summary)
        return summary
