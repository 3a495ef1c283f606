"""Abstract repository for AdminAlert."""

from __future__ import annotations

from abc import ABC, abstractmethod

from boutique.domain.model.alert import AdminAlert, AlertType
from boutique.domain.model.value_objects import VariantKey


class AlertRepository(ABC):

    @abstractmethod
    def add(self, alert: AdminAlert) -> None:
        """Persist a new alert, assigning its ID."""

    @abstractmethod
    def latest_for_variant(self, key: VariantKey, alert_type: AlertType) -> AdminAlert | None:
        """Most recent alert of *alert_type* for one variant."""

    @abstractmethod
    def latest_for_order_status(self, order_id: str, order_status: str) -> AdminAlert | None:
        """Most recent stale-order alert for an (order, status) pair."""

    @abstractmethod
    def list_recent(self, limit: int, seen: bool | None = None) -> list[AdminAlert]:
        """Newest first, optionally filtered on the seen flag."""

    @abstractmethod
    def count_unseen(self) -> int:
        """Number of alerts not yet seen."""

    @abstractmethod
    def mark_seen(self, alert_id: str) -> bool:
        """Flip one alert to seen; False if it does not exist."""

    @abstractmethod
    def mark_all_seen(self) -> int:
        """Flip every unseen alert; returns how many changed."""
