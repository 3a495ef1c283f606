"""Application services: admin alert inbox (read side)."""

from __future__ import annotations

from dataclasses import dataclass

from boutique.domain.exceptions import EntityNotFoundError
from boutique.domain.model.alert import AdminAlert
from boutique.domain.model.value_objects import require_id
from boutique.domain.repository.alert_repository import AlertRepository

DEFAULT_ALERT_LIMIT = 10
MAX_ALERT_LIMIT = 50


@dataclass(frozen=True)
class AlertPage:
    alerts: list[AdminAlert]
    unread: int


class ListAlertsHandler:

    def __init__(self, alert_repo: AlertRepository) -> None:
        self._alert_repo = alert_repo

    def handle(self, limit: int | None = None, seen: bool | None = None) -> AlertPage:
        limit = min(limit or DEFAULT_ALERT_LIMIT, MAX_ALERT_LIMIT)
        return AlertPage(
            alerts=self._alert_repo.list_recent(limit, seen),
            unread=self._alert_repo.count_unseen(),
        )


class MarkAlertSeenHandler:

    def __init__(self, alert_repo: AlertRepository) -> None:
        self._alert_repo = alert_repo

    def handle(self, alert_id: str) -> int:
        """Returns the remaining unread count."""
        alert_id = require_id(alert_id, "alert id")
        if not self._alert_repo.mark_seen(alert_id):
            raise EntityNotFoundError(f"Alert {alert_id} not found")
        return self._alert_repo.count_unseen()


class MarkAllAlertsSeenHandler:

    def __init__(self, alert_repo: AlertRepository) -> None:
        self._alert_repo = alert_repo

    def handle(self) -> int:
        """Returns how many alerts were flipped."""
        return self._alert_repo.mark_all_seen()
