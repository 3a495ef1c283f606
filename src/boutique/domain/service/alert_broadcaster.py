"""Fan-out of freshly created alerts to admin listeners."""

from __future__ import annotations

from typing import Callable

import structlog

from boutique.domain.model.alert import AdminAlert

logger = structlog.get_logger(__name__)

AlertListener = Callable[[AdminAlert], None]


class AlertBroadcaster:
    """Holds listeners for one process; a failing listener never blocks the others."""

    def __init__(self) -> None:
        self._listeners: list[AlertListener] = []

    def subscribe(self, listener: AlertListener) -> None:
        self._listeners.append(listener)

    def publish(self, alert: AdminAlert) -> None:
        for listener in list(self._listeners):
            try:
                listener(alert)
            except Exception:
                logger.exception(
                    "Alert listener failed", alert_id=alert.id, alert_type=alert.type.value
                )
