"""CLI commands for the admin alert inbox and the stale order sweep."""

from __future__ import annotations

import time

import click
import structlog

from boutique.domain.exceptions import DomainException
from boutique.domain.model.alert import AdminAlert
from boutique.infrastructure.bootstrap import Container

logger = structlog.get_logger(__name__)


def _display_alert(alert: AdminAlert) -> None:
    marker = " " if alert.seen else "*"
    click.echo(f"{marker} {alert.created_at:%Y-%m-%d %H:%M} {alert.type.value:<22} {alert.message}")


@click.command("list")
@click.option("--limit", type=int, default=None, help="How many (default 10, max 50).")
@click.option("--seen/--unseen", "seen", default=None, help="Only seen or only unseen alerts.")
@click.pass_obj
def alert_list(container: Container, limit: int | None, seen: bool | None) -> None:
    """Most recent alerts, newest first; unread ones are starred."""
    page = container.list_alerts().handle(limit, seen)

    if not page.alerts:
        click.echo("No alerts.")
    for alert in page.alerts:
        _display_alert(alert)
    click.echo(f"Unread: {page.unread}")


@click.command("seen")
@click.option("--id", "alert_id", required=True, help="Alert ID.")
@click.pass_obj
def alert_seen(container: Container, alert_id: str) -> None:
    """Mark one alert as seen."""
    try:
        unread = container.mark_alert_seen().handle(alert_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Alert {alert_id} marked seen. Unread: {unread}")


@click.command("seen-all")
@click.pass_obj
def alert_seen_all(container: Container) -> None:
    """Mark every alert as seen."""
    changed = container.mark_all_alerts_seen().handle()
    click.echo(f"{changed} alert(s) marked seen.")


@click.command("sweep-stale")
@click.option("--watch", is_flag=True, default=False, help="Keep sweeping on an interval.")
@click.option("--interval", type=int, default=None, help="Seconds between sweeps.")
@click.pass_obj
def alert_sweep_stale(
    container: Container,
    watch: bool,
    interval: int | None,
) -> None:
    """Alert on orders stuck in a status past their SLA."""
    handler = container.sweep_stale_orders()

    if not watch:
        created = handler.handle()
        click.echo(f"{created} stale order alert(s) created.")
        return

    interval = interval or container.settings.sweep_interval_seconds
    container.broadcaster.subscribe(_display_alert)
    logger.info("Stale order sweep scheduled", interval_seconds=interval)
    try:
        while True:
            try:
                handler.handle()
            except Exception:
                logger.exception("Stale order sweep failed")
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Stale order sweep stopped")
