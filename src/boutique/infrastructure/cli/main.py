from __future__ import annotations

import click
import structlog

from boutique.infrastructure.bootstrap import build_container
from boutique.infrastructure.cli.alert_commands import (
    alert_list,
    alert_seen,
    alert_seen_all,
    alert_sweep_stale,
)
from boutique.infrastructure.cli.cart_commands import (
    cart_add,
    cart_merge,
    cart_remove,
    cart_show,
    cart_update,
)
from boutique.infrastructure.cli.order_commands import (
    order_cancel,
    order_list,
    order_place,
    order_show,
    order_status,
    order_update,
)
from boutique.infrastructure.cli.product_commands import (
    product_add,
    product_bulk,
    product_history,
    product_ledger,
    product_list,
    product_sales,
    product_set_stock,
    product_update,
)
from boutique.infrastructure.logging import configure_logging
from boutique.infrastructure.settings import ConfigurationError, Settings

logger = structlog.get_logger(__name__)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Boutique: orders, stock and admin alerts."""
    configure_logging()
    if ctx.obj is None:
        try:
            settings = Settings.from_env()
        except ConfigurationError as exc:
            raise click.ClickException(str(exc))
        ctx.obj = build_container(settings)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products, stock and their history."""


@cli.group()
def alert() -> None:
    """Admin alerts."""


@cli.group()
def cart() -> None:
    """Manage customer carts."""


@cli.command("dashboard")
@click.pass_obj
def dashboard(container) -> None:
    """Order counts per status and revenue."""
    summary = container.dashboard().handle()
    click.echo(f"Orders:  {summary.order_count}")
    for status, count in summary.orders_by_status.items():
        click.echo(f"  {status:<10} {count:>6}")
    click.echo(f"Revenue: {summary.revenue}")


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_list)
order.add_command(order_place)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_update)
product.add_command(product_add)
product.add_command(product_bulk)
product.add_command(product_history)
product.add_command(product_ledger)
product.add_command(product_list)
product.add_command(product_sales)
product.add_command(product_set_stock)
product.add_command(product_update)
alert.add_command(alert_list)
alert.add_command(alert_seen)
alert.add_command(alert_seen_all)
alert.add_command(alert_sweep_stale)
cart.add_command(cart_add)
cart.add_command(cart_merge)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)


def main() -> None:
    try:
        cli()
    except Exception:
        logger.exception("Unhandled error")
        raise
