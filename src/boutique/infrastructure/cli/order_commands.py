"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from boutique.application.dto import AdminOrderDTO, OrderChanges, OrderLineSpec, UserOrderDTO
from boutique.domain.exceptions import DomainException
from boutique.infrastructure.bootstrap import Container


def _parse_items(raw: str) -> list[OrderLineSpec]:
    """Parse 'PRODUCT:SIZE:COLOR:QTY,...' into OrderLineSpec list."""
    specs: list[OrderLineSpec] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        parts = chunk.split(":")
        if len(parts) != 4:
            raise click.BadParameter(
                f"Invalid item format '{chunk}'. Expected 'ProductId:SizeId:ColorId:Quantity'."
            )
        product_id, size_id, color_id, qty = parts
        specs.append(OrderLineSpec(product_id, size_id, color_id, qty))
    return specs


def _parse_pairs(pairs: tuple[str, ...]) -> dict[str, str | None] | None:
    """Parse repeated 'field=value' options; ``None`` when none were given."""
    if not pairs:
        return None
    result: dict[str, str | None] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"Invalid shipping field '{pair}'. Expected 'field=value'.")
        name, value = pair.split("=", 1)
        result[name.strip()] = value
    return result


def _display_order(dto: UserOrderDTO | AdminOrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    if isinstance(dto, AdminOrderDTO):
        click.echo(f"User:     {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.tracking_number} {dto.shipping_company}".rstrip())
    click.echo()
    click.echo(f"  {'SKU':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.sku:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("place")
@click.option("--user", "user_id", required=True, help="Customer user ID.")
@click.option("--items", required=True, help="Items as 'ProductId:SizeId:ColorId:Qty,...'.")
@click.option("--idempotency-key", default=None, help="Replays return the first order.")
@click.option("--shipping", multiple=True, help="Shipping field as 'field=value' (repeatable).")
@click.pass_obj
def order_place(
    container: Container,
    user_id: str,
    items: str,
    idempotency_key: str | None,
    shipping: tuple[str, ...],
) -> None:
    """Place a new order, taking stock for every line."""
    specs = _parse_items(items)

    try:
        result = container.place_order().handle(
            user_id=user_id,
            lines=specs,
            shipping_info=_parse_pairs(shipping),
            idempotency_key=idempotency_key,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if result.created:
        click.echo(f"Order #{result.order_id} placed")
    else:
        click.echo(f"Order #{result.order_id} already exists for this idempotency key")
    _display_order(result.order)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@click.option("--user", "user_id", default=None, help="Show as this customer would see it.")
@click.pass_obj
def order_show(container: Container, order_id: str, user_id: str | None) -> None:
    """Show details of an existing order."""
    try:
        if user_id is None:
            dto = container.show_order().handle(order_id)
        else:
            dto = container.show_my_order().handle(user_id, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", default=None, help="Only orders in this status.")
@click.option("--user", "user_id", default=None, help="Only this customer's orders, as they see them.")
@click.pass_obj
def order_list(container: Container, status: str | None, user_id: str | None) -> None:
    """List orders, newest first."""
    try:
        if user_id is None:
            orders = container.list_orders().handle(status)
        else:
            orders = container.list_orders().handle_for_user(user_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<26} {'Status':<10} {'Total':>10}  Created")
    click.echo("-" * 72)
    for o in orders:
        click.echo(f"{o.id:<26} {o.status:<10} {o.total:>10}  {o.created_at}")


@click.command("status")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--status", required=True, help="pending, invoiced, shipped, delivered or cancelled.")
@click.option("--by", default=None, help="Acting admin.")
@click.pass_obj
def order_status(container: Container, order_id: str, status: str, by: str | None) -> None:
    """Set an order's status."""
    try:
        result = container.update_order_status().handle(order_id, status, by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id}: {result.previous_status} -> {result.order.status}")
    if result.incremented_bestsellers:
        click.echo("Sales counters updated.")


@click.command("update")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--status", default=None, help="New status.")
@click.option("--tracking", "tracking_number", default=None, help="Tracking number.")
@click.option("--company", "shipping_company", default=None, help="Shipping company.")
@click.option("--comment", "admin_comment", default=None, help="Admin comment.")
@click.option("--shipping", multiple=True, help="Shipping field as 'field=value' (repeatable).")
@click.option("--items", default=None, help="Replacement items 'ProductId:SizeId:ColorId:Qty,...'.")
@click.option("--by", default=None, help="Acting admin.")
@click.pass_obj
def order_update(
    container: Container,
    order_id: str,
    status: str | None,
    tracking_number: str | None,
    shipping_company: str | None,
    admin_comment: str | None,
    shipping: tuple[str, ...],
    items: str | None,
    by: str | None,
) -> None:
    """Edit order metadata and/or its items (stock follows the item diff)."""
    changes = OrderChanges(
        status=status,
        tracking_number=tracking_number,
        shipping_company=shipping_company,
        admin_comment=admin_comment,
        shipping_info=_parse_pairs(shipping),
        items=_parse_items(items) if items is not None else None,
    )

    try:
        dto = container.update_order().handle(order_id, changes, by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} updated.")
    _display_order(dto)


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.option("--by", default=None, help="Who cancels.")
@click.pass_obj
def order_cancel(container: Container, order_id: str, by: str | None) -> None:
    """Cancel a pending order and put its stock back."""
    try:
        container.cancel_order().handle(order_id, by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled, stock restored.")
