"""CLI commands for a customer's cart."""

from __future__ import annotations

import click

from boutique.application.dto import CartDTO
from boutique.application.manage_cart import CartLineSpec
from boutique.domain.exceptions import DomainException
from boutique.infrastructure.bootstrap import Container


def _display_cart(dto: CartDTO) -> None:
    click.echo(f"Cart of {dto.user_id}  (version {dto.version})")
    if not dto.items:
        click.echo("  (empty)")
    for item in dto.items:
        click.echo(f"  {item.product_id}  {item.size_id}/{item.color_id}  x{item.quantity}")


def _variant_options(func):
    func = click.option("--color", "color_id", required=True, help="Color ID.")(func)
    func = click.option("--size", "size_id", required=True, help="Size ID.")(func)
    func = click.option("--product", "product_id", required=True, help="Product ID.")(func)
    func = click.option("--user", "user_id", required=True, help="Customer user ID.")(func)
    return func


@click.command("show")
@click.option("--user", "user_id", required=True, help="Customer user ID.")
@click.pass_obj
def cart_show(container: Container, user_id: str) -> None:
    """Show a cart, creating an empty one on first use."""
    try:
        dto = container.show_cart().handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("add")
@_variant_options
@click.option("--qty", "quantity", default="1", help="Quantity (clamped to 1-99 and to stock).")
@click.pass_obj
def cart_add(
    container: Container,
    user_id: str,
    product_id: str,
    size_id: str,
    color_id: str,
    quantity: str,
) -> None:
    """Add a variant to the cart."""
    line = CartLineSpec(product_id, size_id, color_id, quantity)
    try:
        dto = container.add_cart_item().handle(user_id, line)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("merge")
@click.option("--user", "user_id", required=True, help="Customer user ID.")
@click.option("--items", required=True, help="Guest lines as 'ProductId:SizeId:ColorId:Qty,...'.")
@click.pass_obj
def cart_merge(container: Container, user_id: str, items: str) -> None:
    """Fold guest cart lines into a user's cart."""
    lines: list[CartLineSpec] = []
    for chunk in items.split(","):
        parts = chunk.strip().split(":")
        if len(parts) != 4:
            raise click.BadParameter(
                f"Invalid item format '{chunk}'. Expected 'ProductId:SizeId:ColorId:Quantity'."
            )
        lines.append(CartLineSpec(*parts))

    try:
        dto = container.merge_cart().handle(user_id, lines)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("update")
@_variant_options
@click.option("--qty", "quantity", required=True, help="New quantity.")
@click.option("--if-match", "expected_version", type=int, default=None, help="Expected cart version.")
@click.pass_obj
def cart_update(
    container: Container,
    user_id: str,
    product_id: str,
    size_id: str,
    color_id: str,
    quantity: str,
    expected_version: int | None,
) -> None:
    """Change a line's quantity."""
    line = CartLineSpec(product_id, size_id, color_id, quantity)
    try:
        dto = container.update_cart_item().handle(user_id, line, expected_version)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("remove")
@_variant_options
@click.option("--if-match", "expected_version", type=int, default=None, help="Expected cart version.")
@click.pass_obj
def cart_remove(
    container: Container,
    user_id: str,
    product_id: str,
    size_id: str,
    color_id: str,
    expected_version: int | None,
) -> None:
    """Remove a line from the cart."""
    try:
        dto = container.remove_cart_item().handle(
            user_id, product_id, size_id, color_id, expected_version
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)
