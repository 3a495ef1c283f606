"""CLI commands for the Product aggregate, its ledger and audit."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

import click

from boutique.application.add_product import VariantSpec
from boutique.domain.exceptions import DomainException
from boutique.domain.model.product import Discount, DiscountType
from boutique.infrastructure.bootstrap import Container

_DATETIME = click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"])


def _parse_variants(raw: tuple[str, ...]) -> list[VariantSpec]:
    """Parse repeated 'SIZE:COLOR:STOCK' options."""
    specs: list[VariantSpec] = []
    for chunk in raw:
        parts = chunk.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid variant '{chunk}'. Expected 'SizeId:ColorId:Stock'."
            )
        size_id, color_id, stock = parts
        try:
            specs.append(VariantSpec(size_id, color_id, int(stock)))
        except ValueError:
            raise click.BadParameter(f"Invalid stock '{stock}' for variant '{chunk}'.")
    return specs


def _utc(value: datetime | None) -> datetime | None:
    return value.replace(tzinfo=timezone.utc) if value is not None else None


def _discount(
    kind: str | None,
    value: str | None,
    start: datetime | None,
    end: datetime | None,
    disable: bool = False,
) -> Discount | None:
    if disable:
        return Discount(enabled=False)
    if kind is None:
        return None
    try:
        amount = Decimal(value or "0")
    except InvalidOperation:
        raise click.BadParameter(f"Invalid discount value '{value}'.")
    return Discount(
        enabled=True,
        type=DiscountType(kind.upper()),
        value=amount,
        start_at=_utc(start),
        end_at=_utc(end),
    )


def _discount_options(func):
    func = click.option("--discount-end", type=_DATETIME, default=None, help="Discount end (UTC).")(func)
    func = click.option("--discount-start", type=_DATETIME, default=None, help="Discount start (UTC).")(func)
    func = click.option("--discount-value", default=None, help="Percent (1-90) or fixed amount.")(func)
    func = click.option(
        "--discount-type",
        type=click.Choice(["PERCENT", "FIXED"], case_sensitive=False),
        default=None,
        help="Enables a discount of this kind.",
    )(func)
    return func


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--variant", "variants", multiple=True, required=True, help="'SizeId:ColorId:Stock' (repeatable).")
@click.option("--sku", default=None, help="SKU; generated from the name when omitted.")
@click.option("--actor", default=None, help="Acting admin.")
@_discount_options
@click.pass_obj
def product_add(
    container: Container,
    name: str,
    price: str,
    variants: tuple[str, ...],
    sku: str | None,
    actor: str | None,
    discount_type: str | None,
    discount_value: str | None,
    discount_start: datetime | None,
    discount_end: datetime | None,
) -> None:
    """Add a new product with its initial variants."""
    specs = _parse_variants(variants)
    discount = _discount(discount_type, discount_value, discount_start, discount_end)

    try:
        product = container.add_product().handle(
            name=name, price=price, variants=specs, sku=sku, discount=discount, actor=actor
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' ({product.sku}) added at {product.price}")


@click.command("list")
@click.pass_obj
def product_list(container: Container) -> None:
    """List all products in the catalog."""
    products = container.products.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<26} {'SKU':<26} {'Name':<20} {'Price':>10} {'Stock':>6}")
    click.echo("-" * 92)
    for p in products:
        stock = sum(v.stock for v in p.variants)
        click.echo(f"{p.id:<26} {p.sku:<26} {p.name:<20} {str(p.effective_price()):>10} {stock:>6}")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", default=None, help="New name.")
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--sku", default=None, help="New SKU.")
@click.option("--variant", "variants", multiple=True, help="Full variant list 'SizeId:ColorId:Stock' (repeatable).")
@click.option("--no-discount", is_flag=True, default=False, help="Disable the discount.")
@click.option("--actor", default=None, help="Acting admin.")
@_discount_options
@click.pass_obj
def product_update(
    container: Container,
    product_id: str,
    name: str | None,
    price: str | None,
    sku: str | None,
    variants: tuple[str, ...],
    no_discount: bool,
    actor: str | None,
    discount_type: str | None,
    discount_value: str | None,
    discount_start: datetime | None,
    discount_end: datetime | None,
) -> None:
    """Update product fields, discount or variants."""
    discount = _discount(discount_type, discount_value, discount_start, discount_end, no_discount)

    try:
        product = container.update_product().handle(
            product_id=product_id,
            name=name,
            price=price,
            sku=sku,
            discount=discount,
            variants=_parse_variants(variants) if variants else None,
            actor=actor,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} updated (price {product.price}, effective {product.effective_price()})")


@click.command("set-stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--size", "size_id", required=True, help="Size ID.")
@click.option("--color", "color_id", required=True, help="Color ID.")
@click.option("--stock", required=True, type=int, help="New stock (>= 0).")
@click.option("--actor", default=None, help="Acting admin.")
@click.pass_obj
def product_set_stock(
    container: Container,
    product_id: str,
    size_id: str,
    color_id: str,
    stock: int,
    actor: str | None,
) -> None:
    """Overwrite one variant's stock."""
    try:
        result = container.set_variant_stock().handle(product_id, size_id, color_id, stock, actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock {result.prev_stock} -> {result.new_stock}")


@click.command("bulk")
@click.argument("ids", nargs=-1, required=True)
@click.pass_obj
def product_bulk(container: Container, ids: tuple[str, ...]) -> None:
    """Summaries for several products (ids may also be comma-separated)."""
    raw = [part for chunk in ids for part in chunk.split(",")]

    try:
        summaries = container.bulk_products().handle(raw)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for s in summaries:
        click.echo(f"{s.id}  {s.name}  {s.price} (now {s.effective_price})")
        for v in s.variants:
            click.echo(f"    {v.size_label or v.size_id:<8} {v.color_name or v.color_id:<12} stock={v.stock}")


@click.command("ledger")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--variant-key", default=None, help="'SizeId::ColorId'.")
@click.option("--status", type=click.Choice(["ACTIVE", "DELETED"]), default=None)
@click.option("--since", type=_DATETIME, default=None, help="From (UTC, inclusive).")
@click.option("--until", type=_DATETIME, default=None, help="To (UTC, inclusive).")
@click.option("--limit", type=int, default=None, help="Max entries (default 200, max 1000).")
@click.pass_obj
def product_ledger(
    container: Container,
    product_id: str,
    variant_key: str | None,
    status: str | None,
    since: datetime | None,
    until: datetime | None,
    limit: int | None,
) -> None:
    """Variant ledger for a product, newest first."""
    try:
        entries = container.variant_ledger().handle(
            product_id, variant_key, status, _utc(since), _utc(until), limit
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not entries:
        click.echo("No ledger entries.")
        return

    for e in entries:
        click.echo(
            f"{e.created_at:%Y-%m-%d %H:%M} {e.event_type.value:<22} "
            f"{e.size_label_snapshot}/{e.color_name_snapshot} "
            f"{e.prev_stock} -> {e.new_stock}  {e.note}"
        )


@click.command("history")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.pass_obj
def product_history(container: Container, product_id: str) -> None:
    """Audited field changes for a product, newest first."""
    try:
        entries = container.product_audit().handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not entries:
        click.echo("No audit entries.")
        return

    for e in entries:
        fields = ", ".join(f"{name}: {c['old']} -> {c['new']}" for name, c in e.changes.items())
        click.echo(f"{e.created_at:%Y-%m-%d %H:%M} {e.action.value:<8} {fields}")


@click.command("sales")
@click.option("--id", "product_id", default=None, help="Only lines of this product.")
@click.option("--size", "size_id", default=None, help="Only this size.")
@click.option("--color", "color_id", default=None, help="Only this color.")
@click.option("--user", "user_id", default=None, help="Only orders of this customer.")
@click.option("--status", default=None, help="Only orders in this status.")
@click.option("--since", type=_DATETIME, default=None, help="Placed from (UTC, inclusive).")
@click.option("--until", type=_DATETIME, default=None, help="Placed until (UTC, inclusive).")
@click.option("--limit", type=int, default=None, help="Max rows (default 1000, max 5000).")
@click.pass_obj
def product_sales(
    container: Container,
    product_id: str | None,
    size_id: str | None,
    color_id: str | None,
    user_id: str | None,
    status: str | None,
    since: datetime | None,
    until: datetime | None,
    limit: int | None,
) -> None:
    """Sold order lines, newest first."""
    try:
        rows = container.sales_history().handle(
            since=_utc(since),
            until=_utc(until),
            status=status,
            product_id=product_id,
            size_id=size_id,
            color_id=color_id,
            user_id=user_id,
            limit=limit,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not rows:
        click.echo("No sales found.")
        return

    for r in rows:
        click.echo(
            f"{r.date[:16]} {r.order_id} {r.status:<10} {r.product_name} "
            f"{r.size_label}/{r.color_name} x{r.quantity} @ {r.unit_price} = {r.total} "
            f"(stock {r.stock_before_purchase} -> {r.stock_at_purchase})"
        )
