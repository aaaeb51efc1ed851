"""Order management commands."""

import click

from autostock.cli.error_handling import handle_domain_error, report_mutation
from autostock.domain.entities import OrderItem, OrderStatus
from autostock.domain.errors import DomainError


def _parse_item(ctx, store, entry: str) -> OrderItem:
    """Turn 'PRODUCT_ID' or 'PRODUCT_ID:QTY' into an order line."""
    product_id, _, quantity = entry.partition(":")
    product = store.get_product(product_id)
    if product is None:
        click.echo(f"Error: Product {product_id} not found", err=True)
        ctx.exit(1)
    try:
        qty = int(quantity) if quantity else 1
    except ValueError:
        click.echo(f"Error: Invalid quantity in '{entry}'", err=True)
        ctx.exit(1)
    return OrderItem(product_id=product.id, name=product.name, quantity=qty, price=product.price)


@click.group()
def order_group():
    """Manage customer orders."""
    pass


@order_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in OrderStatus], case_sensitive=False),
    help="Only orders with this status",
)
@click.pass_context
def list_orders(ctx, status: str | None):
    """List orders, newest first."""
    store = ctx.obj["store"]
    orders = store.orders
    if status is not None:
        orders = [o for o in orders if o.status == OrderStatus(status.lower())]
    if not orders:
        click.echo("No orders found.")
        return

    for order in orders:
        customer = order.customer_name or "-"
        click.echo(
            f"{order.created_at:%Y-%m-%d %H:%M}  {order.status.value:<10} "
            f"{order.total_amount:>10.2f}  {customer}  (ID: {order.id})"
        )
        for item in order.items:
            click.echo(f"    {item.quantity}x {item.name} @ {item.price:.2f}")


@order_group.command("create")
@click.option("--item", "items", multiple=True, required=True, help="PRODUCT_ID[:QTY] (repeatable)")
@click.option("--customer", help="Customer name")
@click.option("--phone", help="Customer phone")
@click.pass_context
def create_order(ctx, items: tuple[str, ...], customer: str | None, phone: str | None):
    """Record a pending order.

    Example:
        autostock order create --item 3f2a...:2 --item 9b1c... --customer "Ana"
    """
    store = ctx.obj["store"]
    lines = [_parse_item(ctx, store, entry) for entry in items]
    try:
        mutation = store.create_order(lines, customer_name=customer, customer_phone=phone)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    order = mutation.applied
    click.echo(f"Created order for {order.total_amount:.2f} (ID: {order.id})")


def _set_status(ctx, order_id: str, status: OrderStatus) -> None:
    store = ctx.obj["store"]
    try:
        mutation = store.update_order_status(order_id, status)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Order {order_id} {status.value}")


@order_group.command("complete")
@click.argument("order_id")
@click.pass_context
def complete_order(ctx, order_id: str):
    """Complete a pending order, removing its items from stock."""
    _set_status(ctx, order_id, OrderStatus.COMPLETED)


@order_group.command("cancel")
@click.argument("order_id")
@click.pass_context
def cancel_order(ctx, order_id: str):
    """Cancel a pending order."""
    _set_status(ctx, order_id, OrderStatus.CANCELLED)


def register_commands(cli):
    """Register order commands with main CLI."""
    cli.add_command(order_group, name="order")
