"""Report commands."""

import click

from autostock.domain.reports import WARRANTY_ALERT_DAYS, ReportService


@click.group()
def report_group():
    """Financial and stock health reports."""
    pass


@report_group.command("summary")
@click.pass_context
def summary(ctx):
    """Show stock value, potential profit and order totals."""
    store = ctx.obj["store"]
    service = ReportService(store)
    currency = store.settings.currency

    inventory = service.inventory_summary()
    orders = service.order_summary()

    click.echo(f"\n{store.settings.company_name}")
    click.echo("=" * 40)
    click.echo(f"Products:          {inventory.total_items}")
    click.echo(f"Units in stock:    {inventory.total_stock}")
    click.echo(f"Retail value:      {inventory.retail_value:.2f} {currency}")
    click.echo(f"Cost value:        {inventory.cost_value:.2f} {currency}")
    click.echo(f"Potential profit:  {inventory.potential_profit:.2f} {currency}")
    click.echo(f"Gross margin:      {inventory.gross_margin}%")
    click.echo("-" * 40)
    click.echo(
        f"Orders: {orders.pending} pending, {orders.completed} completed, "
        f"{orders.cancelled} cancelled"
    )
    click.echo(f"Completed revenue: {orders.completed_revenue:.2f} {currency}")


@report_group.command("warranty")
@click.option("--days", type=int, default=WARRANTY_ALERT_DAYS, help="Alert window in days")
@click.pass_context
def warranty(ctx, days: int):
    """List stocked products whose supplier warranty is about to end."""
    alerts = ReportService(ctx.obj["store"]).warranty_alerts(days=days)
    if not alerts:
        click.echo(f"No warranties ending in the next {days} days.")
        return
    for product in alerts:
        click.echo(f"{product.supplier_warranty:%Y-%m-%d}  {product.sku:<16} {product.name}")


@report_group.command("stagnant")
@click.option("--days", type=int, help="Days without movement (default: settings threshold)")
@click.pass_context
def stagnant(ctx, days: int | None):
    """List stocked products that entered inventory long ago."""
    store = ctx.obj["store"]
    items = ReportService(store).stagnant_items(threshold_days=days)
    threshold = days if days is not None else store.settings.stagnant_days_threshold
    if not items:
        click.echo(f"No stagnant products (older than {threshold} days).")
        return
    for product in items:
        click.echo(
            f"{product.entry_date:%Y-%m-%d}  {product.sku:<16} {product.name} "
            f"({product.stock} units)"
        )


@report_group.command("abc")
@click.pass_context
def abc(ctx):
    """Classify products by their share of total stock value."""
    classified = ReportService(ctx.obj["store"]).abc_classification()
    if not classified:
        click.echo("No products found.")
        return
    for product in classified:
        value = product.price * product.stock
        click.echo(f"{product.abc_class}  {value:>12.2f}  {product.sku:<16} {product.name}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
