"""Public storefront commands."""

import click

from autostock.cli.error_handling import handle_domain_error
from autostock.domain.errors import DomainError
from autostock.domain.storefront import ALL_CATEGORIES, Cart, StorefrontService


@click.group()
def storefront_group():
    """Browse the public catalog and place WhatsApp orders."""
    pass


@storefront_group.command("catalog")
@click.option("--search", default="", help="Text matched against product names")
@click.option("--category", default=ALL_CATEGORIES, help="Only this category")
@click.pass_context
def catalog(ctx, search: str, category: str):
    """List the products buyers can see."""
    store = ctx.obj["store"]
    service = StorefrontService(store)
    products = service.public_catalog(search=search, category=category)
    if not products:
        click.echo("No products available.")
        return

    click.echo(f"Categories: {', '.join(service.public_categories())}\n")
    for product in products:
        availability = "" if product.stock > 0 else "  (out of stock)"
        click.echo(
            f"{product.name:<40} {product.price:>10.2f} {store.settings.currency}"
            f"{availability}  (ID: {product.id})"
        )


@storefront_group.command("checkout")
@click.option("--item", "items", multiple=True, required=True, help="PRODUCT_ID[:QTY] (repeatable)")
@click.option("--customer", help="Buyer name")
@click.pass_context
def checkout(ctx, items: tuple[str, ...], customer: str | None):
    """Place an order and print the WhatsApp link that sends it."""
    store = ctx.obj["store"]
    service = StorefrontService(store)
    visible = {p.id: p for p in service.public_catalog()}

    cart = Cart()
    try:
        for entry in items:
            product_id, _, quantity = entry.partition(":")
            product = visible.get(product_id)
            if product is None:
                click.echo(f"Error: Product {product_id} is not in the catalog", err=True)
                ctx.exit(1)
            cart.add(product, int(quantity) if quantity else 1)
        result = service.checkout(cart, customer_name=customer)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    click.echo(result.message)
    if result.whatsapp_url is None:
        click.echo("\nSign up to receive real orders from your storefront.", err=True)
        ctx.exit(1)
    click.echo(f"\n{result.whatsapp_url}")


def register_commands(cli):
    """Register storefront commands with main CLI."""
    cli.add_command(storefront_group, name="storefront")
