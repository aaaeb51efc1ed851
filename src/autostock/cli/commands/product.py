"""Product management commands."""

from decimal import Decimal

import click

from autostock.cli.error_handling import handle_domain_error, report_mutation
from autostock.domain.entities import DEFAULT_CATEGORY_NAME, Product, new_id, utcnow
from autostock.domain.errors import DomainError
from autostock.domain.product_entry import ProductEntryService
from autostock.utils.amount_parser import parse_amount


def format_product(product: Product) -> str:
    """One-line summary of a product."""
    tags = f" [{', '.join(product.tags)}]" if product.tags else ""
    return (
        f"{product.sku:<16} {product.name[:40]:<40} {product.category[:15]:<15} "
        f"{product.stock:>6} {product.price:>10.2f}{tags}  (ID: {product.id})"
    )


def _parse_money(ctx, value: str | None, label: str) -> Decimal | None:
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


@click.group()
def product_group():
    """Manage products."""
    pass


@product_group.command("list")
@click.option("--search", default="", help="Text matched against name, SKU and brand")
@click.option("--category", "categories", multiple=True, help="Only these categories (repeatable)")
@click.option("--tag", "tags", multiple=True, help="Products with any of these tags (repeatable)")
@click.option("--min-price", default="", help="Minimum price")
@click.option("--max-price", default="", help="Maximum price")
@click.option("--max-stock", type=int, help="Maximum stock (e.g. 5 for low-stock items)")
@click.option("--folder", "folder_id", help="Only products directly in this folder ID")
@click.option("--all-folders", is_flag=True, help="Ignore folders and list every product")
@click.pass_context
def list_products(
    ctx,
    search: str,
    categories: tuple[str, ...],
    tags: tuple[str, ...],
    min_price: str,
    max_price: str,
    max_stock: int | None,
    folder_id: str | None,
    all_folders: bool,
):
    """List products, optionally filtered."""
    store = ctx.obj["store"]
    store.set_search_query(search)
    store.set_filters(
        categories=categories,
        tags=tags,
        min_price=min_price,
        max_price=max_price,
        max_stock=max_stock,
    )

    if all_folders:
        products = store.get_filtered_inventory()
    else:
        store.current_folder_id = folder_id
        products = store.get_current_items()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'SKU':<16} {'Name':<40} {'Category':<15} {'Stock':>6} {'Price':>10}")
    click.echo("-" * 92)
    for item in products:
        click.echo(format_product(item))
    click.echo(f"\n{len(products)} product{'s' if len(products) != 1 else ''}")


@product_group.command("add")
@click.argument("name")
@click.option("--category", default=DEFAULT_CATEGORY_NAME, help="Category name")
@click.option("--cost", default="0", help="Unit cost")
@click.option("--price", help="Unit price (default: cost plus the category margin)")
@click.option("--stock", type=int, default=0, help="Units in stock")
@click.option("--sku", help="SKU (default: next sequential SKU for the category)")
@click.option("--brand", help="Brand")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--folder", "folder_id", help="Folder ID (default: root)")
@click.option("--image-url", help="Image URL")
@click.option("--description", help="Description")
@click.pass_context
def add_product(
    ctx,
    name: str,
    category: str,
    cost: str,
    price: str | None,
    stock: int,
    sku: str | None,
    brand: str | None,
    tags: tuple[str, ...],
    folder_id: str | None,
    image_url: str | None,
    description: str | None,
):
    """Add a product.

    Examples:
        autostock product add "Taladro 500W" --category Ferreteria --cost 40 --stock 3
        autostock product add "Paracetamol" --price 2.50 --tag Oferta
    """
    store = ctx.obj["store"]
    entry = ProductEntryService(store)

    unit_cost = _parse_money(ctx, cost, "cost")
    unit_price = _parse_money(ctx, price, "price")
    if unit_price is None:
        unit_price = entry.suggest_price(unit_cost, category)

    now = utcnow()
    product = Product(
        id=new_id(),
        name=name,
        category=category,
        sku=sku or entry.suggest_sku(category, name),
        cost=unit_cost,
        price=unit_price,
        stock=stock,
        image_url=image_url or "",
        created_at=now,
        folder_id=folder_id,
        tags=tags,
        brand=brand,
        description=description,
        entry_date=now,
    )

    try:
        mutation = store.add_product(product)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    added = mutation.applied
    click.echo(f"Created product '{added.name}' SKU {added.sku} (ID: {added.id})")


@product_group.command("update")
@click.argument("product_id")
@click.option("--name", help="Product name")
@click.option("--category", help="Category name")
@click.option("--cost", help="Unit cost")
@click.option("--price", help="Unit price")
@click.option("--stock", type=int, help="Units in stock")
@click.option("--sku", help="SKU")
@click.option("--brand", help="Brand")
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable)")
@click.option("--image-url", help="Image URL")
@click.option("--description", help="Description")
@click.pass_context
def update_product(
    ctx,
    product_id: str,
    name: str | None,
    category: str | None,
    cost: str | None,
    price: str | None,
    stock: int | None,
    sku: str | None,
    brand: str | None,
    tags: tuple[str, ...],
    image_url: str | None,
    description: str | None,
):
    """Update a product.

    Updates only the fields that are provided.
    """
    store = ctx.obj["store"]
    changes = {
        "name": name,
        "category": category,
        "cost": _parse_money(ctx, cost, "cost"),
        "price": _parse_money(ctx, price, "price"),
        "stock": stock,
        "sku": sku,
        "brand": brand,
        "tags": tags or None,
        "image_url": image_url,
        "description": description,
    }
    changes = {key: value for key, value in changes.items() if value is not None}
    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        mutation = store.update_product(product_id, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Updated product {product_id}")


@product_group.command("stock-in")
@click.argument("product_id")
@click.option("--quantity", "-n", type=click.IntRange(min=1), default=1, help="Units to add")
@click.pass_context
def stock_in(ctx, product_id: str, quantity: int):
    """Add units to a product's stock."""
    store = ctx.obj["store"]
    mutation = None
    try:
        for _ in range(quantity):
            mutation = store.increment_stock(product_id)
            report_mutation(ctx, mutation)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Stock of {mutation.applied.name}: {mutation.applied.stock}")


@product_group.command("stock-out")
@click.argument("product_id")
@click.option("--quantity", "-n", type=click.IntRange(min=1), default=1, help="Units to remove")
@click.pass_context
def stock_out(ctx, product_id: str, quantity: int):
    """Remove units from a product's stock (never below zero)."""
    store = ctx.obj["store"]
    mutation = None
    try:
        for _ in range(quantity):
            mutation = store.decrement_stock(product_id)
            report_mutation(ctx, mutation)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Stock of {mutation.applied.name}: {mutation.applied.stock}")


@product_group.command("move")
@click.argument("product_id")
@click.option("--folder", "folder_id", help="Target folder ID (omit to move to root)")
@click.pass_context
def move_product(ctx, product_id: str, folder_id: str | None):
    """Move a product to a folder."""
    store = ctx.obj["store"]
    try:
        mutation = store.move_product(product_id, folder_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    target = store.get_folder(folder_id).name if folder_id else "root"
    click.echo(f"Moved '{mutation.applied.name}' to {target}")


@product_group.command("delete")
@click.argument("product_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_product(ctx, product_id: str, yes: bool):
    """Delete a product."""
    store = ctx.obj["store"]
    if not yes:
        click.confirm(f"Delete product {product_id}?", abort=True)
    try:
        mutation = store.delete_product(product_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Deleted product '{mutation.applied.name}'")


def register_commands(cli):
    """Register product commands with main CLI."""
    cli.add_command(product_group, name="product")
