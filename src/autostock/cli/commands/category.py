"""Category management commands."""

import click

from autostock.cli.error_handling import handle_domain_error, report_mutation
from autostock.domain.csv_import import category_prefix
from autostock.domain.entities import (
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_MARGIN,
    CategoryConfig,
    new_id,
)
from autostock.domain.errors import DomainError
from autostock.utils.amount_parser import parse_amount


def _resolve_category(ctx, store, name_or_id: str) -> CategoryConfig:
    """Find a category by name (case-insensitive) or ID, or exit."""
    category = store.get_category_by_name(name_or_id) or store.get_category(name_or_id)
    if category is None:
        click.echo(f"Error: Category '{name_or_id}' not found", err=True)
        ctx.exit(1)
    return category


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories with their pricing policy."""
    store = ctx.obj["store"]
    if not store.categories:
        click.echo("No categories found.")
        return

    click.echo(f"\n{'Name':<20} {'Prefix':<8} {'Margin':>7}")
    click.echo("-" * 40)
    for cat in store.categories:
        internal = " [internal]" if cat.is_internal else ""
        click.echo(f"{cat.name:<20} {cat.prefix:<8} {cat.margin * 100:>6.0f}%{internal}")


@category_group.command("create")
@click.argument("name")
@click.option("--prefix", help="SKU prefix (default: first three letters of the name)")
@click.option("--margin", help="Markup over cost, e.g. 0.30 for 30%")
@click.option("--color", default=DEFAULT_CATEGORY_COLOR, help="Display color")
@click.option("--internal", is_flag=True, help="Internal category, hidden from the storefront")
@click.pass_context
def create_category(
    ctx, name: str, prefix: str | None, margin: str | None, color: str, internal: bool
):
    """Create a new category."""
    store = ctx.obj["store"]
    if store.get_category_by_name(name) is not None:
        click.echo(f"Error: Category '{name}' already exists", err=True)
        ctx.exit(1)

    try:
        category = CategoryConfig(
            id=new_id(),
            name=name,
            prefix=prefix or category_prefix(name),
            margin=parse_amount(margin) if margin is not None else DEFAULT_CATEGORY_MARGIN,
            color=color,
            is_internal=internal,
        )
        mutation = store.add_category(category)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    created = mutation.applied
    click.echo(f"Created category '{created.name}' prefix {created.prefix} (ID: {created.id})")


@category_group.command("update")
@click.argument("category")
@click.option("--name", help="New name")
@click.option("--prefix", help="SKU prefix")
@click.option("--margin", help="Markup over cost")
@click.option("--color", help="Display color")
@click.option("--internal/--public", default=None, help="Hide from or show on the storefront")
@click.pass_context
def update_category(
    ctx,
    category: str,
    name: str | None,
    prefix: str | None,
    margin: str | None,
    color: str | None,
    internal: bool | None,
):
    """Update a category given its name or ID."""
    store = ctx.obj["store"]
    current = _resolve_category(ctx, store, category)

    try:
        changes = {
            "name": name,
            "prefix": prefix,
            "margin": parse_amount(margin) if margin is not None else None,
            "color": color,
            "is_internal": internal,
        }
        changes = {key: value for key, value in changes.items() if value is not None}
        if not changes:
            click.echo("Nothing to update.")
            return
        mutation = store.update_category(current.id, **changes)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Updated category '{mutation.applied.name}'")


@category_group.command("delete")
@click.argument("category")
@click.pass_context
def delete_category(ctx, category: str):
    """Delete a category given its name or ID. Products keep the name."""
    store = ctx.obj["store"]
    current = _resolve_category(ctx, store, category)
    try:
        mutation = store.delete_category(current.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Deleted category '{current.name}'")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
