"""Folder management commands."""

import click

from autostock.cli.error_handling import handle_domain_error, report_mutation
from autostock.domain.entities import Folder, new_id, utcnow
from autostock.domain.errors import DomainError
from autostock.utils.amount_parser import parse_amount


def print_folder_tree(folders: list[Folder], parent_id: str | None = None, indent: int = 0) -> None:
    """Recursively print folder tree."""
    for folder in folders:
        if folder.parent_id != parent_id:
            continue
        prefix = "  " * indent
        internal = " [internal]" if folder.is_internal else ""
        click.echo(f"{prefix}{folder.name}{internal} (ID: {folder.id})")
        if indent < len(folders):
            print_folder_tree(folders, folder.id, indent + 1)


@click.group()
def folder_group():
    """Manage folders."""
    pass


@folder_group.command("list")
@click.pass_context
def list_folders(ctx):
    """List all folders in tree format."""
    store = ctx.obj["store"]
    if not store.folders:
        click.echo("No folders found.")
        return

    click.echo("\nFolders:")
    print_folder_tree(store.folders)


@folder_group.command("create")
@click.argument("name")
@click.option("--parent", "parent_id", help="Parent folder ID (default: root)")
@click.option("--prefix", help="SKU prefix for products in this folder")
@click.option("--margin", help="Target margin (e.g. 0.25)")
@click.option("--color", help="Display color")
@click.option("--internal", is_flag=True, help="Hide the folder's products from the storefront")
@click.pass_context
def create_folder(
    ctx,
    name: str,
    parent_id: str | None,
    prefix: str | None,
    margin: str | None,
    color: str | None,
    internal: bool,
):
    """Create a new folder."""
    store = ctx.obj["store"]
    if parent_id is not None and store.get_folder(parent_id) is None:
        click.echo(f"Error: Folder {parent_id} not found", err=True)
        ctx.exit(1)

    try:
        folder = Folder(
            id=new_id(),
            name=name,
            parent_id=parent_id,
            created_at=utcnow(),
            color=color,
            prefix=prefix.upper() if prefix else None,
            margin=parse_amount(margin) if margin is not None else None,
            is_internal=internal,
        )
        mutation = store.add_folder(folder)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Created folder '{name}' (ID: {folder.id})")


@folder_group.command("rename")
@click.argument("folder_id")
@click.argument("name")
@click.pass_context
def rename_folder(ctx, folder_id: str, name: str):
    """Rename a folder."""
    store = ctx.obj["store"]
    try:
        mutation = store.update_folder(folder_id, name=name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Renamed folder {folder_id} to '{name}'")


@folder_group.command("move")
@click.argument("folder_id")
@click.option("--parent", "parent_id", help="New parent folder ID (omit to move to root)")
@click.pass_context
def move_folder(ctx, folder_id: str, parent_id: str | None):
    """Move a folder under another folder."""
    store = ctx.obj["store"]
    try:
        mutation = store.move_folder(folder_id, parent_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Moved folder '{mutation.applied.name}'")


@folder_group.command("delete")
@click.argument("folder_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_folder(ctx, folder_id: str, yes: bool):
    """Delete a folder. Its products move to the root."""
    store = ctx.obj["store"]
    if not yes:
        click.confirm(f"Delete folder {folder_id}?", abort=True)
    try:
        mutation = store.delete_folder(folder_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo(f"Deleted folder '{mutation.applied.name}'")


@folder_group.command("path")
@click.argument("folder_id")
@click.pass_context
def folder_path(ctx, folder_id: str):
    """Show the breadcrumb path of a folder."""
    store = ctx.obj["store"]
    if store.get_folder(folder_id) is None:
        click.echo(f"Error: Folder {folder_id} not found", err=True)
        ctx.exit(1)
    store.set_current_folder(folder_id)
    click.echo(" > ".join(["Root"] + [f.name for f in store.get_breadcrumbs()]))


def register_commands(cli):
    """Register folder commands with main CLI."""
    cli.add_command(folder_group, name="folder")
