"""CSV import command."""

import click

from autostock.cli.error_handling import report_mutation
from autostock.domain.csv_import import CSVImportService
from autostock.domain.errors import DomainError
from autostock.domain.sync import Mutation, SyncStatus


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option("--folder", "folder_id", help="Folder ID receiving the products (default: root)")
@click.option("--no-header", is_flag=True, help="The first line is data, not a header")
@click.pass_context
def import_csv(ctx, csv_file: str, folder_id: str | None, no_header: bool):
    """Import products from a CSV file.

    Columns: Name, Brand, Category, Stock, Price, SKU, Status, Entry date,
    Warranty expiry, Image URL. Run 'autostock template' for an example.
    """
    store = ctx.obj["store"]
    service = CSVImportService(store)

    if folder_id is not None and store.get_folder(folder_id) is None:
        click.echo(f"Error: Folder {folder_id} not found", err=True)
        ctx.exit(1)

    try:
        result = service.import_file(
            csv_file_path=csv_file, has_header=not no_header, folder_id=folder_id
        )
    except (DomainError, ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    sync = result["sync"]
    if sync is not None:
        report_mutation(ctx, Mutation(applied=None, sync=sync))

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['imported']} products")
    click.echo(f"  Categories created: {result['categories_created']}")
    click.echo(f"  Skipped: {result['skipped']} lines")
    for row in result["skipped_details"]:
        click.echo(f"    line {row['line_number']}: {row['reason']}", err=True)
    if sync is not None and sync.status == SyncStatus.SKIPPED and not store.demo_mode:
        click.echo("  Not saved remotely (no backend session)")


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
