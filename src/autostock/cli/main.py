"""Main CLI entry point."""

import logging

import click

from autostock.config import configure_logging, load_config
from autostock.database.factories import create_backend
from autostock.domain.entities import Session
from autostock.domain.store import InventoryStore
from autostock.domain.sync import KeepLocalStrategy, RollbackStrategy

# Import and register all commands at module level
from autostock.cli.commands import (
    analyze,
    category,
    folder,
    import_cmd,
    order,
    product,
    report,
    settings,
    storefront,
    template,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-url",
    help="SQLAlchemy database URL (overrides AUTOSTOCK_DB_URL environment variable)",
    envvar="AUTOSTOCK_DB_URL",
)
@click.option(
    "--user",
    "user_id",
    help="User to sign in as (overrides AUTOSTOCK_USER environment variable)",
    envvar="AUTOSTOCK_USER",
)
@click.option("--demo", is_flag=True, help="Work in memory only, without signing in")
@click.option(
    "--rollback-on-failure",
    is_flag=True,
    help="Undo local changes when the remote write fails",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar="AUTOSTOCK_LOG_LEVEL",
    default="WARNING",
    help="Logging verbosity",
)
@click.pass_context
def cli(
    ctx,
    db_url: str | None,
    user_id: str | None,
    demo: bool,
    rollback_on_failure: bool,
    log_level: str,
):
    """Autostock - Inventory management for small retailers.

    Organize products in folders and categories, import messy spreadsheets,
    take WhatsApp orders and keep an eye on margins, warranties and
    stagnant stock.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Open the store only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is None:
        return

    config = load_config()
    strategy = RollbackStrategy() if rollback_on_failure else KeepLocalStrategy()
    if demo:
        store = InventoryStore(demo_mode=True, sync_strategy=strategy)
    else:
        backend = create_backend(database_url=db_url)
        backend.connect()
        ctx.call_on_close(backend.disconnect)
        store = InventoryStore(backend=backend, sync_strategy=strategy)
        if user_id:
            store.set_session(Session(user_id=user_id))
        store.fetch_initial_data()
        logger.debug("Store opened for user %s", user_id or "<none>")

    ctx.obj["config"] = config
    ctx.obj["store"] = store


# Register all commands
product.register_commands(cli)
folder.register_commands(cli)
category.register_commands(cli)
import_cmd.register_commands(cli)
template.register_commands(cli)
order.register_commands(cli)
report.register_commands(cli)
settings.register_commands(cli)
storefront.register_commands(cli)
analyze.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
