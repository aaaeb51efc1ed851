"""CLI error handling helpers."""

import click

from autostock.domain.errors import DomainError
from autostock.domain.sync import Mutation, SyncStatus


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def report_mutation(ctx: click.Context, mutation: Mutation) -> None:
    """Explain a denied or unsynced mutation.

    A denial exits with failure. A failed remote write is only a warning: the
    change was applied locally.
    """
    if mutation.denied:
        click.echo("Error: Sign in required. Pass --user or use --demo.", err=True)
        ctx.exit(1)
    if mutation.sync.status == SyncStatus.FAILED:
        click.echo(f"Warning: change not saved remotely: {mutation.sync.error}", err=True)
