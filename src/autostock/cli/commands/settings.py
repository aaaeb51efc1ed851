"""Account settings commands."""

from dataclasses import asdict

import click

from autostock.cli.error_handling import handle_domain_error, report_mutation
from autostock.domain.entities import PlanLevel, get_plan_limit, get_plan_name
from autostock.domain.errors import DomainError
from autostock.utils.amount_parser import parse_amount


@click.group()
def settings_group():
    """View and change account settings."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show current settings."""
    settings = ctx.obj["store"].settings
    for key, value in asdict(settings).items():
        if isinstance(value, PlanLevel):
            value = f"{get_plan_name(value)} (up to {get_plan_limit(value)} products)"
        click.echo(f"{key:<24} {'' if value is None else value}")


@settings_group.command("set")
@click.option("--company-name", help="Company name")
@click.option("--currency", help="Currency code")
@click.option("--tax-rate", help="Tax rate, e.g. 0.18")
@click.option("--stagnant-days", type=click.IntRange(min=1), help="Stagnant stock threshold")
@click.option("--whatsapp/--no-whatsapp", "whatsapp_enabled", default=None, help="WhatsApp orders")
@click.option("--whatsapp-number", help="Number receiving storefront orders")
@click.option("--store-slug", help="Public storefront slug")
@click.option("--whatsapp-template", help="Order message template")
@click.pass_context
def set_settings(
    ctx,
    company_name: str | None,
    currency: str | None,
    tax_rate: str | None,
    stagnant_days: int | None,
    whatsapp_enabled: bool | None,
    whatsapp_number: str | None,
    store_slug: str | None,
    whatsapp_template: str | None,
):
    """Change settings and save them.

    Only the options given are changed.
    """
    store = ctx.obj["store"]
    try:
        changes = {
            "company_name": company_name,
            "currency": currency.upper() if currency else None,
            "tax_rate": parse_amount(tax_rate) if tax_rate is not None else None,
            "stagnant_days_threshold": stagnant_days,
            "whatsapp_enabled": whatsapp_enabled,
            "whatsapp_number": whatsapp_number,
            "store_slug": store_slug,
            "whatsapp_template": whatsapp_template,
        }
        changes = {key: value for key, value in changes.items() if value is not None}
        if not changes:
            click.echo("Nothing to update.")
            return
        store.update_settings(**changes)
        mutation = store.save_settings()
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    click.echo("Settings saved")


@settings_group.command("claim-offer")
@click.pass_context
def claim_offer(ctx):
    """Claim the promotional offer (Growth plan)."""
    store = ctx.obj["store"]
    if store.settings.has_claimed_offer:
        click.echo("Offer already claimed.")
        return
    mutation = store.claim_offer()
    report_mutation(ctx, mutation)
    for notice in store.notices:
        click.echo(notice)


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
