"""AI-assisted product entry commands."""

import base64
import mimetypes
from decimal import Decimal
from pathlib import Path

import click

from autostock.ai.analysis import ProductAnalyzer
from autostock.cli.error_handling import handle_domain_error, report_mutation
from autostock.domain.entities import AIAnalysisResult
from autostock.domain.errors import DomainError
from autostock.domain.product_entry import ProductEntryService
from autostock.utils.amount_parser import parse_amount


def _entry_service(ctx) -> ProductEntryService:
    config = ctx.obj["config"]
    if not config.openai_api_key:
        click.echo("Warning: no OpenAI API key set (AUTOSTOCK_OPENAI_API_KEY)", err=True)
    analyzer = ProductAnalyzer(api_key=config.openai_api_key, model=config.openai_model)
    return ProductEntryService(ctx.obj["store"], analyzer)


def _show(analysis: AIAnalysisResult) -> None:
    click.echo(f"Name:        {analysis.name or '-'}")
    click.echo(f"Category:    {analysis.category}")
    click.echo(f"Description: {analysis.description}")
    click.echo(f"Confidence:  {analysis.confidence:.0%}")
    if analysis.suggested_tags:
        click.echo(f"Tags:        {', '.join(analysis.suggested_tags)}")
    if analysis.estimated_market_price is not None:
        click.echo(f"Market price: {analysis.estimated_market_price:.2f}")


def _add(ctx, service, analysis, cost, price, stock, folder_id, image_url=None, name=None):
    try:
        mutation = service.add_from_analysis(
            analysis,
            cost=parse_amount(cost) if cost is not None else Decimal("0"),
            price=parse_amount(price) if price is not None else None,
            stock=stock,
            image_url=image_url,
            folder_id=folder_id,
            name=name,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    report_mutation(ctx, mutation)
    added = mutation.applied
    click.echo(f"\nCreated product '{added.name}' SKU {added.sku} (ID: {added.id})")


def _add_options(func):
    func = click.option("--folder", "folder_id", help="Folder ID (default: root)")(func)
    func = click.option("--stock", type=int, default=0, help="Units in stock")(func)
    func = click.option("--price", help="Unit price (default: estimated market price)")(func)
    func = click.option("--cost", help="Unit cost")(func)
    func = click.option("--add", is_flag=True, help="Add the analyzed product to the inventory")(func)
    return func


@click.group()
def analyze_group():
    """Identify products with AI."""
    pass


@analyze_group.command("name")
@click.argument("name")
@_add_options
@click.pass_context
def analyze_name(ctx, name: str, add: bool, cost, price, stock: int, folder_id):
    """Categorize, describe and price a product from its name."""
    service = _entry_service(ctx)
    analysis = service.analyze(name=name)
    _show(analysis)
    if add:
        _add(ctx, service, analysis, cost, price, stock, folder_id)


@analyze_group.command("image")
@click.argument("image_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", help="Product name to use if the photo is not recognized")
@click.option("--image-url", help="Public URL of the photo to store with the product")
@_add_options
@click.pass_context
def analyze_image(
    ctx, image_file: str, name, image_url, add: bool, cost, price, stock: int, folder_id
):
    """Identify a product from a photo."""
    service = _entry_service(ctx)
    mime_type = mimetypes.guess_type(image_file)[0] or "image/jpeg"
    encoded = base64.b64encode(Path(image_file).read_bytes()).decode("ascii")
    analysis = service.analyze(base64_image=encoded, mime_type=mime_type)
    _show(analysis)
    if add:
        _add(ctx, service, analysis, cost, price, stock, folder_id, image_url, name)


def register_commands(cli):
    """Register analyze commands with main CLI."""
    cli.add_command(analyze_group, name="analyze")
