"""Import template command."""

from pathlib import Path

import click

from autostock.domain.csv_import import TEMPLATE_FILENAME, build_template


@click.command("template")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help=f"File to write (default: print to stdout; use '-o {TEMPLATE_FILENAME}' to save)",
)
def template(output: str | None):
    """Write the example CSV import file."""
    content = build_template() + "\n"
    if output is None:
        click.echo(content, nl=False)
        return
    Path(output).write_text(content, encoding="utf-8")
    click.echo(f"Template written to {output}")


def register_commands(cli):
    """Register template command with main CLI."""
    cli.add_command(template)
