"""Chart of accounts commands."""

import click

from ctengine.cli.error_handling import handle_domain_error
from ctengine.domain.chart_of_accounts import DEFAULT_CHART
from ctengine.domain.errors import DomainError


@click.group()
def chart_group():
    """Inspect the chart of accounts."""
    pass


@chart_group.command("list")
def list_chart():
    """List the standard chart of accounts."""
    click.echo("\nChart of accounts:")
    click.echo("-" * 50)
    for account in DEFAULT_CHART.accounts():
        click.echo(f"{account.code:6s} | {account.name:28s} | {account.classification.value}")


@chart_group.command("classify")
@click.argument("code")
@click.pass_context
def classify_code(ctx, code: str):
    """Show how an account code is classified.

    Examples:
        ctengine chart classify 4000
        ctengine chart classify 6250
    """
    try:
        account = DEFAULT_CHART.resolve(code)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"{account.code}: {account.name} ({account.classification.value})")


def register_commands(cli):
    """Register chart commands with main CLI."""
    cli.add_command(chart_group, name="chart")
