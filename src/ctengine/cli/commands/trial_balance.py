"""Trial balance commands."""

import json
from decimal import Decimal

import click

from ctengine.cli.commands.tax import AMOUNT_OPTIONS, tax_options
from ctengine.cli.error_handling import handle_domain_error
from ctengine.cli.output import (
    echo_json,
    echo_snapshot,
    money,
    snapshot_to_dict,
    statements_to_dict,
)
from ctengine.domain.errors import DomainError
from ctengine.domain.trial_balance import TrialBalanceService, extraction_batch_from_dict


@click.group()
def trial_balance_group():
    """Inspect trial balances and ingest extracted figures."""
    pass


@trial_balance_group.command("show")
@click.argument("company_id")
@click.argument("period_id")
@click.option("--detail", is_flag=True, help="Show every contribution under each account")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
@click.pass_context
def show_trial_balance(ctx, company_id: str, period_id: str, detail: bool, as_json: bool):
    """Show the trial balance for a company and period.

    Examples:
        ctengine trial-balance show acme 2024
        ctengine trial-balance show acme 2024 --detail
    """
    service = TrialBalanceService(ctx.obj["db"])
    snapshot = service.get_trial_balance(company_id, period_id)

    if as_json:
        echo_json(snapshot_to_dict(snapshot, detail=detail))
    else:
        echo_snapshot(snapshot, detail=detail)


@trial_balance_group.command("list")
@click.pass_context
def list_trial_balances(ctx):
    """List company and period keys with a stored trial balance."""
    service = TrialBalanceService(ctx.obj["db"])

    keys = service.list_ledgers()
    if not keys:
        click.echo("No trial balances found.")
        return

    for company_id, period_id in keys:
        click.echo(f"{company_id} / {period_id}")


@trial_balance_group.command("import-extraction")
@click.argument("company_id")
@click.argument("period_id")
@click.argument("batch_id")
@click.option(
    "--file",
    "batch_file",
    type=click.File("r"),
    required=True,
    help="JSON file of extracted category totals ('-' for stdin)",
)
@click.pass_context
def import_extraction(ctx, company_id: str, period_id: str, batch_id: str, batch_file):
    """Merge AI-extracted category totals into a trial balance.

    The file holds turnover, otherIncome, costOfSales, administrativeExpenses,
    professionalFees, otherExpenses and processedDocuments. Importing the same
    BATCH_ID twice has no further effect.

    Examples:
        ctengine trial-balance import-extraction acme 2024 batch-01 --file totals.json
    """
    service = TrialBalanceService(ctx.obj["db"])

    try:
        payload = json.load(batch_file, parse_float=Decimal)
    except json.JSONDecodeError as e:
        handle_domain_error(ctx, ValueError(f"Invalid JSON in extraction file: {e}"))
    if not isinstance(payload, dict):
        handle_domain_error(ctx, ValueError("Extraction file must hold a JSON object"))

    try:
        already_applied = service.get_trial_balance(company_id, period_id).ledger.has_applied(
            batch_id
        )
        snapshot = service.ingest_extraction(
            company_id, period_id, extraction_batch_from_dict(batch_id, payload)
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if already_applied:
        click.echo(f"Extraction batch '{batch_id}' already imported, skipped")
    else:
        click.echo(f"Imported extraction batch '{batch_id}'")
    echo_snapshot(snapshot)


@trial_balance_group.command("statements")
@click.argument("company_id")
@click.argument("period_id")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
@click.pass_context
def show_statements(ctx, company_id: str, period_id: str, as_json: bool):
    """Show profit and loss and balance sheet totals.

    Refuses to report figures from an unbalanced trial balance.
    """
    service = TrialBalanceService(ctx.obj["db"])

    try:
        statements = service.build_statements(company_id, period_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if as_json:
        echo_json(statements_to_dict(statements))
        return

    click.echo(f"\nProfit and loss: {company_id} / {period_id}")
    click.echo("-" * 50)
    click.echo(f"{'Revenue':30s} {money(statements.revenue):>18s}")
    click.echo(f"{'Cost of sales':30s} {money(statements.cost_of_sales):>18s}")
    click.echo(f"{'Gross profit':30s} {money(statements.gross_profit):>18s}")
    click.echo(f"{'Operating expenses':30s} {money(statements.operating_expenses):>18s}")
    click.echo(f"{'Net profit':30s} {money(statements.net_profit):>18s}")
    click.echo(f"\nBalance sheet: {company_id} / {period_id}")
    click.echo("-" * 50)
    click.echo(f"{'Assets':30s} {money(statements.assets):>18s}")
    click.echo(f"{'Liabilities':30s} {money(statements.liabilities):>18s}")
    click.echo(f"{'Net assets':30s} {money(statements.net_assets):>18s}")
    click.echo(f"{'Equity':30s} {money(statements.equity):>18s}")


@trial_balance_group.command("tax")
@click.argument("company_id")
@click.argument("period_id")
@click.option(
    "--no-depreciation-add-back",
    is_flag=True,
    help="Do not add back depreciation booked to account 6600",
)
@tax_options
@click.pass_context
def trial_balance_tax(ctx, company_id: str, period_id: str, no_depreciation_add_back: bool, **values):
    """Compute Corporation Tax from a trial balance and print it as JSON.

    Turnover, cost of sales and operating expenses come from the ledger;
    the options supply or override the remaining figures.

    Examples:
        ctengine trial-balance tax acme 2024
        ctengine trial-balance tax acme 2024 --capital-allowances 5000 --associated-companies 1
    """
    service = TrialBalanceService(ctx.obj["db"])

    overrides = {
        field_name: values[field_name]
        for field_name in AMOUNT_OPTIONS
        if field_name != "turnover" and values.get(field_name) is not None
    }
    if values.get("associated_companies") is not None:
        overrides["number_of_associated_companies"] = values["associated_companies"]
    if values.get("period_start") is not None:
        overrides["accounting_period_start"] = values["period_start"]
    if values.get("period_end") is not None:
        overrides["accounting_period_end"] = values["period_end"]

    try:
        result = service.compute_tax(
            company_id,
            period_id,
            add_back_depreciation=not no_depreciation_add_back,
            **overrides,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    echo_json(result.to_dict())


def register_commands(cli):
    """Register trial balance commands with main CLI."""
    cli.add_command(trial_balance_group, name="trial-balance")
