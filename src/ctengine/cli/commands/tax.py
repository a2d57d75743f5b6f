"""Corporation Tax computation command."""

import json
from decimal import Decimal

import click

from ctengine.cli.error_handling import handle_domain_error
from ctengine.cli.output import echo_json
from ctengine.domain.errors import DomainError
from ctengine.domain.tax import CorporationTaxComputer, tax_input_from_dict

# option name -> camelCase request key
AMOUNT_OPTIONS = {
    "turnover": "turnover",
    "cost_of_sales": "costOfSales",
    "operating_expenses": "operatingExpenses",
    "interest_received": "interestReceived",
    "dividends_received": "dividendsReceived",
    "depreciation_add_back": "depreciationAddBack",
    "capital_allowances": "capitalAllowances",
    "losses_brought_forward": "lossesBroughtForward",
    "rd_relief_claim": "rdReliefClaim",
    "charitable_donations": "charitableDonations",
    "group_relief": "groupRelief",
    "patent_box_relief": "patentBoxRelief",
}


def tax_options(func):
    """Attach the optional tax figure options shared by tax commands."""
    options = [
        click.option("--cost-of-sales", help="Cost of sales"),
        click.option("--operating-expenses", help="Operating expenses"),
        click.option("--interest-received", help="Interest received"),
        click.option("--dividends-received", help="Dividends received"),
        click.option("--depreciation-add-back", help="Depreciation added back"),
        click.option("--capital-allowances", help="Capital allowances claimed"),
        click.option("--losses-brought-forward", help="Trading losses brought forward"),
        click.option("--rd-relief-claim", help="R&D relief credited against tax"),
        click.option("--charitable-donations", help="Charitable donations credited against tax"),
        click.option("--group-relief", help="Group relief deducted from profits"),
        click.option("--patent-box-relief", help="Patent box relief credited against tax"),
        click.option(
            "--associated-companies",
            type=int,
            help="Number of associated companies (divides the profit limits)",
        ),
        click.option("--period-start", help="Accounting period start date"),
        click.option("--period-end", help="Accounting period end date"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def request_from_options(values: dict) -> dict:
    """Collect the supplied options into a camelCase request body."""
    request = {}
    for option_name, key in AMOUNT_OPTIONS.items():
        if values.get(option_name) is not None:
            request[key] = values[option_name]
    if values.get("associated_companies") is not None:
        request["numberOfAssociatedCompanies"] = values["associated_companies"]
    if values.get("period_start") is not None:
        request["accountingPeriodStart"] = values["period_start"]
    if values.get("period_end") is not None:
        request["accountingPeriodEnd"] = values["period_end"]
    return request


@click.command("compute-tax")
@click.option(
    "--input",
    "input_file",
    type=click.File("r"),
    help="JSON request file ('-' for stdin). Options given as well override its fields.",
)
@click.option("--turnover", help="Turnover for the accounting period")
@tax_options
@click.pass_context
def compute_tax(ctx, input_file, **values):
    """Compute UK Corporation Tax and print the result as JSON.

    Examples:
        ctengine compute-tax --turnover 100000
        ctengine compute-tax --turnover 300000 --cost-of-sales 100000 --associated-companies 1
        ctengine compute-tax --input request.json
    """
    request = {}
    if input_file is not None:
        try:
            request = json.load(input_file, parse_float=Decimal)
        except json.JSONDecodeError as e:
            handle_domain_error(ctx, ValueError(f"Invalid JSON in request: {e}"))
        if not isinstance(request, dict):
            handle_domain_error(ctx, ValueError("Tax request must be a JSON object"))
    request.update(request_from_options(values))

    try:
        result = CorporationTaxComputer().compute(tax_input_from_dict(request))
    except DomainError as e:
        handle_domain_error(ctx, e)

    echo_json(result.to_dict())


def register_commands(cli):
    """Register tax commands with main CLI."""
    cli.add_command(compute_tax)
