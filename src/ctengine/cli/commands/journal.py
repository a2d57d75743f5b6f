"""Journal entry commands."""

import json
from decimal import Decimal

import click

from ctengine.cli.error_handling import handle_domain_error
from ctengine.cli.output import echo_json, echo_snapshot, journal_record_to_dict, money, snapshot_to_dict
from ctengine.domain.entities import EntrySource
from ctengine.domain.errors import DomainError, ValidationError
from ctengine.domain.trial_balance import (
    TrialBalanceService,
    journal_entry_from_dict,
    parse_source,
)


@click.group()
def journal_group():
    """Merge and inspect journal entries."""
    pass


@journal_group.command("merge")
@click.argument("company_id")
@click.argument("period_id")
@click.option(
    "--file",
    "entry_file",
    type=click.File("r"),
    required=True,
    help="JSON file holding one journal entry or a list of entries ('-' for stdin)",
)
@click.option(
    "--source",
    type=click.Choice([s.value for s in EntrySource]),
    default=EntrySource.MANUAL_JOURNAL.value,
    show_default=True,
    help="Origin of the entries",
)
@click.option("--json", "as_json", is_flag=True, help="Print the resulting trial balance as JSON")
@click.pass_context
def merge_journal(ctx, company_id: str, period_id: str, entry_file, source: str, as_json: bool):
    """Merge journal entries into a trial balance.

    Entries are merged in file order. An entry whose ID has already been
    merged is skipped. The first rejected entry stops the run; entries before
    it stay merged.

    Examples:
        ctengine journal merge acme 2024 --file adjustment.json
        ctengine journal merge acme 2024 --file opening.json --source opening_balance
    """
    service = TrialBalanceService(ctx.obj["db"])

    try:
        payload = json.load(entry_file, parse_float=Decimal)
    except json.JSONDecodeError as e:
        handle_domain_error(ctx, ValueError(f"Invalid JSON in journal file: {e}"))
    raw_entries = payload if isinstance(payload, list) else [payload]

    try:
        entry_source = parse_source(source)
        snapshot = service.get_trial_balance(company_id, period_id)
        for raw in raw_entries:
            if not isinstance(raw, dict):
                raise ValidationError("Each journal entry must be a JSON object")
            entry = journal_entry_from_dict(raw)
            if snapshot.ledger.has_applied(entry.id):
                if not as_json:
                    click.echo(f"Journal entry '{entry.id}' already merged, skipped")
                continue
            snapshot = service.merge_journal(company_id, period_id, entry, entry_source)
            if not as_json:
                click.echo(f"Merged journal entry '{entry.id}'")
    except DomainError as e:
        handle_domain_error(ctx, e)

    if as_json:
        echo_json(snapshot_to_dict(snapshot))
    else:
        echo_snapshot(snapshot)


@journal_group.command("list")
@click.argument("company_id")
@click.argument("period_id")
@click.pass_context
def list_journals(ctx, company_id: str, period_id: str):
    """List recorded journal entries for a company and period."""
    service = TrialBalanceService(ctx.obj["db"])

    records = service.list_journal_entries(company_id, period_id)
    if not records:
        click.echo("No journal entries found.")
        return

    click.echo(f"\nJournal entries: {company_id} / {period_id}")
    click.echo("-" * 80)
    for record in records:
        entry = record.entry
        total = sum((line.debit for line in entry.lines), Decimal("0"))
        click.echo(
            f"{entry.id:20s} | {entry.date.isoformat()} | {record.source.value:16s} | "
            f"{money(total):>14s} | {entry.description}"
        )


@journal_group.command("show")
@click.argument("company_id")
@click.argument("period_id")
@click.argument("entry_id")
@click.pass_context
def show_journal(ctx, company_id: str, period_id: str, entry_id: str):
    """Show a recorded journal entry as JSON."""
    service = TrialBalanceService(ctx.obj["db"])

    try:
        record = service.get_journal_entry(company_id, period_id, entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    echo_json(journal_record_to_dict(record))


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
