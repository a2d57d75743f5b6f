"""Rendering helpers shared by CLI commands."""

import json
from decimal import Decimal
from typing import Any

import click

from ctengine.domain.entities import FinancialStatements, JournalRecord, TrialBalanceSnapshot


def money(amount: Decimal) -> str:
    """Format an amount with thousands separators and pence."""
    return f"{amount:,.2f}"


def echo_json(data: Any) -> None:
    """Write a JSON document to stdout."""
    click.echo(json.dumps(data, indent=2))


def snapshot_to_dict(snapshot: TrialBalanceSnapshot, detail: bool = False) -> dict[str, Any]:
    """Render a trial balance snapshot in the camelCase shape used by callers."""
    entries = []
    for entry in snapshot.ledger.entries:
        row: dict[str, Any] = {
            "accountCode": entry.account_code,
            "accountName": entry.account_name,
            "debit": float(entry.debit),
            "credit": float(entry.credit),
            "source": entry.source.value,
            "documentRef": entry.document_ref,
            "adjustmentRefs": list(entry.adjustment_refs),
        }
        if detail:
            row["breakdown"] = [
                {
                    "entryId": c.entry_id,
                    "source": c.source.value,
                    "debit": float(c.debit),
                    "credit": float(c.credit),
                    "reference": c.reference,
                    "documentRef": c.document_ref,
                }
                for c in entry.contributions
            ]
        entries.append(row)

    return {
        "companyId": snapshot.company_id,
        "periodId": snapshot.period_id,
        "entries": entries,
        "totalDebits": float(snapshot.balances.total_debits),
        "totalCredits": float(snapshot.balances.total_credits),
        "difference": float(snapshot.difference),
        "isBalanced": snapshot.is_balanced,
    }


def statements_to_dict(statements: FinancialStatements) -> dict[str, Any]:
    return {
        "profitAndLoss": {
            "revenue": float(statements.revenue),
            "costOfSales": float(statements.cost_of_sales),
            "grossProfit": float(statements.gross_profit),
            "operatingExpenses": float(statements.operating_expenses),
            "netProfit": float(statements.net_profit),
        },
        "balanceSheet": {
            "assets": float(statements.assets),
            "liabilities": float(statements.liabilities),
            "netAssets": float(statements.net_assets),
            "equity": float(statements.equity),
        },
    }


def echo_snapshot(snapshot: TrialBalanceSnapshot, detail: bool = False) -> None:
    """Print a trial balance as a table followed by the balance check."""
    if not snapshot.ledger.entries:
        click.echo(
            f"No trial balance entries for company '{snapshot.company_id}' "
            f"period '{snapshot.period_id}'."
        )
        return

    click.echo(f"\nTrial balance: {snapshot.company_id} / {snapshot.period_id}")
    click.echo("-" * 96)
    click.echo(f"{'Code':6s} {'Account':30s} {'Debit':>15s} {'Credit':>15s}  {'Source':16s} Refs")
    click.echo("-" * 96)
    for entry in snapshot.ledger.entries:
        refs = ", ".join(entry.adjustment_refs)
        click.echo(
            f"{entry.account_code:6s} {entry.account_name[:30]:30s} "
            f"{money(entry.debit):>15s} {money(entry.credit):>15s}  "
            f"{entry.source.value:16s} {refs}"
        )
        if detail:
            for c in entry.contributions:
                label = c.reference or c.document_ref or ""
                click.echo(
                    f"{'':6s}   {c.entry_id[:27]:27s} "
                    f"{money(c.debit):>15s} {money(c.credit):>15s}  "
                    f"{c.source.value:16s} {label}"
                )
    click.echo("-" * 96)
    click.echo(
        f"{'':6s} {'Totals':30s} {money(snapshot.balances.total_debits):>15s} "
        f"{money(snapshot.balances.total_credits):>15s}"
    )

    if snapshot.is_balanced:
        click.echo("\nTrial balance is balanced.")
    else:
        click.echo(f"\nTrial balance is OUT OF BALANCE by {money(abs(snapshot.difference))}.")


def journal_record_to_dict(record: JournalRecord) -> dict[str, Any]:
    entry = record.entry
    return {
        "id": entry.id,
        "date": entry.date.isoformat(),
        "description": entry.description,
        "reference": entry.reference,
        "source": record.source.value,
        "recordedAt": record.recorded_at.isoformat(),
        "lines": [
            {
                "accountCode": line.account_code,
                "accountName": line.account_name,
                "debit": float(line.debit),
                "credit": float(line.credit),
            }
            for line in entry.lines
        ],
    }
