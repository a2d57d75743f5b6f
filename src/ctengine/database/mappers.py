"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the ledger snapshot entities stay
free of persistence concerns.
"""

from decimal import Decimal

from ctengine.domain import entities as domain
from ctengine.database.models import (
    TrialBalanceRow as ORMTrialBalanceRow,
    LedgerContribution as ORMLedgerContribution,
    JournalEntryRecord as ORMJournalEntry,
    JournalLineRecord as ORMJournalLine,
)


def _amount(value) -> Decimal:
    # SQLite hands back Numeric columns as Decimal, other backends may not
    return value if isinstance(value, Decimal) else Decimal(str(value))


def contribution_to_domain(orm_contribution: ORMLedgerContribution) -> domain.Contribution:
    """Convert SQLAlchemy LedgerContribution to domain Contribution."""
    return domain.Contribution(
        entry_id=orm_contribution.entry_id,
        source=domain.EntrySource(orm_contribution.source),
        debit=_amount(orm_contribution.debit),
        credit=_amount(orm_contribution.credit),
        reference=orm_contribution.reference,
        document_ref=orm_contribution.document_ref,
    )


def trial_balance_row_to_domain(orm_row: ORMTrialBalanceRow) -> domain.TrialBalanceEntry:
    """Convert SQLAlchemy TrialBalanceRow to domain TrialBalanceEntry."""
    return domain.TrialBalanceEntry(
        account_code=orm_row.account_code,
        account_name=orm_row.account_name,
        debit=_amount(orm_row.debit),
        credit=_amount(orm_row.credit),
        source=domain.EntrySource(orm_row.source),
        document_ref=orm_row.document_ref,
        adjustment_refs=tuple(orm_row.adjustment_refs or ()),
        contributions=tuple(contribution_to_domain(c) for c in orm_row.contributions),
    )


def trial_balance_row_from_domain(
    company_id: str, period_id: str, position: int, entry: domain.TrialBalanceEntry
) -> ORMTrialBalanceRow:
    """Build a SQLAlchemy TrialBalanceRow from a domain TrialBalanceEntry."""
    return ORMTrialBalanceRow(
        company_id=company_id,
        period_id=period_id,
        position=position,
        account_code=entry.account_code,
        account_name=entry.account_name,
        debit=entry.debit,
        credit=entry.credit,
        source=entry.source.value,
        document_ref=entry.document_ref,
        adjustment_refs=list(entry.adjustment_refs),
        contributions=[
            ORMLedgerContribution(
                position=index,
                entry_id=c.entry_id,
                source=c.source.value,
                debit=c.debit,
                credit=c.credit,
                reference=c.reference,
                document_ref=c.document_ref,
            )
            for index, c in enumerate(entry.contributions)
        ],
    )


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLineRecord to domain JournalLine."""
    return domain.JournalLine(
        account_code=orm_line.account_code,
        debit=_amount(orm_line.debit),
        credit=_amount(orm_line.credit),
        account_name=orm_line.account_name,
    )


def journal_to_domain(orm_journal: ORMJournalEntry) -> domain.JournalRecord:
    """Convert SQLAlchemy JournalEntryRecord to domain JournalRecord."""
    return domain.JournalRecord(
        entry=domain.JournalEntry(
            id=orm_journal.entry_id,
            date=orm_journal.entry_date,
            description=orm_journal.description,
            reference=orm_journal.reference,
            lines=tuple(journal_line_to_domain(line) for line in orm_journal.lines),
        ),
        source=domain.EntrySource(orm_journal.source),
        company_id=orm_journal.company_id,
        period_id=orm_journal.period_id,
        recorded_at=orm_journal.recorded_at,
    )


def journal_from_domain(
    company_id: str,
    period_id: str,
    entry: domain.JournalEntry,
    source: domain.EntrySource,
) -> ORMJournalEntry:
    """Build a SQLAlchemy JournalEntryRecord from a domain JournalEntry."""
    return ORMJournalEntry(
        company_id=company_id,
        period_id=period_id,
        entry_id=entry.id,
        entry_date=entry.date,
        description=entry.description,
        reference=entry.reference,
        source=source.value,
        lines=[
            ORMJournalLine(
                position=index,
                account_code=line.account_code,
                account_name=line.account_name,
                debit=line.debit,
                credit=line.credit,
            )
            for index, line in enumerate(entry.lines)
        ],
    )
