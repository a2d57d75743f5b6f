"""Ledger aggregation: merging journal entries into a trial balance.

Every operation here is pure. A merge takes a ``Ledger`` snapshot and returns
a new one; the input snapshot is never modified, and a rejected entry leaves
the caller holding exactly the ledger it passed in.
"""

from dataclasses import replace
from typing import Iterable, Optional

from ctengine.config.logging import get_logger
from ctengine.domain.chart_of_accounts import DEFAULT_CHART, ChartOfAccounts
from ctengine.domain.entities import (
    Account,
    Contribution,
    EntrySource,
    ExtractionBatch,
    JournalEntry,
    Ledger,
    TrialBalanceEntry,
    ZERO,
)
from ctengine.domain.journal_validator import validate_journal_entry
from ctengine.utils.amount_parser import to_pence

logger = get_logger(__name__)

DEBIT = "debit"
CREDIT = "credit"

# (batch field, account code, side, document reference)
EXTRACTION_CATEGORIES: tuple[tuple[str, str, str, str], ...] = (
    ("turnover", "4000", CREDIT, "AI processed sales invoices"),
    ("other_income", "4900", CREDIT, "AI processed other income"),
    ("cost_of_sales", "5000", DEBIT, "AI processed purchase invoices"),
    ("administrative_expenses", "6000", DEBIT, "AI processed expense receipts"),
    ("professional_fees", "6100", DEBIT, "AI processed professional fees"),
    ("other_expenses", "6900", DEBIT, "AI processed other expenses"),
)


class LedgerAggregator:
    """Merges provenance-tagged entries into a trial balance keyed by account code."""

    def __init__(self, chart: Optional[ChartOfAccounts] = None):
        """Initialize ledger aggregator.

        Args:
            chart: Chart of accounts used to name and classify codes
        """
        self.chart = chart if chart is not None else DEFAULT_CHART

    def merge(
        self,
        ledger: Ledger,
        entry: JournalEntry,
        source: EntrySource = EntrySource.MANUAL_JOURNAL,
        document_ref: Optional[str] = None,
    ) -> Ledger:
        """Merge a journal entry into a ledger.

        Replaying an entry ID that is already applied returns ``ledger``
        itself. The entry is re-validated here whatever the caller has done.

        Args:
            ledger: Current ledger snapshot
            entry: Journal entry to merge
            source: Origin of the entry
            document_ref: Optional supporting document reference

        Returns:
            New ledger snapshot

        Raises:
            BalanceError: If the entry does not balance
            ValidationError: If the entry is structurally invalid
            UnknownAccountError: If a line's account code cannot be resolved
        """
        if ledger.has_applied(entry.id):
            logger.warning("duplicate_entry_ignored", entry_id=entry.id, source=source.value)
            return ledger

        validate_journal_entry(entry)

        # Resolve every account before touching any row
        contributions = [
            (
                self.chart.resolve(line.account_code, line.account_name),
                Contribution(
                    entry_id=entry.id,
                    source=source,
                    debit=line.debit,
                    credit=line.credit,
                    reference=entry.reference or None,
                    document_ref=document_ref,
                ),
            )
            for line in entry.non_empty_lines
        ]

        merged = Ledger(
            entries=_apply_contributions(ledger.entries, contributions),
            applied_entry_ids=ledger.applied_entry_ids | {entry.id},
        )
        logger.info(
            "journal_merged",
            entry_id=entry.id,
            source=source.value,
            lines=len(contributions),
        )
        return merged

    def merge_all(
        self,
        ledger: Ledger,
        entries: Iterable[JournalEntry],
        source: EntrySource = EntrySource.MANUAL_JOURNAL,
    ) -> Ledger:
        """Merge entries in order, stopping at the first rejected entry."""
        for entry in entries:
            ledger = self.merge(ledger, entry, source)
        return ledger

    def merge_extraction(self, ledger: Ledger, batch: ExtractionBatch) -> Ledger:
        """Merge an AI extraction batch as synthetic single-sided rows.

        Each non-zero category becomes one contribution: revenue categories on
        the credit side, expense categories on the debit side. These do not
        balance on their own and so skip journal validation; they still count
        towards the whole-ledger debit/credit check.

        The batch ID shares the applied-ID namespace with journal entry IDs.

        Raises:
            InvalidInputError: If a category amount is negative, not finite or
                finer than a penny
        """
        if ledger.has_applied(batch.batch_id):
            logger.warning(
                "duplicate_entry_ignored",
                entry_id=batch.batch_id,
                source=EntrySource.AI_PROCESSED.value,
            )
            return ledger

        contributions = []
        for field_name, code, side, document_ref in EXTRACTION_CATEGORIES:
            amount = to_pence(getattr(batch, field_name), field_name)
            if amount == 0:
                continue
            contributions.append(
                (
                    self.chart.resolve(code),
                    Contribution(
                        entry_id=batch.batch_id,
                        source=EntrySource.AI_PROCESSED,
                        debit=amount if side == DEBIT else ZERO,
                        credit=amount if side == CREDIT else ZERO,
                        document_ref=document_ref,
                    ),
                )
            )

        merged = Ledger(
            entries=_apply_contributions(ledger.entries, contributions),
            applied_entry_ids=ledger.applied_entry_ids | {batch.batch_id},
        )
        logger.info(
            "extraction_merged",
            batch_id=batch.batch_id,
            categories=len(contributions),
            processed_documents=batch.processed_documents,
        )
        return merged


def _apply_contributions(
    rows: tuple[TrialBalanceEntry, ...],
    contributions: list[tuple[Account, Contribution]],
) -> tuple[TrialBalanceEntry, ...]:
    result = list(rows)
    index = {row.account_code: position for position, row in enumerate(result)}
    for account, contribution in contributions:
        position = index.get(account.code)
        if position is None:
            index[account.code] = len(result)
            result.append(_new_row(account, contribution))
        else:
            result[position] = _accumulate(result[position], contribution)
    return tuple(result)


def _new_row(account: Account, contribution: Contribution) -> TrialBalanceEntry:
    return TrialBalanceEntry(
        account_code=account.code,
        account_name=account.name,
        debit=contribution.debit,
        credit=contribution.credit,
        source=contribution.source,
        document_ref=contribution.document_ref,
        adjustment_refs=(contribution.reference,) if contribution.reference else (),
        contributions=(contribution,),
    )


def _accumulate(row: TrialBalanceEntry, contribution: Contribution) -> TrialBalanceEntry:
    """Add a contribution into an existing row, keeping the row's source."""
    adjustment_refs = row.adjustment_refs
    seen_sources = {row.source} | {c.source for c in row.contributions}
    if contribution.source not in seen_sources:
        adjustment_refs = adjustment_refs + (contribution.reference or contribution.entry_id,)

    return replace(
        row,
        debit=row.debit + contribution.debit,
        credit=row.credit + contribution.credit,
        document_ref=row.document_ref or contribution.document_ref,
        adjustment_refs=adjustment_refs,
        contributions=row.contributions + (contribution,),
    )
