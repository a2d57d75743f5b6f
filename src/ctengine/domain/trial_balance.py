"""Trial balance domain service.

Loads a ledger snapshot for a (company, period) key, merges into it with the
pure ``LedgerAggregator`` and stores the result. Merges for the same key are
serialised with a per-key lock; different keys proceed independently.
"""

import threading
from datetime import date
from typing import Any, Optional

from ctengine.config.logging import get_logger
from ctengine.database.base import Database
from ctengine.domain.classifier import BalanceClassifier
from ctengine.domain.entities import (
    EntrySource,
    ExtractionBatch,
    FinancialStatements,
    JournalEntry,
    JournalLine,
    JournalRecord,
    Ledger,
    TaxComputationResult,
    TrialBalanceSnapshot,
)
from ctengine.domain.errors import (
    DomainError,
    DuplicateEntryError,
    NotFoundError,
    ValidationError,
    journal_entry_not_found,
)
from ctengine.domain.ledger import LedgerAggregator
from ctengine.domain.tax import CorporationTaxComputer
from ctengine.utils.date_parser import parse_date

logger = get_logger(__name__)

# camelCase extraction keys -> ExtractionBatch fields
EXTRACTION_FIELDS = {
    "turnover": "turnover",
    "otherIncome": "other_income",
    "costOfSales": "cost_of_sales",
    "administrativeExpenses": "administrative_expenses",
    "professionalFees": "professional_fees",
    "otherExpenses": "other_expenses",
    "processedDocuments": "processed_documents",
}


def parse_source(value: Any) -> EntrySource:
    """Parse an entry source name such as ``manual_journal``."""
    if isinstance(value, EntrySource):
        return value
    try:
        return EntrySource(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(s.value for s in EntrySource)
        raise ValidationError(f"Unknown entry source '{value}'. Expected one of: {choices}")


def journal_entry_from_dict(data: dict[str, Any]) -> JournalEntry:
    """Build a JournalEntry from a JSON request body.

    Lines are read from ``lines`` (or ``entries``), each with ``accountCode``,
    optional ``accountName``, ``debit`` and ``credit``.

    Raises:
        ValidationError: If a required field is missing or malformed
    """
    entry_id = data.get("id")
    if not entry_id:
        raise ValidationError("Journal entry id is required")

    raw_date = data.get("date")
    if raw_date is None:
        raise ValidationError(f"Journal entry '{entry_id}': date is required")
    if isinstance(raw_date, date):
        entry_date = raw_date
    else:
        try:
            entry_date = parse_date(str(raw_date))
        except ValueError as e:
            raise ValidationError(f"Journal entry '{entry_id}': {e}") from e

    raw_lines = data.get("lines", data.get("entries"))
    if not isinstance(raw_lines, list):
        raise ValidationError(f"Journal entry '{entry_id}': lines must be a list")

    lines = []
    for index, raw in enumerate(raw_lines):
        if not isinstance(raw, dict):
            raise ValidationError(f"Line {index + 1}: expected an object")
        lines.append(
            JournalLine(
                account_code=str(raw.get("accountCode") or "").strip(),
                debit=raw.get("debit"),
                credit=raw.get("credit"),
                account_name=raw.get("accountName"),
            )
        )

    return JournalEntry(
        id=str(entry_id),
        date=entry_date,
        description=str(data.get("description") or ""),
        reference=str(data.get("reference") or ""),
        lines=tuple(lines),
    )


def extraction_batch_from_dict(batch_id: str, data: dict[str, Any]) -> ExtractionBatch:
    """Build an ExtractionBatch from camelCase category totals.

    Raises:
        ValidationError: If a key is not recognised or the document count is invalid
    """
    unknown = sorted(set(data) - set(EXTRACTION_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown extraction field(s): {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, field_name in EXTRACTION_FIELDS.items():
        if data.get(key) is not None:
            values[field_name] = data[key]

    processed = values.get("processed_documents", 0)
    if isinstance(processed, bool) or not isinstance(processed, int) or processed < 0:
        raise ValidationError(f"processedDocuments must be a non-negative integer, got {processed!r}")

    return ExtractionBatch(batch_id=batch_id, **values)


class TrialBalanceService:
    """Service for merging entries into stored trial balances."""

    def __init__(
        self,
        db: Database,
        aggregator: Optional[LedgerAggregator] = None,
        classifier: Optional[BalanceClassifier] = None,
        tax_computer: Optional[CorporationTaxComputer] = None,
    ):
        """Initialize trial balance service.

        Args:
            db: Database instance
            aggregator: Ledger aggregator (defaults to the standard chart)
            classifier: Balance classifier (defaults to the standard chart)
            tax_computer: Tax computer used for ledger-derived computations
        """
        self.db = db
        self.aggregator = aggregator if aggregator is not None else LedgerAggregator()
        self.classifier = classifier if classifier is not None else BalanceClassifier(
            self.aggregator.chart
        )
        self.tax_computer = (
            tax_computer if tax_computer is not None else CorporationTaxComputer(self.classifier)
        )
        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, company_id: str, period_id: str) -> threading.Lock:
        key = (company_id, period_id)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _snapshot(self, company_id: str, period_id: str, ledger: Ledger) -> TrialBalanceSnapshot:
        return TrialBalanceSnapshot(
            company_id=company_id,
            period_id=period_id,
            ledger=ledger,
            balances=self.classifier.classify(ledger),
        )

    def merge_journal(
        self,
        company_id: str,
        period_id: str,
        entry: JournalEntry,
        source: EntrySource = EntrySource.MANUAL_JOURNAL,
        document_ref: Optional[str] = None,
    ) -> TrialBalanceSnapshot:
        """Merge a journal entry into the stored ledger for a key.

        A replayed entry ID is a no-op and returns the current snapshot.

        Args:
            company_id: Company identifier
            period_id: Accounting period identifier
            entry: Journal entry to merge
            source: Origin of the entry
            document_ref: Optional supporting document reference

        Returns:
            Updated trial balance snapshot

        Raises:
            BalanceError: If the entry does not balance
            ValidationError: If the entry is structurally invalid
            UnknownAccountError: If an account code cannot be resolved
        """
        with self._lock_for(company_id, period_id):
            ledger = self.db.get_ledger(company_id, period_id)
            try:
                merged = self.aggregator.merge(ledger, entry, source, document_ref)
            except DomainError as e:
                logger.warning(
                    "journal_rejected",
                    company_id=company_id,
                    period_id=period_id,
                    entry_id=entry.id,
                    error=str(e),
                )
                raise

            if merged is ledger:
                return self._snapshot(company_id, period_id, ledger)

            try:
                self.db.save_ledger(company_id, period_id, merged, journal=entry, source=source)
            except DuplicateEntryError:
                # Journal recorded without its ledger rows; the stored ledger stands
                logger.warning(
                    "duplicate_entry_ignored",
                    company_id=company_id,
                    period_id=period_id,
                    entry_id=entry.id,
                )
                return self._snapshot(company_id, period_id, ledger)

            return self._snapshot(company_id, period_id, merged)

    def merge_journals(
        self,
        company_id: str,
        period_id: str,
        entries: list[JournalEntry],
        source: EntrySource = EntrySource.MANUAL_JOURNAL,
    ) -> TrialBalanceSnapshot:
        """Merge entries one at a time, stopping at the first rejection.

        Entries merged before a rejection stay merged.
        """
        snapshot = self.get_trial_balance(company_id, period_id)
        for entry in entries:
            snapshot = self.merge_journal(company_id, period_id, entry, source)
        return snapshot

    def ingest_extraction(
        self, company_id: str, period_id: str, batch: ExtractionBatch
    ) -> TrialBalanceSnapshot:
        """Merge an AI extraction batch into the stored ledger for a key.

        Raises:
            InvalidInputError: If a category amount is negative or not finite
        """
        with self._lock_for(company_id, period_id):
            ledger = self.db.get_ledger(company_id, period_id)
            merged = self.aggregator.merge_extraction(ledger, batch)
            if merged is not ledger:
                self.db.save_ledger(company_id, period_id, merged)
            return self._snapshot(company_id, period_id, merged)

    def get_trial_balance(self, company_id: str, period_id: str) -> TrialBalanceSnapshot:
        """Get the trial balance snapshot with its balance check."""
        return self._snapshot(company_id, period_id, self.db.get_ledger(company_id, period_id))

    def build_statements(self, company_id: str, period_id: str) -> FinancialStatements:
        """Build financial statements for a key.

        Raises:
            LedgerUnbalancedError: If the ledger does not balance
        """
        return self.classifier.build_statements(self.db.get_ledger(company_id, period_id))

    def compute_tax(self, company_id: str, period_id: str, **overrides: Any) -> TaxComputationResult:
        """Compute Corporation Tax from the stored ledger for a key.

        Keyword arguments override or supplement the ledger-derived inputs.

        Raises:
            LedgerUnbalancedError: If the ledger does not balance
            InvalidInputError: If an override is invalid
        """
        ledger = self.db.get_ledger(company_id, period_id)
        return self.tax_computer.compute_from_ledger(ledger, **overrides)

    def get_journal_entry(self, company_id: str, period_id: str, entry_id: str) -> JournalRecord:
        """Get a recorded journal entry.

        Raises:
            NotFoundError: If the entry has not been recorded for the key
        """
        record = self.db.get_journal_entry(company_id, period_id, entry_id)
        if record is None:
            raise NotFoundError(journal_entry_not_found(entry_id, company_id, period_id))
        return record

    def list_journal_entries(self, company_id: str, period_id: str) -> list[JournalRecord]:
        """List recorded journal entries for a key in recording order."""
        return self.db.list_journal_entries(company_id, period_id)

    def list_ledgers(self) -> list[tuple[str, str]]:
        """List (company_id, period_id) keys with a stored ledger."""
        return self.db.list_ledger_keys()
