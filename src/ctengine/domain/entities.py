"""Domain model entities for ctengine.

These are pure data classes representing ledger and tax concepts, independent
of database schema. Ledgers are immutable snapshots: every merge produces a new
``Ledger`` rather than editing rows in place.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from ctengine.utils.amount_parser import to_decimal

ZERO = Decimal("0")


class Classification(Enum):
    """Financial-statement bucket an account belongs to."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"
    OTHER = "Other"


class EntrySource(Enum):
    """Provenance of a ledger contribution."""

    AI_PROCESSED = "ai_processed"
    MANUAL_JOURNAL = "manual_journal"
    OPENING_BALANCE = "opening_balance"


@dataclass(frozen=True)
class Account:
    """Chart of accounts entry."""

    code: str
    name: str
    classification: Classification


@dataclass(frozen=True)
class JournalLine:
    """Single debit or credit line of a journal entry."""

    account_code: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    account_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "debit", to_decimal(self.debit, "debit"))
        object.__setattr__(self, "credit", to_decimal(self.credit, "credit"))

    @property
    def is_empty(self) -> bool:
        """True when the line carries no amount and should be discarded."""
        return self.debit == 0 and self.credit == 0


@dataclass(frozen=True)
class JournalEntry:
    """Write-once journal entry."""

    id: str
    date: date
    description: str
    reference: str
    lines: tuple[JournalLine, ...]

    def __post_init__(self):
        # Accept any sequence of lines but store a tuple so the entry stays immutable
        object.__setattr__(self, "lines", tuple(self.lines))

    @property
    def non_empty_lines(self) -> tuple[JournalLine, ...]:
        """Lines that carry an amount."""
        return tuple(line for line in self.lines if not line.is_empty)


@dataclass(frozen=True)
class Contribution:
    """One entry's contribution to a trial balance row, kept for audit."""

    entry_id: str
    source: EntrySource
    debit: Decimal
    credit: Decimal
    reference: Optional[str] = None
    document_ref: Optional[str] = None


@dataclass(frozen=True)
class TrialBalanceEntry:
    """Aggregated trial balance row for one account code."""

    account_code: str
    account_name: str
    debit: Decimal
    credit: Decimal
    source: EntrySource
    document_ref: Optional[str] = None
    adjustment_refs: tuple[str, ...] = ()
    contributions: tuple[Contribution, ...] = ()

    @property
    def net_balance(self) -> Decimal:
        """Credit minus debit."""
        return self.credit - self.debit

    @property
    def adjustment_ref(self) -> Optional[str]:
        """Most recent adjustment reference, if any."""
        return self.adjustment_refs[-1] if self.adjustment_refs else None


@dataclass(frozen=True)
class Ledger:
    """Immutable trial balance snapshot.

    ``applied_entry_ids`` travels with the rows so that a replayed entry is
    recognised even after the snapshot has been stored and reloaded.
    """

    entries: tuple[TrialBalanceEntry, ...] = ()
    applied_entry_ids: frozenset[str] = frozenset()

    def get(self, account_code: str) -> Optional[TrialBalanceEntry]:
        """Return the row for an account code, if present."""
        for entry in self.entries:
            if entry.account_code == account_code:
                return entry
        return None

    def has_applied(self, entry_id: str) -> bool:
        """True if the entry ID has already been merged."""
        return entry_id in self.applied_entry_ids

    @property
    def total_debits(self) -> Decimal:
        return sum((entry.debit for entry in self.entries), ZERO)

    @property
    def total_credits(self) -> Decimal:
        return sum((entry.credit for entry in self.entries), ZERO)


@dataclass(frozen=True)
class ExtractionBatch:
    """Per-period category totals delivered by AI document extraction."""

    batch_id: str
    turnover: Decimal = ZERO
    other_income: Decimal = ZERO
    cost_of_sales: Decimal = ZERO
    administrative_expenses: Decimal = ZERO
    professional_fees: Decimal = ZERO
    other_expenses: Decimal = ZERO
    processed_documents: int = 0


@dataclass(frozen=True)
class ClassifiedBalances:
    """Bucketed net balances plus whole-ledger debit/credit totals."""

    revenue: Decimal
    expenses: Decimal
    assets: Decimal
    liabilities: Decimal
    equity: Decimal
    other: Decimal
    total_debits: Decimal
    total_credits: Decimal
    is_balanced: bool

    @property
    def difference(self) -> Decimal:
        """Total debits minus total credits."""
        return self.total_debits - self.total_credits


@dataclass(frozen=True)
class FinancialStatements:
    """Headline profit and loss and balance sheet figures."""

    revenue: Decimal
    cost_of_sales: Decimal
    gross_profit: Decimal
    operating_expenses: Decimal
    net_profit: Decimal
    assets: Decimal
    liabilities: Decimal
    net_assets: Decimal
    equity: Decimal


@dataclass(frozen=True)
class TrialBalanceSnapshot:
    """Ledger for a company/period together with its balance check."""

    company_id: str
    period_id: str
    ledger: Ledger
    balances: ClassifiedBalances

    @property
    def is_balanced(self) -> bool:
        return self.balances.is_balanced

    @property
    def difference(self) -> Decimal:
        return self.balances.difference


@dataclass(frozen=True)
class TaxComputationInput:
    """CT600 computation inputs. Optional amounts default to zero."""

    turnover: Decimal
    cost_of_sales: Decimal = ZERO
    operating_expenses: Decimal = ZERO
    interest_received: Decimal = ZERO
    dividends_received: Decimal = ZERO
    depreciation_add_back: Decimal = ZERO
    capital_allowances: Decimal = ZERO
    losses_brought_forward: Decimal = ZERO
    rd_relief_claim: Decimal = ZERO
    charitable_donations: Decimal = ZERO
    group_relief: Decimal = ZERO
    patent_box_relief: Decimal = ZERO
    number_of_associated_companies: int = 0
    accounting_period_start: Optional[date] = None
    accounting_period_end: Optional[date] = None


@dataclass(frozen=True)
class TradingProfitCalculation:
    turnover: Decimal
    cost_of_sales: Decimal
    operating_expenses: Decimal
    trading_profit: Decimal


@dataclass(frozen=True)
class TaxAdjustments:
    depreciation_add_back: Decimal
    capital_allowances: Decimal
    net_adjustment: Decimal


@dataclass(frozen=True)
class OtherIncome:
    interest_received: Decimal
    dividends_received: Decimal
    total: Decimal


@dataclass(frozen=True)
class Deductions:
    losses_brought_forward: Decimal
    losses_utilised: Decimal
    group_relief: Decimal
    total: Decimal


@dataclass(frozen=True)
class TaxCalculation:
    chargeable_profits: Decimal
    number_of_associated_companies: int
    lower_limit: Decimal
    upper_limit: Decimal
    applicable_rate: Decimal
    tax_before_reliefs: Decimal
    marginal_relief_applied: bool
    marginal_relief_amount: Decimal


@dataclass(frozen=True)
class Reliefs:
    rd_relief: Decimal
    charitable_donations: Decimal
    patent_box_relief: Decimal
    total: Decimal


@dataclass(frozen=True)
class TaxBreakdown:
    """Step-by-step figures behind a tax computation."""

    trading_profit_calculation: TradingProfitCalculation
    adjustments: TaxAdjustments
    other_income: OtherIncome
    deductions: Deductions
    tax_calculation: TaxCalculation
    reliefs: Reliefs


@dataclass(frozen=True)
class TaxComputationResult:
    """Corporation Tax computation output. Recomputed, never persisted."""

    chargeable_profits: Decimal
    corporation_tax_rate: Decimal
    corporation_tax_before_reliefs: Decimal
    total_reliefs: Decimal
    corporation_tax_due: Decimal
    breakdown: TaxBreakdown
    effective_tax_rate: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        """Render the result in the camelCase JSON shape used by callers."""
        b = self.breakdown
        calc = b.tax_calculation
        return {
            "chargeableProfits": float(self.chargeable_profits),
            "corporationTaxRate": float(self.corporation_tax_rate),
            "corporationTaxBeforeReliefs": float(self.corporation_tax_before_reliefs),
            "totalReliefs": float(self.total_reliefs),
            "corporationTaxDue": float(self.corporation_tax_due),
            "breakdown": {
                "tradingProfitCalculation": {
                    "turnover": float(b.trading_profit_calculation.turnover),
                    "costOfSales": float(b.trading_profit_calculation.cost_of_sales),
                    "operatingExpenses": float(b.trading_profit_calculation.operating_expenses),
                    "tradingProfit": float(b.trading_profit_calculation.trading_profit),
                },
                "adjustments": {
                    "depreciationAddBack": float(b.adjustments.depreciation_add_back),
                    "capitalAllowances": float(b.adjustments.capital_allowances),
                    "netAdjustment": float(b.adjustments.net_adjustment),
                },
                "otherIncome": {
                    "interestReceived": float(b.other_income.interest_received),
                    "dividendsReceived": float(b.other_income.dividends_received),
                    "total": float(b.other_income.total),
                },
                "deductions": {
                    "lossesBroughtForward": float(b.deductions.losses_brought_forward),
                    "lossesUtilised": float(b.deductions.losses_utilised),
                    "groupRelief": float(b.deductions.group_relief),
                    "total": float(b.deductions.total),
                },
                "taxCalculation": {
                    "chargeableProfits": float(calc.chargeable_profits),
                    "numberOfAssociatedCompanies": calc.number_of_associated_companies,
                    "lowerLimit": float(calc.lower_limit),
                    "upperLimit": float(calc.upper_limit),
                    "applicableRate": float(calc.applicable_rate),
                    "taxBeforeReliefs": float(calc.tax_before_reliefs),
                    "marginalReliefApplied": calc.marginal_relief_applied,
                    "marginalReliefAmount": float(calc.marginal_relief_amount),
                },
                "reliefs": {
                    "rdRelief": float(b.reliefs.rd_relief),
                    "charitableDonations": float(b.reliefs.charitable_donations),
                    "patentBoxRelief": float(b.reliefs.patent_box_relief),
                    "total": float(b.reliefs.total),
                },
            },
            "summary": {
                "effectiveTaxRate": float(self.effective_tax_rate),
                "taxBalance": float(self.corporation_tax_due),
            },
        }


@dataclass(frozen=True)
class TaxReconciliation:
    """Differences between an independent tax input set and the ledger."""

    turnover_difference: Decimal
    expenses_difference: Decimal
    is_reconciled: bool


@dataclass(frozen=True)
class JournalRecord:
    """Journal entry as stored, with its declared origin."""

    entry: JournalEntry
    source: EntrySource
    company_id: str
    period_id: str
    recorded_at: datetime
