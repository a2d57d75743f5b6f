"""Balance classification into financial-statement buckets."""

from decimal import Decimal
from typing import Optional

from ctengine.config.logging import get_logger
from ctengine.domain.chart_of_accounts import DEFAULT_CHART, ChartOfAccounts
from ctengine.domain.entities import (
    Classification,
    ClassifiedBalances,
    FinancialStatements,
    Ledger,
    TrialBalanceEntry,
    ZERO,
)
from ctengine.domain.errors import LedgerUnbalancedError, UnknownAccountError
from ctengine.domain.journal_validator import BALANCE_TOLERANCE

logger = get_logger(__name__)

# Credit-normal buckets take the net balance as is, debit-normal ones negate it
CREDIT_NORMAL = frozenset(
    {Classification.REVENUE, Classification.LIABILITY, Classification.EQUITY}
)

COST_OF_SALES_PREFIX = "5"


class BalanceClassifier:
    """Buckets net account balances and checks debit/credit equality."""

    def __init__(self, chart: Optional[ChartOfAccounts] = None):
        """Initialize balance classifier.

        Args:
            chart: Chart of accounts used to classify codes
        """
        self.chart = chart if chart is not None else DEFAULT_CHART

    def classification_of(self, entry: TrialBalanceEntry) -> Classification:
        """Classification of a trial balance row.

        Rows merged under an ad-hoc name have no taxonomy match and land in
        ``Other`` rather than failing here.
        """
        try:
            return self.chart.classify(entry.account_code)
        except UnknownAccountError:
            return Classification.OTHER

    def classify(self, ledger: Ledger) -> ClassifiedBalances:
        """Bucket a ledger's balances.

        Args:
            ledger: Ledger snapshot

        Returns:
            ClassifiedBalances with bucket totals and the balance check
        """
        buckets = {classification: ZERO for classification in Classification}
        total_debits = ZERO
        total_credits = ZERO

        for entry in ledger.entries:
            total_debits += entry.debit
            total_credits += entry.credit
            classification = self.classification_of(entry)
            if classification in CREDIT_NORMAL:
                buckets[classification] += entry.net_balance
            else:
                buckets[classification] += -entry.net_balance

        return ClassifiedBalances(
            revenue=buckets[Classification.REVENUE],
            expenses=buckets[Classification.EXPENSE],
            assets=buckets[Classification.ASSET],
            liabilities=buckets[Classification.LIABILITY],
            equity=buckets[Classification.EQUITY],
            other=buckets[Classification.OTHER],
            total_debits=total_debits,
            total_credits=total_credits,
            is_balanced=abs(total_debits - total_credits) <= BALANCE_TOLERANCE,
        )

    def require_balanced(self, ledger: Ledger) -> ClassifiedBalances:
        """Classify a ledger, refusing to return figures if it is unbalanced.

        Raises:
            LedgerUnbalancedError: If debits and credits differ by more than 0.01
        """
        balances = self.classify(ledger)
        if not balances.is_balanced:
            logger.warning(
                "ledger_unbalanced",
                total_debits=str(balances.total_debits),
                total_credits=str(balances.total_credits),
                difference=str(balances.difference),
            )
            raise LedgerUnbalancedError(balances.total_debits, balances.total_credits)
        return balances

    def net_for_prefix(self, ledger: Ledger, prefix: str) -> Decimal:
        """Debit-normal net balance of rows whose code starts with prefix."""
        return sum(
            (-entry.net_balance for entry in ledger.entries if entry.account_code.startswith(prefix)),
            ZERO,
        )

    def build_statements(self, ledger: Ledger) -> FinancialStatements:
        """Headline profit and loss and balance sheet figures.

        Cost of sales is the 5xxx range; every other expense is operating.

        Raises:
            LedgerUnbalancedError: If the ledger does not balance
        """
        balances = self.require_balanced(ledger)
        cost_of_sales = self.net_for_prefix(ledger, COST_OF_SALES_PREFIX)
        operating_expenses = balances.expenses - cost_of_sales
        gross_profit = balances.revenue - cost_of_sales
        return FinancialStatements(
            revenue=balances.revenue,
            cost_of_sales=cost_of_sales,
            gross_profit=gross_profit,
            operating_expenses=operating_expenses,
            net_profit=gross_profit - operating_expenses,
            assets=balances.assets,
            liabilities=balances.liabilities,
            net_assets=balances.assets - balances.liabilities,
            equity=balances.equity,
        )
