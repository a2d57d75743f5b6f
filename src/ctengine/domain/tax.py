"""UK Corporation Tax computation.

Rates and limits (financial years from 1 April 2023):

- Small profits rate: 19% for chargeable profits up to the lower limit
- Main rate: 25% for chargeable profits at or above the upper limit
- Marginal relief between the limits, standard fraction 3/200

The limits are 50,000 and 250,000, divided by one plus the number of
associated companies and reduced proportionally for accounting periods
shorter than a year.
"""

from dataclasses import fields, replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from ctengine.config.logging import get_logger
from ctengine.domain.chart_of_accounts import DEPRECIATION_CODE
from ctengine.domain.classifier import COST_OF_SALES_PREFIX, BalanceClassifier
from ctengine.domain.entities import (
    ClassifiedBalances,
    Deductions,
    Ledger,
    OtherIncome,
    Reliefs,
    TaxAdjustments,
    TaxBreakdown,
    TaxCalculation,
    TaxComputationInput,
    TaxComputationResult,
    TaxReconciliation,
    TradingProfitCalculation,
    ZERO,
)
from ctengine.domain.errors import InvalidInputError
from ctengine.domain.journal_validator import BALANCE_TOLERANCE
from ctengine.utils.amount_parser import round_money, to_non_negative
from ctengine.utils.date_parser import parse_date, period_days

logger = get_logger(__name__)

SMALL_PROFITS_LIMIT = Decimal("50000")
UPPER_PROFITS_LIMIT = Decimal("250000")
SMALL_PROFITS_RATE = Decimal("0.19")
MAIN_RATE = Decimal("0.25")
MARGINAL_RELIEF_FRACTION = Decimal(3) / Decimal(200)

DAYS_IN_YEAR = 365
MAX_PERIOD_DAYS = 366

AMOUNT_FIELDS = (
    "turnover",
    "cost_of_sales",
    "operating_expenses",
    "interest_received",
    "dividends_received",
    "depreciation_add_back",
    "capital_allowances",
    "losses_brought_forward",
    "rd_relief_claim",
    "charitable_donations",
    "group_relief",
    "patent_box_relief",
)

# camelCase request keys -> TaxComputationInput fields
REQUEST_FIELDS = {
    "turnover": "turnover",
    "costOfSales": "cost_of_sales",
    "operatingExpenses": "operating_expenses",
    "interestReceived": "interest_received",
    "dividendsReceived": "dividends_received",
    "depreciationAddBack": "depreciation_add_back",
    "capitalAllowances": "capital_allowances",
    "lossesBroughtForward": "losses_brought_forward",
    "rdReliefClaim": "rd_relief_claim",
    "charitableDonations": "charitable_donations",
    "groupRelief": "group_relief",
    "patentBoxRelief": "patent_box_relief",
    "numberOfAssociatedCompanies": "number_of_associated_companies",
    "accountingPeriodStart": "accounting_period_start",
    "accountingPeriodEnd": "accounting_period_end",
}


def tax_input_from_dict(data: dict[str, Any]) -> TaxComputationInput:
    """Build a TaxComputationInput from a camelCase request body.

    Missing optional amounts default to zero. Unknown keys are rejected so
    that a misspelt field cannot silently become zero.

    Raises:
        InvalidInputError: If turnover is missing or a key is not recognised
    """
    unknown = sorted(set(data) - set(REQUEST_FIELDS))
    if unknown:
        raise InvalidInputError(f"Unknown tax input field(s): {', '.join(unknown)}")
    if data.get("turnover") is None:
        raise InvalidInputError("turnover is required")

    values: dict[str, Any] = {}
    for key, field_name in REQUEST_FIELDS.items():
        value = data.get(key)
        if value is None:
            continue
        if field_name in ("accounting_period_start", "accounting_period_end"):
            value = _parse_period_date(value, key)
        values[field_name] = value
    return TaxComputationInput(**values)


def _parse_period_date(value: Any, key: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_date(str(value))
    except ValueError as e:
        raise InvalidInputError(f"{key}: {e}") from e


def _optional_period_date(value: Any, key: str) -> Optional[date]:
    return None if value is None else _parse_period_date(value, key)


def _trading_figures(
    turnover: Decimal, cost_of_sales: Decimal, operating_expenses: Decimal
) -> tuple[Decimal, Decimal, Decimal]:
    """Fold net-credit expense and net-debit revenue buckets into the others.

    A balanced ledger can hold a supplier rebate larger than the expense it
    offsets, or sales returns larger than sales. Each such figure moves to
    the opposite side so every field stays non-negative while the trading
    profit is unchanged.
    """
    if cost_of_sales < 0:
        cost_of_sales, operating_expenses = ZERO, operating_expenses + cost_of_sales
    if operating_expenses < 0:
        cost_of_sales, operating_expenses = cost_of_sales + operating_expenses, ZERO
    if cost_of_sales < 0:
        # Expenses net to a credit overall and count as income
        turnover, cost_of_sales = turnover - cost_of_sales, ZERO
    if turnover < 0:
        turnover, operating_expenses = ZERO, operating_expenses - turnover
    return turnover, cost_of_sales, operating_expenses


class CorporationTaxComputer:
    """Computes chargeable profits and Corporation Tax due."""

    def __init__(self, classifier: Optional[BalanceClassifier] = None):
        """Initialize tax computer.

        Args:
            classifier: Balance classifier used for ledger-derived inputs
        """
        self.classifier = classifier if classifier is not None else BalanceClassifier()

    def validate(self, data: TaxComputationInput) -> TaxComputationInput:
        """Check inputs and return a copy with every amount as a Decimal.

        Raises:
            InvalidInputError: For negative or non-finite amounts, a bad
                associated-company count or an impossible accounting period
        """
        amounts = {name: to_non_negative(getattr(data, name), name) for name in AMOUNT_FIELDS}

        associated = data.number_of_associated_companies
        if associated is None:
            associated = 0
        if isinstance(associated, bool) or not isinstance(associated, (int, Decimal, float)):
            raise InvalidInputError(
                f"number_of_associated_companies must be a whole number, got {associated!r}"
            )
        try:
            whole = int(associated)
        except (ValueError, OverflowError):
            whole = None
        if whole is None or whole != associated or whole < 0:
            raise InvalidInputError(
                f"number_of_associated_companies must be a non-negative whole number, got {associated!r}"
            )

        start = _optional_period_date(data.accounting_period_start, "accounting_period_start")
        end = _optional_period_date(data.accounting_period_end, "accounting_period_end")
        if start is not None and end is not None:
            if end < start:
                raise InvalidInputError("Accounting period end date must be after start date")
            if period_days(start, end) > MAX_PERIOD_DAYS:
                raise InvalidInputError(
                    f"Accounting period cannot exceed {MAX_PERIOD_DAYS} days"
                )

        return replace(
            data,
            number_of_associated_companies=whole,
            accounting_period_start=start,
            accounting_period_end=end,
            **amounts,
        )

    def limits(
        self,
        number_of_associated_companies: int = 0,
        accounting_period_start: Optional[date] = None,
        accounting_period_end: Optional[date] = None,
    ) -> tuple[Decimal, Decimal]:
        """Lower and upper limits after associated-company and short-period adjustment."""
        divisor = Decimal(1 + number_of_associated_companies)
        fraction = Decimal(1)
        if accounting_period_start is not None and accounting_period_end is not None:
            days = period_days(accounting_period_start, accounting_period_end)
            if days < DAYS_IN_YEAR:
                fraction = Decimal(days) / Decimal(DAYS_IN_YEAR)
        return (
            SMALL_PROFITS_LIMIT / divisor * fraction,
            UPPER_PROFITS_LIMIT / divisor * fraction,
        )

    def compute(self, data: TaxComputationInput) -> TaxComputationResult:
        """Compute Corporation Tax for one accounting period.

        Args:
            data: Computation inputs

        Returns:
            TaxComputationResult with every monetary figure rounded half-up
            to pence

        Raises:
            InvalidInputError: If the input fails validation
        """
        data = self.validate(data)

        # Trading profit, with a loss contributing nothing to chargeable profits
        trading_profit = data.turnover - data.cost_of_sales - data.operating_expenses
        other_income = data.interest_received + data.dividends_received
        net_adjustment = data.depreciation_add_back - data.capital_allowances
        profits_before_losses = max(ZERO, trading_profit) + other_income + net_adjustment

        losses_utilised = min(data.losses_brought_forward, max(ZERO, profits_before_losses))
        chargeable_profits = max(
            ZERO, profits_before_losses - losses_utilised - data.group_relief
        )

        lower_limit, upper_limit = self.limits(
            data.number_of_associated_companies,
            data.accounting_period_start,
            data.accounting_period_end,
        )

        marginal_relief = ZERO
        marginal_relief_applied = False
        if chargeable_profits <= lower_limit:
            rate = SMALL_PROFITS_RATE
        elif chargeable_profits >= upper_limit:
            rate = MAIN_RATE
        else:
            rate = MAIN_RATE
            marginal_relief = (upper_limit - chargeable_profits) * MARGINAL_RELIEF_FRACTION
            marginal_relief_applied = True
        tax_before_reliefs = chargeable_profits * rate

        total_reliefs = data.rd_relief_claim + data.charitable_donations + data.patent_box_relief

        # Round the components first so the breakdown adds up to the figure due
        tax_before_reliefs = round_money(tax_before_reliefs)
        marginal_relief = round_money(marginal_relief)
        total_reliefs = round_money(total_reliefs)
        corporation_tax_due = max(ZERO, tax_before_reliefs - marginal_relief - total_reliefs)

        chargeable_profits = round_money(chargeable_profits)
        effective_tax_rate = ZERO
        if chargeable_profits > 0:
            effective_tax_rate = (corporation_tax_due / chargeable_profits).quantize(
                Decimal("0.0001"), rounding=ROUND_HALF_UP
            )

        breakdown = TaxBreakdown(
            trading_profit_calculation=TradingProfitCalculation(
                turnover=round_money(data.turnover),
                cost_of_sales=round_money(data.cost_of_sales),
                operating_expenses=round_money(data.operating_expenses),
                trading_profit=round_money(trading_profit),
            ),
            adjustments=TaxAdjustments(
                depreciation_add_back=round_money(data.depreciation_add_back),
                capital_allowances=round_money(data.capital_allowances),
                net_adjustment=round_money(net_adjustment),
            ),
            other_income=OtherIncome(
                interest_received=round_money(data.interest_received),
                dividends_received=round_money(data.dividends_received),
                total=round_money(other_income),
            ),
            deductions=Deductions(
                losses_brought_forward=round_money(data.losses_brought_forward),
                losses_utilised=round_money(losses_utilised),
                group_relief=round_money(data.group_relief),
                total=round_money(losses_utilised + data.group_relief),
            ),
            tax_calculation=TaxCalculation(
                chargeable_profits=chargeable_profits,
                number_of_associated_companies=data.number_of_associated_companies,
                lower_limit=round_money(lower_limit),
                upper_limit=round_money(upper_limit),
                applicable_rate=rate,
                tax_before_reliefs=tax_before_reliefs,
                marginal_relief_applied=marginal_relief_applied,
                marginal_relief_amount=marginal_relief,
            ),
            reliefs=Reliefs(
                rd_relief=round_money(data.rd_relief_claim),
                charitable_donations=round_money(data.charitable_donations),
                patent_box_relief=round_money(data.patent_box_relief),
                total=total_reliefs,
            ),
        )

        logger.info(
            "tax_computed",
            chargeable_profits=str(chargeable_profits),
            rate=str(rate),
            marginal_relief_applied=marginal_relief_applied,
            corporation_tax_due=str(corporation_tax_due),
        )

        return TaxComputationResult(
            chargeable_profits=chargeable_profits,
            corporation_tax_rate=rate,
            corporation_tax_before_reliefs=tax_before_reliefs,
            total_reliefs=total_reliefs,
            corporation_tax_due=corporation_tax_due,
            breakdown=breakdown,
            effective_tax_rate=effective_tax_rate,
        )

    def input_from_ledger(
        self,
        ledger: Ledger,
        add_back_depreciation: bool = True,
        **overrides: Any,
    ) -> TaxComputationInput:
        """Derive trading figures from a balanced ledger.

        Turnover is the revenue bucket, cost of sales the 5xxx range and
        operating expenses every other expense. Depreciation booked to 6600 is
        added back unless ``add_back_depreciation`` is False. Any other
        TaxComputationInput field can be passed as a keyword.

        A bucket that nets the other way, such as a rebate larger than the
        expense it offsets, is folded into the opposite side rather than
        passed on as a negative figure.

        Raises:
            LedgerUnbalancedError: If the ledger does not balance
        """
        balances = self.classifier.require_balanced(ledger)
        cost_of_sales = self.classifier.net_for_prefix(ledger, COST_OF_SALES_PREFIX)
        turnover, cost_of_sales, operating_expenses = _trading_figures(
            balances.revenue, cost_of_sales, balances.expenses - cost_of_sales
        )
        values: dict[str, Any] = {
            "turnover": turnover,
            "cost_of_sales": cost_of_sales,
            "operating_expenses": operating_expenses,
        }
        if add_back_depreciation:
            # A net credit on the depreciation account is a write-back, not an add-back
            values["depreciation_add_back"] = max(
                ZERO, self.classifier.net_for_prefix(ledger, DEPRECIATION_CODE)
            )

        known = {f.name for f in fields(TaxComputationInput)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise InvalidInputError(f"Unknown tax input field(s): {', '.join(unknown)}")
        values.update(overrides)
        return TaxComputationInput(**values)

    def compute_from_ledger(self, ledger: Ledger, **overrides: Any) -> TaxComputationResult:
        """Compute tax from a balanced ledger.

        Raises:
            LedgerUnbalancedError: If the ledger does not balance
        """
        return self.compute(self.input_from_ledger(ledger, **overrides))

    def reconcile(
        self, data: TaxComputationInput, balances: ClassifiedBalances
    ) -> TaxReconciliation:
        """Compare an independently supplied input set against ledger figures."""
        data = self.validate(data)
        turnover_difference = data.turnover - balances.revenue
        expenses_difference = (data.cost_of_sales + data.operating_expenses) - balances.expenses
        return TaxReconciliation(
            turnover_difference=round_money(turnover_difference),
            expenses_difference=round_money(expenses_difference),
            is_reconciled=(
                abs(turnover_difference) <= BALANCE_TOLERANCE
                and abs(expenses_difference) <= BALANCE_TOLERANCE
            ),
        )
