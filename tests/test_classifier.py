"""Tests for balance classification and financial statements."""

from decimal import Decimal

import pytest

from ctengine.domain.entities import EntrySource, Ledger, TrialBalanceEntry
from ctengine.domain.errors import LedgerUnbalancedError


def row(code, debit="0", credit="0", name=None):
    return TrialBalanceEntry(
        account_code=code,
        account_name=name or f"Account {code}",
        debit=Decimal(debit),
        credit=Decimal(credit),
        source=EntrySource.MANUAL_JOURNAL,
    )


@pytest.fixture
def trading_ledger():
    """Balanced ledger covering every classification."""
    return Ledger(
        entries=(
            row("1200", debit="60000"),
            row("1000", debit="20000"),
            row("2100", credit="8000"),
            row("3000", credit="1000"),
            row("4000", credit="150000"),
            row("4900", credit="2000"),
            row("5000", debit="50000"),
            row("6000", debit="25000"),
            row("6600", debit="5000"),
            row("9000", debit="1000"),
            row("3100", credit="0"),
        )
    )


def test_classify_buckets(classifier, trading_ledger):
    """Test net balances land in the right buckets with the right sign."""
    balances = classifier.classify(trading_ledger)

    assert balances.revenue == Decimal("152000")
    assert balances.expenses == Decimal("80000")
    assert balances.assets == Decimal("80000")
    assert balances.liabilities == Decimal("8000")
    assert balances.equity == Decimal("1000")
    assert balances.other == Decimal("1000")
    assert balances.total_debits == balances.total_credits == Decimal("161000")
    assert balances.is_balanced
    assert balances.difference == Decimal("0")


def test_classification_partitions_ledger(classifier, trading_ledger):
    """Test every row is counted in exactly one bucket."""
    b = classifier.classify(trading_ledger)

    credit_normal = b.revenue + b.liabilities + b.equity
    debit_normal = b.assets + b.expenses + b.other
    assert credit_normal - debit_normal == b.total_credits - b.total_debits


def test_contra_balances_reduce_bucket(classifier):
    """Test a debit on a revenue account reduces revenue."""
    ledger = Ledger(entries=(row("4000", debit="200", credit="1000"), row("1200", debit="800")))

    assert classifier.classify(ledger).revenue == Decimal("800")


def test_unknown_code_row_is_other(classifier):
    """Test rows created under an ad-hoc name are bucketed as Other."""
    ledger = Ledger(entries=(row("8100", debit="300", name="Crypto Holdings"), row("1200", credit="300")))

    balances = classifier.classify(ledger)

    assert balances.other == Decimal("300")
    assert balances.assets == Decimal("-300")


def test_penny_difference_is_balanced(classifier):
    ledger = Ledger(entries=(row("1200", debit="100.01"), row("4000", credit="100.00")))

    assert classifier.classify(ledger).is_balanced


def test_unbalanced_ledger_reports_difference(classifier):
    """Test a ledger with a 100.00 gap is flagged, not corrected."""
    ledger = Ledger(entries=(row("4000", credit="1000"), row("5000", debit="900")))

    balances = classifier.classify(ledger)

    assert not balances.is_balanced
    assert balances.difference == Decimal("-100")


def test_require_balanced_raises(classifier):
    ledger = Ledger(entries=(row("4000", credit="1000"), row("5000", debit="900")))

    with pytest.raises(LedgerUnbalancedError) as exc_info:
        classifier.require_balanced(ledger)

    assert exc_info.value.difference == Decimal("-100")
    assert "100.00" in str(exc_info.value)


def test_empty_ledger_is_balanced(classifier, empty_ledger):
    balances = classifier.classify(empty_ledger)

    assert balances.is_balanced
    assert balances.revenue == Decimal("0")


def test_net_for_prefix(classifier, trading_ledger):
    assert classifier.net_for_prefix(trading_ledger, "5") == Decimal("50000")
    assert classifier.net_for_prefix(trading_ledger, "6600") == Decimal("5000")


def test_build_statements(classifier, trading_ledger):
    """Test profit and loss and balance sheet totals."""
    statements = classifier.build_statements(trading_ledger)

    assert statements.revenue == Decimal("152000")
    assert statements.cost_of_sales == Decimal("50000")
    assert statements.gross_profit == Decimal("102000")
    assert statements.operating_expenses == Decimal("30000")
    assert statements.net_profit == Decimal("72000")
    assert statements.assets == Decimal("80000")
    assert statements.liabilities == Decimal("8000")
    assert statements.net_assets == Decimal("72000")
    assert statements.equity == Decimal("1000")


def test_build_statements_refuses_unbalanced_ledger(classifier):
    ledger = Ledger(entries=(row("4000", credit="1000"),))

    with pytest.raises(LedgerUnbalancedError):
        classifier.build_statements(ledger)
