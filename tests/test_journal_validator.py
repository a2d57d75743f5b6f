"""Tests for journal entry validation."""

from datetime import date
from decimal import Decimal

import pytest

from ctengine.domain.entities import JournalEntry, JournalLine
from ctengine.domain.errors import BalanceError, InvalidInputError, ValidationError
from ctengine.domain.journal_validator import journal_totals, validate_journal_entry


def test_balanced_entry_passes(sales_entry):
    """Test a balanced entry validates without error."""
    validate_journal_entry(sales_entry)


def test_unbalanced_entry_reports_difference(make_entry):
    """Test an unbalanced entry raises BalanceError carrying the difference."""
    entry = make_entry("J2", [("4000", "0", "1000"), ("5000", "900", "0")])

    with pytest.raises(BalanceError) as exc_info:
        validate_journal_entry(entry)

    error = exc_info.value
    assert error.debit_total == Decimal("900")
    assert error.credit_total == Decimal("1000")
    assert error.difference == Decimal("100.00")
    assert error.entry_id == "J2"
    assert "100.00" in str(error)
    assert isinstance(error, ValidationError)


def test_one_penny_rounding_is_tolerated(make_entry):
    """Test differences up to 0.01 are accepted as rounding."""
    entry = make_entry("J3", [("1200", "100.01", "0"), ("4000", "0", "100.00")])

    validate_journal_entry(entry)


def test_just_over_tolerance_is_rejected(make_entry):
    entry = make_entry("J4", [("1200", "100.02", "0"), ("4000", "0", "100.00")])

    with pytest.raises(BalanceError):
        validate_journal_entry(entry)


def test_entry_with_only_empty_lines_rejected(make_entry):
    """Test an entry whose lines are all zero is rejected."""
    entry = make_entry("J5", [("1200", "0", "0"), ("4000", "0", "0")])

    with pytest.raises(ValidationError, match="no lines"):
        validate_journal_entry(entry)


def test_entry_without_lines_rejected():
    entry = JournalEntry(id="J6", date=date(2024, 1, 1), description="", reference="", lines=())

    with pytest.raises(ValidationError):
        validate_journal_entry(entry)


def test_empty_account_code_names_line(make_entry):
    """Test a missing account code is reported with its line number."""
    entry = make_entry("J7", [("1200", "50", "0"), ("  ", "0", "50")])

    with pytest.raises(ValidationError, match="Line 2"):
        validate_journal_entry(entry)


def test_empty_line_without_code_is_ignored(make_entry):
    """Test an empty line is discarded before the account code check."""
    entry = make_entry("J8", [("1200", "50", "0"), ("4000", "0", "50"), ("", "0", "0")])

    validate_journal_entry(entry)


def test_negative_amount_rejected(make_entry):
    entry = make_entry("J9", [("1200", "-50", "0"), ("4000", "0", "-50")])

    with pytest.raises(InvalidInputError, match="cannot be negative"):
        validate_journal_entry(entry)


def test_fraction_of_a_penny_rejected(make_entry):
    """Test amounts finer than a penny are refused rather than rounded."""
    entry = make_entry("J11", [("1200", "10.555", "0"), ("4000", "0", "10.555")])

    with pytest.raises(InvalidInputError, match="Line 1 debit has more than two decimal places"):
        validate_journal_entry(entry)


def test_trailing_zeros_are_whole_pence(make_entry):
    entry = make_entry("J12", [("1200", "10.500", "0"), ("4000", "0", "10.5")])

    validate_journal_entry(entry)


def test_non_finite_amount_rejected_on_construction():
    """Test NaN and infinity never make it into a journal line."""
    with pytest.raises(InvalidInputError):
        JournalLine(account_code="1200", debit=float("nan"))
    with pytest.raises(InvalidInputError):
        JournalLine(account_code="1200", credit=Decimal("Infinity"))


def test_line_with_both_sides_is_allowed(make_entry):
    """Test a line carrying both a debit and a credit is structurally valid."""
    entry = make_entry("J10", [("1200", "100", "40"), ("4000", "0", "60")])

    validate_journal_entry(entry)


def test_journal_totals(make_entry):
    entry = make_entry("J11", [("1200", "100", "0"), ("6000", "25.50", "0"), ("4000", "0", "125.50")])

    assert journal_totals(entry) == (Decimal("125.50"), Decimal("125.50"))

