"""Journal entry validation.

Validation never touches a ledger. It either returns normally or raises, so a
rejected entry cannot be partially applied.
"""

from decimal import Decimal

from ctengine.domain.entities import JournalEntry, ZERO
from ctengine.domain.errors import (
    BalanceError,
    InvalidInputError,
    ValidationError,
    empty_account_code,
)
from ctengine.utils.amount_parser import to_pence

# Currency rounding tolerance between total debits and total credits
BALANCE_TOLERANCE = Decimal("0.01")


def journal_totals(entry: JournalEntry) -> tuple[Decimal, Decimal]:
    """Return (total debits, total credits) for an entry."""
    debits = sum((line.debit for line in entry.lines), ZERO)
    credits = sum((line.credit for line in entry.lines), ZERO)
    return debits, credits


def validate_journal_entry(entry: JournalEntry) -> None:
    """Validate a proposed journal entry.

    Args:
        entry: Journal entry to check

    Raises:
        InvalidInputError: If a line amount is negative, not finite or finer
            than a penny
        ValidationError: If the entry has no non-empty lines or a line has no
            account code
        BalanceError: If debits and credits differ by more than 0.01
    """
    for index, line in enumerate(entry.lines):
        try:
            to_pence(line.debit, f"Line {index + 1} debit")
            to_pence(line.credit, f"Line {index + 1} credit")
        except InvalidInputError as e:
            raise InvalidInputError(f"Journal entry '{entry.id}': {e}") from e

    if not entry.non_empty_lines:
        raise ValidationError(f"Journal entry '{entry.id}' has no lines with an amount")

    for index, line in enumerate(entry.lines):
        if line.is_empty:
            continue
        if not line.account_code or not line.account_code.strip():
            raise ValidationError(f"Journal entry '{entry.id}': {empty_account_code(index)}")

    debits, credits = journal_totals(entry)
    if abs(debits - credits) > BALANCE_TOLERANCE:
        raise BalanceError(debits, credits, entry_id=entry.id)
