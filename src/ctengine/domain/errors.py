"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InvalidInputError(ValidationError):
    """Negative, non-finite or otherwise unusable numeric input."""


class BalanceError(ValidationError):
    """Journal entry debits and credits differ by more than the tolerance."""

    def __init__(
        self,
        debit_total: Decimal,
        credit_total: Decimal,
        entry_id: Optional[str] = None,
    ):
        self.debit_total = debit_total
        self.credit_total = credit_total
        self.difference = abs(debit_total - credit_total)
        self.entry_id = entry_id
        super().__init__(journal_unbalanced(debit_total, credit_total, entry_id))


class UnknownAccountError(NotFoundError):
    """Account code has no taxonomy match and no override."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(unknown_account(code))


class DuplicateEntryError(ConflictError):
    """Entry ID has already been applied to the ledger.

    Callers resolve this as a no-op; it is never shown to users as a failure.
    """

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(duplicate_entry(entry_id))


class LedgerUnbalancedError(DomainError):
    """Figures were requested from a ledger whose debits and credits differ."""

    def __init__(self, total_debits: Decimal, total_credits: Decimal):
        self.total_debits = total_debits
        self.total_credits = total_credits
        self.difference = total_debits - total_credits
        super().__init__(ledger_unbalanced(total_debits, total_credits))


def journal_unbalanced(
    debit_total: Decimal, credit_total: Decimal, entry_id: Optional[str] = None
) -> str:
    """Return message for a journal entry that does not balance."""
    subject = f"Journal entry '{entry_id}'" if entry_id else "Journal entry"
    difference = abs(debit_total - credit_total)
    return (
        f"{subject} does not balance: debits {debit_total:.2f}, "
        f"credits {credit_total:.2f}, difference {difference:.2f}"
    )


def unknown_account(code: str) -> str:
    """Return message for an unclassifiable account code."""
    return (
        f"Account code '{code}' is not in the chart of accounts. "
        "Register the code or supply an account name."
    )


def duplicate_entry(entry_id: str) -> str:
    """Return message for a replayed journal entry."""
    return f"Journal entry '{entry_id}' has already been applied"


def ledger_unbalanced(total_debits: Decimal, total_credits: Decimal) -> str:
    """Return message when a ledger cannot be used for figures."""
    difference = total_debits - total_credits
    return (
        f"Trial balance is out of balance by {abs(difference):.2f} "
        f"(debits {total_debits:.2f}, credits {total_credits:.2f})"
    )


def empty_account_code(line_index: int) -> str:
    """Return message for a journal line without an account code."""
    return f"Line {line_index + 1}: account code is required"


def journal_entry_not_found(entry_id: str, company_id: str, period_id: str) -> str:
    """Return message for a missing journal entry."""
    return f"Journal entry '{entry_id}' not found for company '{company_id}' period '{period_id}'"
