"""Domain layer for ctengine application.

Services are imported from their own modules, e.g.
``ctengine.domain.trial_balance``. Only the error types are re-exported here,
since ``ctengine.utils`` depends on them.
"""

from ctengine.domain.errors import (
    BalanceError,
    ConflictError,
    DomainError,
    DuplicateEntryError,
    InvalidInputError,
    LedgerUnbalancedError,
    NotFoundError,
    UnknownAccountError,
    ValidationError,
)

__all__ = [
    "BalanceError",
    "ConflictError",
    "DomainError",
    "DuplicateEntryError",
    "InvalidInputError",
    "LedgerUnbalancedError",
    "NotFoundError",
    "UnknownAccountError",
    "ValidationError",
]
