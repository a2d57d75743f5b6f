"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from ctengine.domain.entities import (
    EntrySource,
    JournalEntry,
    JournalRecord,
    Ledger,
)


class Database(ABC):
    """Abstract database interface for ctengine.

    Ledgers are stored per (company_id, period_id) key as whole snapshots.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Ledger operations
    @abstractmethod
    def get_ledger(self, company_id: str, period_id: str) -> Ledger:
        """Get the ledger snapshot for a key. Unknown keys return an empty ledger."""
        pass

    @abstractmethod
    def save_ledger(
        self,
        company_id: str,
        period_id: str,
        ledger: Ledger,
        journal: Optional[JournalEntry] = None,
        source: Optional[EntrySource] = None,
    ) -> None:
        """Replace the stored snapshot for a key.

        When ``journal`` is given it is recorded in the same commit.

        Raises:
            DuplicateEntryError: If the journal ID is already recorded for the key
        """
        pass

    @abstractmethod
    def list_ledger_keys(self) -> list[tuple[str, str]]:
        """List (company_id, period_id) keys that have a stored ledger."""
        pass

    # Journal operations
    @abstractmethod
    def get_journal_entry(
        self, company_id: str, period_id: str, entry_id: str
    ) -> Optional[JournalRecord]:
        """Get a recorded journal entry by its entry ID."""
        pass

    @abstractmethod
    def list_journal_entries(self, company_id: str, period_id: str) -> list[JournalRecord]:
        """List recorded journal entries for a key in recording order."""
        pass
