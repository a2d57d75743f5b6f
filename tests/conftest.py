"""Shared pytest fixtures for ctengine tests."""

import json
import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from ctengine.database.factories import create_sqlite_database
from ctengine.domain.classifier import BalanceClassifier
from ctengine.domain.entities import JournalEntry, JournalLine, Ledger
from ctengine.domain.ledger import LedgerAggregator
from ctengine.domain.tax import CorporationTaxComputer
from ctengine.domain.trial_balance import TrialBalanceService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def aggregator():
    """Create a LedgerAggregator with the standard chart."""
    return LedgerAggregator()


@pytest.fixture
def classifier():
    """Create a BalanceClassifier with the standard chart."""
    return BalanceClassifier()


@pytest.fixture
def tax_computer():
    """Create a CorporationTaxComputer."""
    return CorporationTaxComputer()


@pytest.fixture
def trial_balance_service(temp_db):
    """Create a TrialBalanceService with a temporary database."""
    return TrialBalanceService(temp_db)


@pytest.fixture
def empty_ledger():
    return Ledger()


@pytest.fixture
def make_entry():
    """Factory for journal entries from (code, debit, credit) tuples."""

    def _make_entry(entry_id, lines, reference=None, description="Test entry", entry_date=None):
        return JournalEntry(
            id=entry_id,
            date=entry_date or date(2024, 3, 31),
            description=description,
            reference=reference if reference is not None else f"REF-{entry_id}",
            lines=tuple(
                JournalLine(account_code=code, debit=Decimal(str(debit)), credit=Decimal(str(credit)))
                for code, debit, credit in lines
            ),
        )

    return _make_entry


@pytest.fixture
def sales_entry(make_entry):
    """Balanced cash sale: debit bank, credit sales."""
    return make_entry("J1", [("1200", "1000.00", "0"), ("4000", "0", "1000.00")])


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document to a temporary file and return its path."""

    def _write_json(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)

    return _write_json
